"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from enrichlab.api.handlers import (
    handle_coverage,
    handle_enrich,
    handle_get_manifest,
    handle_run_workflow,
)
from enrichlab.agent.graph import run_iter_retgen_stream
from enrichlab.agent.llm import active_backend, active_model
from enrichlab.core.config import ITER_RETGEN_ITERATIONS, STRATEGIES
from enrichlab.schemas.enrich import EnrichRequest, EnrichResponse
from enrichlab.schemas.workflow import WorkflowRequest, WorkflowResponse
from enrichlab.services.retrieval_service import list_sources, reload_index

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Prompt enrichment backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True, "llm_backend": active_backend(), "model": active_model()}


# --- Enrichment ---

@router.get("/strategies", tags=["enrichment"], summary="List enrichment strategies")
def get_strategies() -> dict:
    return {"strategies": list(STRATEGIES)}


@router.post(
    "/enrich",
    response_model=EnrichResponse,
    tags=["enrichment"],
    summary="Answer a query with one enrichment strategy",
    description="baseline: no expansion; query_enrichment: rewrite then answer; iter_retgen: alternate retrieval and generation. 400 on invalid input, 503 when no LLM credential is configured.",
)
def post_enrich(body: EnrichRequest) -> EnrichResponse:
    logger.info("[api:post_enrich] IN  strategy=%s query=%r", body.strategy, body.query[:200])
    return handle_enrich(body)


def _sse_generator(body: EnrichRequest):
    """Yield Server-Sent Events for an ITER-RETGEN run."""
    iterations = body.iterations or ITER_RETGEN_ITERATIONS
    for evt in run_iter_retgen_stream(body.query, iterations=iterations, temperature=body.temperature):
        yield f"event: {evt['event']}\ndata: {json.dumps(evt.get('data'))}\n\n"


@router.post(
    "/enrich/stream",
    tags=["enrichment"],
    summary="Stream an ITER-RETGEN run (SSE)",
    description="Events: retrieval, generation, answer, error. The strategy field is ignored; the stream always runs iter_retgen.",
)
def post_enrich_stream(body: EnrichRequest) -> StreamingResponse:
    logger.info("[api:post_enrich_stream] IN  query=%r", body.query[:200])
    return StreamingResponse(
        _sse_generator(body),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )


# --- Corpus ---

@router.get("/corpus/sources", tags=["corpus"], summary="List documents in the retrieval corpus")
def get_corpus_sources() -> dict:
    return {"sources": list_sources()}


@router.post("/corpus/reload", tags=["corpus"], summary="Re-read the corpus directory")
def post_corpus_reload() -> dict:
    index = reload_index()
    return {"sources": index.sources(), "chunks": len(index.chunks)}


# --- Reports ---

@router.get("/reports", tags=["reports"], summary="Manifest of generated reports")
def get_reports() -> dict:
    return handle_get_manifest()


@router.get("/reports/coverage", tags=["reports"], summary="Check that tracked and expected reports exist")
def get_reports_coverage() -> dict:
    return handle_coverage()


@router.post(
    "/workflow/run",
    response_model=WorkflowResponse,
    tags=["reports"],
    summary="Run the documentation workflow",
    description="Runs the selected agent roles phase by phase, writes reports and updates the manifest. Failed roles are reported, not raised.",
)
async def post_workflow_run(body: WorkflowRequest) -> WorkflowResponse:
    logger.info("[api:post_workflow_run] IN  topic=%r roles=%s", body.topic, body.roles)
    return await handle_run_workflow(body)
