"""
Minimal MCP-style tool server: exposes enrichment, corpus search and the report
manifest as a standardized tool interface for external agent runtimes.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from enrichlab.api.handlers import handle_coverage, handle_enrich, handle_get_manifest
from enrichlab.schemas.enrich import EnrichRequest, StrategyName
from enrichlab.services.retrieval_service import retrieve_context

logger = logging.getLogger(__name__)

# MCP tool schema for discovery / documentation
tools = [
    {
        "name": "enrich_query",
        "description": "Answer a query with an enrichment strategy (baseline, iter_retgen, query_enrichment)",
        "input_schema": {"query": "string", "strategy": "string"},
    },
    {
        "name": "search_documents",
        "description": "Keyword search over the local retrieval corpus",
        "input_schema": {"query": "string"},
    },
    {
        "name": "list_reports",
        "description": "Tracked reports, workflow status and run parameters from the manifest",
        "input_schema": {},
    },
    {
        "name": "check_coverage",
        "description": "Which tracked or expected reports are missing on disk",
        "input_schema": {},
    },
]

mcp_router = APIRouter(tags=["mcp"])


@mcp_router.get("/tools", summary="MCP tool discovery")
def mcp_list_tools() -> dict[str, list[dict[str, Any]]]:
    return {"tools": tools}


class EnrichQueryRequest(BaseModel):
    """Request body for MCP tool enrich_query."""
    query: str = ""
    strategy: StrategyName = "baseline"


@mcp_router.post("/tools/enrich_query", summary="MCP tool: enrich_query")
def mcp_enrich_query(body: EnrichQueryRequest) -> dict[str, Any]:
    """Empty query returns an empty answer without calling the model."""
    logger.info("MCP tool called: enrich_query")
    query = (body.query or "").strip()
    if not query:
        return {"answer": "", "strategy": body.strategy}
    result = handle_enrich(EnrichRequest(query=query, strategy=body.strategy))
    return {"answer": result.answer, "strategy": result.strategy, "enriched_query": result.enriched_query}


class SearchDocumentsRequest(BaseModel):
    """Request body for MCP tool search_documents."""
    query: str = ""


@mcp_router.post("/tools/search_documents", summary="MCP tool: search_documents")
def mcp_search_documents(body: SearchDocumentsRequest) -> dict[str, list[dict[str, Any]]]:
    logger.info("MCP tool called: search_documents")
    query = (body.query or "").strip()
    if not query:
        return {"results": []}
    chunks = retrieve_context(query)
    return {
        "results": [
            {"id": c.get("id"), "text": c.get("text", ""), "source": (c.get("metadata") or {}).get("source", "")}
            for c in chunks
        ]
    }


@mcp_router.post("/tools/list_reports", summary="MCP tool: list_reports")
def mcp_list_reports() -> dict[str, Any]:
    logger.info("MCP tool called: list_reports")
    return handle_get_manifest()


@mcp_router.post("/tools/check_coverage", summary="MCP tool: check_coverage")
def mcp_check_coverage() -> dict[str, Any]:
    logger.info("MCP tool called: check_coverage")
    return handle_coverage()
