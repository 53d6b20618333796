"""
Prompt enrichment strategies.

- baseline: the query is answered as-is (no expansion).
- query_enrichment: the LLM first rewrites the query with context, synonyms and
  constraints, then answers it.
- iter_retgen: alternating retrieval and generation (see agent.graph).

Called by the API, scripts and orchestrator; no HTTP here.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from enrichlab.agent.chains import run_chain
from enrichlab.agent.graph import run_iter_retgen as _run_iter_retgen_graph
from enrichlab.agent.prompts import BASELINE_TEMPLATE, ENRICHED_ANSWER_TEMPLATE, ENRICH_QUERY_TEMPLATE
from enrichlab.core.config import ITER_RETGEN_ITERATIONS, RETRIEVE_TOP_K, STRATEGIES

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentResult:
    strategy: str
    query: str
    answer: str
    enriched_query: str | None = None
    iterations: int = 0
    sources: list[str] = field(default_factory=list)
    steps: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _require_query(query: str) -> str:
    if not query or not str(query).strip():
        raise ValueError("query is required")
    return str(query).strip()


def clean_enriched_query(raw: str, fallback: str) -> str:
    """Keep the first block of the rewrite, drop wrapping quotes; fall back to the original query."""
    text = (raw or "").strip()
    if "\n\n" in text:
        text = text.split("\n\n")[0].strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text or fallback


def run_baseline(query: str, temperature: float | None = None) -> EnrichmentResult:
    q = _require_query(query)
    answer = run_chain(BASELINE_TEMPLATE, {"query": q}, temperature=temperature)
    return EnrichmentResult(strategy="baseline", query=q, answer=answer)


def run_query_enrichment(query: str, temperature: float | None = None) -> EnrichmentResult:
    """Two chain calls: enrich the query, then answer the original with the enriched version."""
    q = _require_query(query)
    raw = run_chain(ENRICH_QUERY_TEMPLATE, {"query": q}, temperature=temperature)
    enriched = clean_enriched_query(raw, q)
    logger.info("[enrichment:query_enrichment] enriched_query=%r", enriched[:300])
    answer = run_chain(
        ENRICHED_ANSWER_TEMPLATE,
        {"query": q, "enriched_query": enriched},
        temperature=temperature,
    )
    return EnrichmentResult(
        strategy="query_enrichment",
        query=q,
        answer=answer,
        enriched_query=enriched,
        steps=[{"step": "enrich", "output": enriched}, {"step": "answer", "output": answer}],
    )


def run_iter_retgen(
    query: str,
    iterations: int = ITER_RETGEN_ITERATIONS,
    top_k: int = RETRIEVE_TOP_K,
    temperature: float | None = None,
) -> EnrichmentResult:
    q = _require_query(query)
    out = _run_iter_retgen_graph(q, iterations=iterations, top_k=top_k, temperature=temperature)
    return EnrichmentResult(
        strategy="iter_retgen",
        query=q,
        answer=out["answer"],
        iterations=out["iterations"],
        sources=out["sources"],
        steps=out["steps"],
    )


def run_strategy(
    name: str,
    query: str,
    iterations: int | None = None,
    temperature: float | None = None,
) -> EnrichmentResult:
    """Dispatch to a strategy by name. Raises ValueError for unknown names or empty queries."""
    logger.info("[enrichment:run_strategy] IN  strategy=%s query_len=%d", name, len(query or ""))
    if name == "baseline":
        result = run_baseline(query, temperature=temperature)
    elif name == "query_enrichment":
        result = run_query_enrichment(query, temperature=temperature)
    elif name == "iter_retgen":
        result = run_iter_retgen(
            query,
            iterations=ITER_RETGEN_ITERATIONS if iterations is None else iterations,
            temperature=temperature,
        )
    else:
        raise ValueError(f"Unknown strategy {name!r}. Choose one of: {', '.join(STRATEGIES)}")
    logger.info("[enrichment:run_strategy] OUT strategy=%s answer_len=%d", name, len(result.answer))
    return result
