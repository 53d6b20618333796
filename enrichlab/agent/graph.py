"""
LangGraph ITER-RETGEN loop: retrieve → generate → (retrieve again or END).

Iteration 1 retrieves with the question alone; every later iteration retrieves
with the question plus the previous generation, so the draft answer steers
which documents come back next.
"""

import logging
from typing import Any, TypedDict

from langgraph.graph import END, StateGraph

from enrichlab.agent.chains import run_chain
from enrichlab.agent.prompts import ITER_RETGEN_TEMPLATE, NO_DOCUMENTS
from enrichlab.core.config import ITER_RETGEN_ITERATIONS, MAX_ITER_RETGEN_ITERATIONS, RETRIEVE_TOP_K
from enrichlab.services.retrieval_service import retrieve_context

logger = logging.getLogger(__name__)


class IterRetGenState(TypedDict):
    query: str
    generation: str
    retrieval_query: str
    retrieved_chunks: list
    iteration: int
    max_iterations: int
    top_k: int
    temperature: float | None
    steps: list  # list of {"iteration", "retrieval_query", "sources", "generation"}


def retrieval_query_for(query: str, previous_generation: str) -> str:
    """Query used for retrieval: the question, plus the last generation when there is one."""
    previous_generation = (previous_generation or "").strip()
    if not previous_generation:
        return query
    return f"{query}\n{previous_generation}"


def format_documents(chunks: list) -> str:
    """Numbered document block for the generation prompt."""
    if not chunks:
        return NO_DOCUMENTS
    lines = []
    for i, c in enumerate(chunks, start=1):
        source = (c.get("metadata") or {}).get("source", "")
        lines.append(f"[{i}] ({source}) {(c.get('text') or '').strip()}")
    return "\n\n".join(lines)


def _retrieve_node(state: IterRetGenState) -> dict:
    it = state.get("iteration") or 0
    q = retrieval_query_for(state["query"], state.get("generation") or "")
    logger.info("[graph:retrieve] IN  iteration=%d retrieval_query_len=%d", it + 1, len(q))
    chunks = retrieve_context(q, top_k=state.get("top_k") or RETRIEVE_TOP_K)
    logger.info("[graph:retrieve] OUT iteration=%d chunks=%d", it + 1, len(chunks))
    return {"retrieved_chunks": chunks, "retrieval_query": q}


def _generate_node(state: IterRetGenState) -> dict:
    it = (state.get("iteration") or 0) + 1
    chunks = state.get("retrieved_chunks") or []
    generation = run_chain(
        ITER_RETGEN_TEMPLATE,
        {"documents": format_documents(chunks), "query": state["query"]},
        temperature=state.get("temperature"),
    )
    logger.info("[graph:generate] OUT iteration=%d generation_len=%d", it, len(generation))
    step = {
        "iteration": it,
        "retrieval_query": state.get("retrieval_query") or state["query"],
        "sources": [(c.get("metadata") or {}).get("source", "") for c in chunks],
        "generation": generation,
    }
    return {
        "generation": generation,
        "iteration": it,
        "steps": list(state.get("steps") or []) + [step],
    }


def _route_after_generate(state: IterRetGenState) -> str:
    it = state.get("iteration") or 0
    next_node = "retrieve" if it < state["max_iterations"] else END
    logger.info("[graph:route] iteration=%d max=%d -> %s", it, state["max_iterations"], next_node)
    return next_node


def build_graph():
    """Build and compile the retrieve/generate loop."""
    graph = StateGraph(IterRetGenState)
    graph.add_node("retrieve", _retrieve_node)
    graph.add_node("generate", _generate_node)
    graph.set_entry_point("retrieve")
    graph.add_edge("retrieve", "generate")
    graph.add_conditional_edges("generate", _route_after_generate)
    return graph.compile()


def _initial_state(query: str, iterations: int, top_k: int, temperature: float | None) -> IterRetGenState:
    if not query or not str(query).strip():
        raise ValueError("query is required")
    if not 1 <= int(iterations) <= MAX_ITER_RETGEN_ITERATIONS:
        raise ValueError(f"iterations must be between 1 and {MAX_ITER_RETGEN_ITERATIONS}")
    return {
        "query": str(query).strip(),
        "generation": "",
        "retrieval_query": "",
        "retrieved_chunks": [],
        "iteration": 0,
        "max_iterations": int(iterations),
        "top_k": top_k,
        "temperature": temperature,
        "steps": [],
    }


def _unique_sources(steps: list) -> list[str]:
    seen: dict[str, None] = {}
    for step in steps:
        for s in step.get("sources") or []:
            if s:
                seen.setdefault(s, None)
    return list(seen)


def run_iter_retgen(
    query: str,
    iterations: int = ITER_RETGEN_ITERATIONS,
    top_k: int = RETRIEVE_TOP_K,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Run ITER-RETGEN synchronously. Returns answer, iterations, sources, steps."""
    initial = _initial_state(query, iterations, top_k, temperature)
    logger.info("[run_iter_retgen] START query=%r iterations=%d", initial["query"], iterations)
    final = build_graph().invoke(initial)
    steps = final.get("steps") or []
    answer = (final.get("generation") or "").strip()
    logger.info("[run_iter_retgen] END iterations=%d answer_len=%d", final.get("iteration") or 0, len(answer))
    return {
        "answer": answer,
        "iterations": final.get("iteration") or 0,
        "sources": _unique_sources(steps),
        "steps": steps,
    }


def run_iter_retgen_stream(
    query: str,
    iterations: int = ITER_RETGEN_ITERATIONS,
    top_k: int = RETRIEVE_TOP_K,
    temperature: float | None = None,
):
    """
    Run ITER-RETGEN and yield events as each node finishes.
    Each yield is {"event": "retrieval"|"generation"|"answer"|"error", "data": ...}.
    """
    try:
        initial = _initial_state(query, iterations, top_k, temperature)
    except ValueError as e:
        yield {"event": "error", "data": str(e)}
        return
    last_generation = ""
    try:
        for event in build_graph().stream(initial):
            for node_name, update in event.items():
                if node_name == "retrieve":
                    chunks = update.get("retrieved_chunks", [])
                    yield {
                        "event": "retrieval",
                        "data": {"sources": [(c.get("metadata") or {}).get("source", "") for c in chunks]},
                    }
                elif node_name == "generate":
                    last_generation = update.get("generation", "")
                    yield {
                        "event": "generation",
                        "data": {"iteration": update.get("iteration", 0), "text": last_generation},
                    }
    except Exception as e:
        logger.exception("[run_iter_retgen_stream] stream failed")
        yield {"event": "error", "data": str(e)}
        return
    yield {"event": "answer", "data": last_generation}
