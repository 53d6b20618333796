"""Schemas for the enrichment endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field

StrategyName = Literal["baseline", "iter_retgen", "query_enrichment"]


class EnrichRequest(BaseModel):
    """Request body for POST /enrich and POST /enrich/stream."""

    query: str = Field(..., min_length=1, description="User question to answer.")
    strategy: StrategyName = Field("baseline", description="Enrichment strategy.")
    iterations: int | None = Field(None, ge=1, description="ITER-RETGEN rounds (iter_retgen only).")
    temperature: float | None = Field(None, ge=0.0, le=2.0, description="Sampling temperature override.")


class EnrichResponse(BaseModel):
    """Response for POST /enrich."""

    strategy: str = Field(..., description="Strategy that produced the answer.")
    query: str = Field(..., description="Original query.")
    answer: str = Field(..., description="Final answer from the model.")
    enriched_query: str | None = Field(None, description="Rewritten query (query_enrichment only).")
    iterations: int = Field(0, description="Retrieve/generate rounds (iter_retgen only).")
    sources: list[str] = Field(default_factory=list, description="Corpus sources used (iter_retgen only).")
    steps: list[dict[str, Any]] = Field(default_factory=list, description="Intermediate outputs per step.")
