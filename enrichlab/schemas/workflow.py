"""Schemas for the documentation workflow endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class WorkflowRequest(BaseModel):
    """Request body for POST /workflow/run."""

    topic: str = Field(..., min_length=1, description="Subject the reports are written about.")
    roles: list[str] | None = Field(None, description="Role names to run; all roles when omitted.")
    temperature: float | None = Field(None, ge=0.0, le=2.0)

    model_config = {
        "json_schema_extra": {
            "examples": [{"topic": "payments service", "roles": ["overview", "architecture"]}]
        }
    }


class WorkflowResponse(BaseModel):
    """Response for POST /workflow/run."""

    topic: str
    completed: list[str] = Field(default_factory=list, description="Roles whose report was written.")
    failed: dict[str, str] = Field(default_factory=dict, description="Role name -> error message.")
    reports: list[str] = Field(default_factory=list, description="Report paths relative to the reports dir.")
    coverage: dict[str, Any] = Field(default_factory=dict)
    ok: bool = False
