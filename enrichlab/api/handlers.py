"""
API handlers: call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP
mapping live here so services stay free of FastAPI/HTTP types.
"""

import logging
from pathlib import Path

from fastapi import HTTPException

from enrichlab.core.config import AGENTS_DIR, MANIFEST_NAME, REPORTS_DIR
from enrichlab.core.errors import ManifestFormatError, RoleSpecError, ServiceUnavailableError
from enrichlab.core.manifest import load_manifest
from enrichlab.core.roles import load_roles
from enrichlab.schemas.enrich import EnrichRequest, EnrichResponse
from enrichlab.schemas.workflow import WorkflowRequest, WorkflowResponse
from enrichlab.services.coverage_service import check_coverage
from enrichlab.services.enrichment_service import run_strategy
from enrichlab.services.orchestrator import run_workflow, select_roles
from enrichlab.services.report_service import sanitize_report_path

logger = logging.getLogger(__name__)


def to_http_error(e: Exception) -> HTTPException:
    """Map service exceptions to HTTP status codes."""
    if isinstance(e, ServiceUnavailableError):
        return HTTPException(status_code=503, detail=e.message)
    if isinstance(e, (RoleSpecError, ManifestFormatError)):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def manifest_path() -> Path:
    return Path(REPORTS_DIR) / MANIFEST_NAME


def handle_enrich(body: EnrichRequest) -> EnrichResponse:
    try:
        result = run_strategy(
            body.strategy,
            body.query,
            iterations=body.iterations,
            temperature=body.temperature,
        )
    except (ValueError, ServiceUnavailableError) as e:
        raise to_http_error(e) from e
    except Exception as e:
        logger.exception("[api:enrich] strategy=%s failed", body.strategy)
        raise to_http_error(e) from e
    return EnrichResponse(**result.to_dict())


def handle_get_manifest() -> dict:
    try:
        return load_manifest(manifest_path()).to_dict()
    except ManifestFormatError as e:
        raise to_http_error(e) from e


def handle_coverage() -> dict:
    try:
        manifest = load_manifest(manifest_path())
        roles = load_roles(AGENTS_DIR)
    except (ManifestFormatError, RoleSpecError) as e:
        raise to_http_error(e) from e
    expected = [sanitize_report_path(r.output) for r in roles]
    return check_coverage(manifest, REPORTS_DIR, expected=expected).to_dict()


async def handle_run_workflow(body: WorkflowRequest) -> WorkflowResponse:
    try:
        roles = select_roles(load_roles(AGENTS_DIR), body.roles)
        result = await run_workflow(
            body.topic,
            roles,
            reports_dir=REPORTS_DIR,
            manifest_path=manifest_path(),
            temperature=body.temperature,
        )
    except (ValueError, RoleSpecError, ManifestFormatError) as e:
        raise to_http_error(e) from e
    return WorkflowResponse(**result.to_dict())
