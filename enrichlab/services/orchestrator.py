"""
Documentation workflow: run agent roles, write their reports, keep the manifest current.

Phases run in order; roles inside a phase run in parallel (worker threads,
bounded by a semaphore) because each role is a blocking LLM call. A failing role
is recorded as failed in the manifest and does not stop the others.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from enrichlab.agent.chains import render
from enrichlab.agent.llm import active_model
from enrichlab.agent.prompts import ROLE_TASK_TEMPLATE
from enrichlab.core.config import LLM_TEMPERATURE, MANIFEST_NAME, MAX_PARALLEL_TASKS, REPORTS_DIR
from enrichlab.core.manifest import COMPLETED, FAILED, PENDING, RUNNING, ManifestStore, utc_now
from enrichlab.core.roles import RoleSpec, group_by_phase
from enrichlab.services.coverage_service import CoverageReport, check_coverage
from enrichlab.services.enrichment_service import run_strategy
from enrichlab.services.report_service import sanitize_report_path, write_report

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    topic: str
    completed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    reports: list[str] = field(default_factory=list)
    coverage: CoverageReport = field(default_factory=CoverageReport)

    @property
    def ok(self) -> bool:
        return not self.failed and self.coverage.complete

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "completed": list(self.completed),
            "failed": dict(self.failed),
            "reports": list(self.reports),
            "coverage": self.coverage.to_dict(),
            "ok": self.ok,
        }


def select_roles(roles: list[RoleSpec], names: list[str] | None) -> list[RoleSpec]:
    """Subset of roles by name, keeping order. None or empty selects all."""
    if not names:
        return list(roles)
    known = {r.name for r in roles}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown role(s): {', '.join(unknown)}")
    wanted = set(names)
    return [r for r in roles if r.name in wanted]


def role_query(role: RoleSpec, topic: str, earlier: list[tuple[str, str]] | None = None) -> str:
    """Task prompt handed to the role's enrichment strategy. earlier holds (title, path) of reports from previous phases."""
    listing = "\n".join(f"- {title} ({path})" for title, path in earlier or []) or "- none yet"
    return render(
        ROLE_TASK_TEMPLATE,
        instructions=role.instructions,
        topic=topic,
        title=role.title,
        earlier_reports=listing,
    )


def _execute_role(
    role: RoleSpec,
    topic: str,
    reports_dir: Path,
    store: ManifestStore,
    temperature: float | None,
    earlier: list[tuple[str, str]],
) -> str:
    """Blocking body of one role task. Returns the report path relative to reports_dir."""
    store.set_status(role.name, RUNNING)
    logger.info("[orchestrator:role] START role=%s strategy=%s", role.name, role.strategy)
    result = run_strategy(role.strategy, role_query(role, topic, earlier), temperature=temperature)
    if not result.answer.strip():
        raise ValueError("model returned an empty report")
    path = write_report(reports_dir, role.output, role.title, result.answer)
    rel = path.relative_to(reports_dir).as_posix()
    store.record_report(rel, role.title)
    store.set_status(role.name, COMPLETED)
    logger.info("[orchestrator:role] END role=%s report=%s", role.name, rel)
    return rel


async def run_workflow(
    topic: str,
    roles: list[RoleSpec],
    reports_dir: str | Path = REPORTS_DIR,
    manifest_path: str | Path | None = None,
    max_parallel: int = MAX_PARALLEL_TASKS,
    temperature: float | None = None,
) -> WorkflowResult:
    """Run every role for topic. Report paths in the manifest are relative to reports_dir."""
    if not topic or not topic.strip():
        raise ValueError("topic is required")
    if not roles:
        raise ValueError("no roles to run")
    if max_parallel < 1:
        raise ValueError("max_parallel must be >= 1")
    topic = topic.strip()
    out_dir = Path(reports_dir)
    manifest_file = Path(manifest_path or out_dir / MANIFEST_NAME)
    for r in roles:
        if (out_dir / sanitize_report_path(r.output)).resolve() == manifest_file.resolve():
            raise ValueError(f"role {r.name!r} output {r.output!r} would overwrite the report manifest")
    out_dir.mkdir(parents=True, exist_ok=True)
    store = ManifestStore(manifest_file)

    store.set_parameters({
        "topic": topic,
        "model": active_model(),
        "temperature": LLM_TEMPERATURE if temperature is None else temperature,
        "roles": ", ".join(r.name for r in roles),
        "started_at": utc_now(),
    })

    def _mark_pending(m) -> None:
        for r in roles:
            m.set_status(r.name, PENDING)

    store.update(_mark_pending)

    semaphore = asyncio.Semaphore(max_parallel)
    result = WorkflowResult(topic=topic)
    written: list[tuple[str, str]] = []

    async def _run_one(role: RoleSpec, earlier: list[tuple[str, str]]) -> tuple[str, str | None, str | None]:
        async with semaphore:
            try:
                rel = await asyncio.to_thread(_execute_role, role, topic, out_dir, store, temperature, earlier)
                return role.name, rel, None
            except Exception as e:
                logger.exception("[orchestrator:role] role=%s failed", role.name)
                error = str(e) or type(e).__name__
                await asyncio.to_thread(store.set_status, role.name, FAILED, error)
                return role.name, None, error

    for phase_roles in group_by_phase(roles):
        logger.info("[orchestrator] phase=%d roles=%s", phase_roles[0].phase, [r.name for r in phase_roles])
        earlier = list(written)
        titles = {r.name: r.title for r in phase_roles}
        for name, rel, error in await asyncio.gather(*(_run_one(r, earlier) for r in phase_roles)):
            if error is None:
                result.completed.append(name)
                result.reports.append(rel)
                written.append((titles[name], rel))
            else:
                result.failed[name] = error

    store.set_parameters({"finished_at": utc_now()})
    expected = [sanitize_report_path(r.output) for r in roles]
    result.coverage = check_coverage(store.read(), out_dir, expected=expected)
    logger.info("[orchestrator] END completed=%d failed=%d", len(result.completed), len(result.failed))
    return result


def run_workflow_sync(*args, **kwargs) -> WorkflowResult:
    """Blocking wrapper around run_workflow (scripts, sync API handlers)."""
    return asyncio.run(run_workflow(*args, **kwargs))
