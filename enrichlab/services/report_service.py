"""
Report writing: persist generated markdown reports under the reports dir.

Responsibility: Sanitize the target filename and write title, timestamp and body.
Manifest bookkeeping is left to the caller (orchestrator).
"""

import logging
import re
from pathlib import Path

from enrichlab.core.manifest import utc_now

logger = logging.getLogger(__name__)


def sanitize_report_path(filename: str) -> str:
    """
    Relative report path with no traversal and a .md suffix.
    Each path segment keeps only word characters, dots and dashes.
    """
    parts = []
    for part in Path((filename or "").replace("\\", "/")).parts:
        if part in ("", ".", "..", "/"):
            continue
        safe = re.sub(r"[^\w.\-]", "_", part.replace("..", "")).strip("._") or "unnamed"
        parts.append(safe)
    rel = "/".join(parts) or "report"
    if not rel.lower().endswith(".md"):
        rel += ".md"
    return rel


def render_report(title: str, body: str, generated_at: str) -> str:
    return f"# {title.strip()}\n\n_Generated: {generated_at}_\n\n{(body or '').strip()}\n"


def write_report(
    reports_dir: str | Path,
    filename: str,
    title: str,
    body: str,
    generated_at: str | None = None,
) -> Path:
    """Write one report; returns the path written. Overwrites an existing report of the same name."""
    rel = sanitize_report_path(filename)
    target = Path(reports_dir) / rel
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_report(title, body, generated_at or utc_now()), encoding="utf-8")
    logger.info("[report:write_report] OUT path=%s body_len=%d", target, len(body or ""))
    return target
