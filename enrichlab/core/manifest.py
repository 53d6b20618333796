"""
Report manifest: a markdown index of generated reports.

Three sections are understood (others are ignored):

    ## Tracked Reports     table of path | title | generated-at (append-only log)
    ## Workflow Status     "- [x] task: completed (timestamp)" lines
    ## Run Parameters      "- key: value" lines

ManifestStore serializes load → mutate → save so concurrent workflow tasks can
record results without losing each other's writes.
"""

import logging
import os
import re
import tempfile
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from enrichlab.core.errors import ManifestFormatError

logger = logging.getLogger(__name__)

TITLE = "# Report Manifest"
SECTION_REPORTS = "Tracked Reports"
SECTION_STATUS = "Workflow Status"
SECTION_PARAMETERS = "Run Parameters"

PENDING = "pending"
RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"
STATUS_MARKERS: dict[str, str] = {PENDING: " ", RUNNING: "~", COMPLETED: "x", FAILED: "!"}

_TABLE_HEADER = ("Path", "Title", "Generated")
_CELL_SPLIT = re.compile(r"(?<!\\)\|")
_STATUS_LINE = re.compile(r"^- \[(?P<mark>[ x~!])\] (?P<task>[^:]+?): (?P<rest>.*)$")
_STATUS_REST = re.compile(
    r"^(?P<state>pending|running|completed|failed)(?::\s*(?P<detail>.*?))?(?:\s+\((?P<ts>[^()]*)\))?$"
)
_PARAM_LINE = re.compile(r"^- (?P<key>[^:]+?):\s?(?P<value>.*)$")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class ReportEntry:
    path: str
    title: str
    generated_at: str


@dataclass
class WorkflowStatus:
    task: str
    state: str
    detail: str = ""
    updated_at: str = ""


@dataclass
class Manifest:
    reports: list[ReportEntry] = field(default_factory=list)
    statuses: dict[str, WorkflowStatus] = field(default_factory=dict)
    parameters: dict[str, str] = field(default_factory=dict)

    def add_report(self, path: str, title: str, generated_at: str | None = None) -> ReportEntry:
        """Append a report entry. Earlier entries for the same path are kept."""
        entry = ReportEntry(path=str(path), title=title.strip(), generated_at=generated_at or utc_now())
        self.reports.append(entry)
        return entry

    def set_status(self, task: str, state: str, detail: str = "", updated_at: str | None = None) -> WorkflowStatus:
        if state not in STATUS_MARKERS:
            raise ValueError(f"unknown workflow state {state!r}")
        status = WorkflowStatus(task=task, state=state, detail=detail, updated_at=updated_at or utc_now())
        self.statuses[task] = status
        return status

    def set_parameter(self, key: str, value: object) -> None:
        self.parameters[str(key)] = str(value)

    def latest_reports(self) -> list[ReportEntry]:
        """Last entry per path, in order of each path's first appearance."""
        latest: dict[str, ReportEntry] = {}
        for entry in self.reports:
            latest[entry.path] = entry
        return list(latest.values())

    def tracked_paths(self) -> list[str]:
        return [e.path for e in self.latest_reports()]

    def to_dict(self) -> dict:
        return {
            "reports": [vars(e).copy() for e in self.latest_reports()],
            "history_len": len(self.reports),
            "statuses": [vars(s).copy() for s in self.statuses.values()],
            "parameters": dict(self.parameters),
        }


def _escape_cell(value: str) -> str:
    return " ".join(value.split()).replace("|", "\\|")


def _unescape_cell(value: str) -> str:
    return value.strip().replace("\\|", "|")


def _single_line(value: str) -> str:
    return " ".join((value or "").split())


def render_manifest(manifest: Manifest) -> str:
    lines = [TITLE, "", f"## {SECTION_REPORTS}", "", "| Path | Title | Generated |", "| --- | --- | --- |"]
    for e in manifest.reports:
        lines.append(f"| {_escape_cell(e.path)} | {_escape_cell(e.title)} | {_escape_cell(e.generated_at)} |")
    lines += ["", f"## {SECTION_STATUS}", ""]
    for s in manifest.statuses.values():
        line = f"- [{STATUS_MARKERS[s.state]}] {s.task}: {s.state}"
        if s.detail:
            line += f": {_single_line(s.detail)}"
        if s.updated_at:
            line += f" ({s.updated_at})"
        lines.append(line)
    lines += ["", f"## {SECTION_PARAMETERS}", ""]
    for key, value in manifest.parameters.items():
        lines.append(f"- {key}: {_single_line(value)}")
    return "\n".join(lines) + "\n"


def _parse_report_row(line: str, line_no: int) -> ReportEntry | None:
    cells = _CELL_SPLIT.split(line.strip())
    # leading/trailing pipes give empty first/last cells
    if cells and not cells[0].strip():
        cells = cells[1:]
    if cells and not cells[-1].strip():
        cells = cells[:-1]
    if len(cells) != 3:
        raise ManifestFormatError(line_no, f"report row needs 3 cells, got {len(cells)}")
    values = tuple(_unescape_cell(c) for c in cells)
    if values == _TABLE_HEADER or all(set(v) <= set("-: ") for v in values):
        return None
    path, title, generated = values
    if not path:
        raise ManifestFormatError(line_no, "report row has an empty path")
    return ReportEntry(path=path, title=title, generated_at=generated)


def _parse_status(line: str, line_no: int) -> WorkflowStatus:
    match = _STATUS_LINE.match(line)
    rest = _STATUS_REST.match(match.group("rest").strip()) if match else None
    if not match or not rest:
        raise ManifestFormatError(line_no, f"malformed status line: {line!r}")
    return WorkflowStatus(
        task=match.group("task").strip(),
        state=rest.group("state"),
        detail=(rest.group("detail") or "").strip(),
        updated_at=(rest.group("ts") or "").strip(),
    )


def parse_manifest(text: str) -> Manifest:
    """Parse manifest markdown. Raises ManifestFormatError on malformed lines in known sections."""
    manifest = Manifest()
    section: str | None = None
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        if line.startswith("## "):
            section = line[3:].strip().lower()
            continue
        if not line.strip() or line.startswith("# "):
            continue
        if section == SECTION_REPORTS.lower():
            if line.lstrip().startswith("|"):
                entry = _parse_report_row(line, line_no)
                if entry is not None:
                    manifest.reports.append(entry)
        elif section == SECTION_STATUS.lower():
            if line.startswith("- "):
                status = _parse_status(line, line_no)
                manifest.statuses[status.task] = status
        elif section == SECTION_PARAMETERS.lower():
            if line.startswith("- "):
                match = _PARAM_LINE.match(line)
                if not match:
                    raise ManifestFormatError(line_no, f"malformed parameter line: {line!r}")
                manifest.parameters[match.group("key").strip()] = match.group("value").strip()
    return manifest


def load_manifest(path: str | Path) -> Manifest:
    """Read a manifest file; a missing file is an empty manifest."""
    p = Path(path)
    if not p.is_file():
        return Manifest()
    return parse_manifest(p.read_text(encoding="utf-8"))


def save_manifest(manifest: Manifest, path: str | Path) -> None:
    """Write the manifest atomically (temp file in the same dir, then replace)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(p.parent), prefix=".manifest-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(render_manifest(manifest))
        os.replace(tmp, p)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


# One lock per manifest file, shared by every store that points at it
_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _locks_guard:
        return _locks.setdefault(key, threading.Lock())


class ManifestStore:
    """Thread-safe access to one manifest file. Stores on the same path share a lock."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def read(self) -> Manifest:
        with self._lock:
            return load_manifest(self.path)

    def update(self, mutate: Callable[[Manifest], object]) -> Manifest:
        """Load, apply mutate, save; all under the store lock."""
        with self._lock:
            manifest = load_manifest(self.path)
            mutate(manifest)
            save_manifest(manifest, self.path)
            return manifest

    def record_report(self, path: str, title: str, generated_at: str | None = None) -> None:
        self.update(lambda m: m.add_report(path, title, generated_at))
        logger.info("[manifest] recorded report path=%s", path)

    def set_status(self, task: str, state: str, detail: str = "") -> None:
        self.update(lambda m: m.set_status(task, state, detail))
        logger.info("[manifest] status task=%s state=%s", task, state)

    def set_parameters(self, params: dict[str, object]) -> None:
        def _apply(m: Manifest) -> None:
            for key, value in params.items():
                m.set_parameter(key, value)

        self.update(_apply)
