"""
Coverage: do the reports the manifest tracks (and the ones we expect) exist on disk?
"""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from enrichlab.core.config import MANIFEST_NAME
from enrichlab.core.manifest import Manifest

logger = logging.getLogger(__name__)


@dataclass
class CoverageReport:
    present: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)
    expected_missing: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing and not self.expected_missing

    def to_dict(self) -> dict:
        return {**asdict(self), "complete": self.complete}


def check_coverage(
    manifest: Manifest,
    root: str | Path,
    expected: list[str] | None = None,
    reports_dir: str | Path | None = None,
) -> CoverageReport:
    """
    Compare tracked report paths (relative to root) with the file system.

    untracked lists *.md files under reports_dir that the manifest does not
    mention (reports_dir defaults to root). expected paths are missing when
    they are not tracked or their file is gone.
    """
    base = Path(root)
    tracked = manifest.tracked_paths()
    report = CoverageReport()
    for rel in tracked:
        (report.present if (base / rel).is_file() else report.missing).append(rel)

    scan = Path(reports_dir) if reports_dir is not None else base
    if scan.is_dir():
        known = {(base / rel).resolve() for rel in tracked}
        for path in sorted(scan.rglob("*.md")):
            if path.resolve() in known or path.name == MANIFEST_NAME or path.name.startswith("."):
                continue
            try:
                rel = path.relative_to(base).as_posix()
            except ValueError:
                rel = path.as_posix()
            report.untracked.append(rel)

    present = set(report.present)
    for rel in expected or []:
        if rel not in present:
            report.expected_missing.append(rel)

    logger.info(
        "[coverage] present=%d missing=%d untracked=%d expected_missing=%d",
        len(report.present), len(report.missing), len(report.untracked), len(report.expected_missing),
    )
    return report
