#!/usr/bin/env python3
"""
Run the documentation workflow: every agent role writes its report, the manifest
is updated, and coverage is printed at the end.

Run from project root:

    python scripts/run_docs_workflow.py "payments service"
    python scripts/run_docs_workflow.py "payments service" --only overview architecture
    python scripts/run_docs_workflow.py "payments service" --agents-dir agents --reports-dir docs/reports

Exits 1 when a role failed or an expected report is missing.
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "enrichlab" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from enrichlab.core.config import AGENTS_DIR, MAX_PARALLEL_TASKS, REPORTS_DIR
from enrichlab.core.errors import RoleSpecError
from enrichlab.core.roles import load_roles
from enrichlab.services.orchestrator import run_workflow_sync, select_roles


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate documentation reports from agent role files.")
    parser.add_argument("topic", help="Subject the reports are written about.")
    parser.add_argument("--agents-dir", default=AGENTS_DIR)
    parser.add_argument("--reports-dir", default=REPORTS_DIR)
    parser.add_argument("--only", nargs="+", metavar="NAME", help="Run only these roles.")
    parser.add_argument("--max-parallel", type=int, default=MAX_PARALLEL_TASKS)
    parser.add_argument("--temperature", type=float, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    try:
        roles = select_roles(load_roles(args.agents_dir), args.only)
    except (RoleSpecError, ValueError) as e:
        parser.error(str(e))
    if not roles:
        print(f"No roles found in {args.agents_dir}.")
        return 1

    result = run_workflow_sync(
        args.topic,
        roles,
        reports_dir=args.reports_dir,
        max_parallel=args.max_parallel,
        temperature=args.temperature,
    )

    for name in result.completed:
        print(f"  done:   {name}")
    for name, error in result.failed.items():
        print(f"  failed: {name}: {error}")
    cov = result.coverage
    print(f"Coverage: {len(cov.present)} present, {len(cov.missing)} missing, "
          f"{len(cov.untracked)} untracked, {len(cov.expected_missing)} expected but missing.")
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
