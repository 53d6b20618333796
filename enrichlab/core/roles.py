"""
Agent role specifications: markdown files with YAML frontmatter.

Example:
    ---
    name: architecture
    description: Component overview and data flow
    output: architecture.md
    strategy: query_enrichment
    phase: 1
    ---

    You are a software architect. Describe the main components ...

Roles in the same phase may run in parallel; phases run in ascending order.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from enrichlab.core.config import MANIFEST_NAME, STRATEGIES
from enrichlab.core.errors import RoleSpecError

logger = logging.getLogger(__name__)

_FRONTMATTER = re.compile(r"^---\s*\n(.*?)\n---\s*\n?(.*)$", re.DOTALL)
_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]*$")


@dataclass(frozen=True)
class RoleSpec:
    name: str
    title: str
    description: str
    output: str
    strategy: str
    phase: int
    instructions: str
    source: str = ""


def parse_yaml_frontmatter(content: str) -> tuple[dict, str]:
    """
    Split '---' delimited YAML frontmatter from the body.

    Returns ({}, content) when there is no frontmatter. Invalid YAML, or YAML
    that is not a mapping, raises ValueError.
    """
    match = _FRONTMATTER.match(content)
    if not match:
        return {}, content
    try:
        metadata = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML frontmatter: {e}") from e
    if not isinstance(metadata, dict):
        raise ValueError("frontmatter must be a mapping")
    return metadata, match.group(2).strip()


def parse_role(text: str, source: str) -> RoleSpec:
    """Build a RoleSpec from one role file's text. source is the file path (used for defaults and errors)."""
    try:
        meta, body = parse_yaml_frontmatter(text)
    except ValueError as e:
        raise RoleSpecError(source, str(e)) from e

    name = str(meta.get("name") or Path(source).stem).strip()
    if not _NAME.match(name):
        raise RoleSpecError(source, f"invalid role name {name!r}")
    if not body:
        raise RoleSpecError(source, "role instructions (markdown body) are empty")

    strategy = str(meta.get("strategy") or "baseline").strip()
    if strategy not in STRATEGIES:
        raise RoleSpecError(source, f"unknown strategy {strategy!r}")

    try:
        phase = int(meta.get("phase", 0))
    except (TypeError, ValueError) as e:
        raise RoleSpecError(source, f"phase must be an integer, got {meta.get('phase')!r}") from e
    if phase < 0:
        raise RoleSpecError(source, "phase must be >= 0")

    output = str(meta.get("output") or f"{name}.md").strip()
    if Path(output).is_absolute() or ".." in Path(output).parts:
        raise RoleSpecError(source, f"output must be a relative path inside the reports dir: {output!r}")
    if Path(output).stem.lower() == Path(MANIFEST_NAME).stem.lower():
        raise RoleSpecError(source, f"output {output!r} would overwrite the report manifest")

    return RoleSpec(
        name=name,
        title=str(meta.get("title") or name.replace("-", " ").replace("_", " ").title()).strip(),
        description=str(meta.get("description") or "").strip(),
        output=output,
        strategy=strategy,
        phase=phase,
        instructions=body,
        source=source,
    )


def load_roles(directory: str | Path) -> list[RoleSpec]:
    """Load every *.md role under directory, sorted by (phase, name)."""
    root = Path(directory)
    if not root.is_dir():
        logger.info("[roles:load_roles] no roles dir at %s", root)
        return []
    roles: list[RoleSpec] = []
    names: dict[str, str] = {}
    outputs: dict[str, str] = {}
    for path in sorted(root.glob("*.md")):
        role = parse_role(path.read_text(encoding="utf-8"), str(path))
        if role.name in names:
            raise RoleSpecError(str(path), f"duplicate role name {role.name!r} (also in {names[role.name]})")
        if role.output in outputs:
            raise RoleSpecError(str(path), f"duplicate output {role.output!r} (also in {outputs[role.output]})")
        names[role.name] = str(path)
        outputs[role.output] = str(path)
        roles.append(role)
    roles.sort(key=lambda r: (r.phase, r.name))
    logger.info("[roles:load_roles] OUT dir=%s roles=%s", root, [r.name for r in roles])
    return roles


def group_by_phase(roles: list[RoleSpec]) -> list[list[RoleSpec]]:
    """Roles grouped by phase, ascending. Order inside a group is by name."""
    groups: dict[int, list[RoleSpec]] = {}
    for role in roles:
        groups.setdefault(role.phase, []).append(role)
    return [sorted(groups[p], key=lambda r: r.name) for p in sorted(groups)]
