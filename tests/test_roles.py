"""
Unit tests for agent role files (markdown + YAML frontmatter).
"""

from pathlib import Path

import pytest

from enrichlab.core.errors import RoleSpecError
from enrichlab.core.roles import group_by_phase, load_roles, parse_role, parse_yaml_frontmatter

AGENTS_DIR = Path(__file__).resolve().parent.parent / "agents"

FULL_ROLE = """---
name: architecture
title: System Architecture
description: Components and data flow
output: design/architecture.md
strategy: iter_retgen
phase: 1
---

Describe the components.
"""


def _write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_yaml_frontmatter_without_block() -> None:
    assert parse_yaml_frontmatter("# Title\n\nBody") == ({}, "# Title\n\nBody")


def test_parse_role_reads_all_fields() -> None:
    role = parse_role(FULL_ROLE, "agents/architecture.md")

    assert role.name == "architecture"
    assert role.title == "System Architecture"
    assert role.description == "Components and data flow"
    assert role.output == "design/architecture.md"
    assert role.strategy == "iter_retgen"
    assert role.phase == 1
    assert role.instructions == "Describe the components."


def test_parse_role_defaults_from_file_name() -> None:
    role = parse_role("Just write the overview.", "agents/api-reference.md")

    assert role.name == "api-reference"
    assert role.title == "Api Reference"
    assert role.output == "api-reference.md"
    assert role.strategy == "baseline"
    assert role.phase == 0


@pytest.mark.parametrize(
    "text, message",
    [
        ("---\nstrategy: magic\n---\nBody", "unknown strategy"),
        ("---\nname: x\n---\n", "empty"),
        ("---\nphase: soon\n---\nBody", "phase must be an integer"),
        ("---\nphase: -1\n---\nBody", "phase must be >= 0"),
        ("---\noutput: ../../etc/passwd\n---\nBody", "relative path"),
        ("---\nname: [unclosed\n---\nBody", "invalid YAML"),
        ("---\n- a\n- b\n---\nBody", "mapping"),
        ("---\nname: bad name!\n---\nBody", "invalid role name"),
        ("---\noutput: MANIFEST.md\n---\nBody", "overwrite the report manifest"),
        ("---\nname: manifest\n---\nBody", "overwrite the report manifest"),
    ],
)
def test_parse_role_rejects_invalid(text: str, message: str) -> None:
    with pytest.raises(RoleSpecError) as exc:
        parse_role(text, "agents/x.md")
    assert message in str(exc.value)
    assert exc.value.path == "agents/x.md"


def test_load_roles_sorted_by_phase_then_name(tmp_path: Path) -> None:
    _write(tmp_path, "b.md", "---\nphase: 0\n---\nB")
    _write(tmp_path, "a.md", "---\nphase: 1\n---\nA")
    _write(tmp_path, "c.md", "---\nphase: 0\n---\nC")
    _write(tmp_path, "ignored.txt", "not a role")

    roles = load_roles(tmp_path)

    assert [r.name for r in roles] == ["b", "c", "a"]
    assert [[r.name for r in g] for g in group_by_phase(roles)] == [["b", "c"], ["a"]]


def test_load_roles_rejects_duplicate_names(tmp_path: Path) -> None:
    _write(tmp_path, "one.md", "---\nname: same\n---\nOne")
    _write(tmp_path, "two.md", "---\nname: same\n---\nTwo")
    with pytest.raises(RoleSpecError, match="duplicate role name"):
        load_roles(tmp_path)


def test_load_roles_rejects_duplicate_outputs(tmp_path: Path) -> None:
    _write(tmp_path, "one.md", "---\noutput: report.md\n---\nOne")
    _write(tmp_path, "two.md", "---\noutput: report.md\n---\nTwo")
    with pytest.raises(RoleSpecError, match="duplicate output"):
        load_roles(tmp_path)


def test_load_roles_missing_dir(tmp_path: Path) -> None:
    assert load_roles(tmp_path / "missing") == []


def test_bundled_roles_load() -> None:
    roles = load_roles(AGENTS_DIR)
    assert [r.name for r in roles] == ["overview", "architecture", "operations", "summary"]
    assert [r.phase for r in roles] == [0, 1, 1, 2]
