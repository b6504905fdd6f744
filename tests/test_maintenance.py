"""Tests for the maintenance helpers: frontmatter, release, integrity."""

from __future__ import annotations

import json
import subprocess

import pytest

from docs_cache.maintenance.frontmatter import parse_frontmatter, run_hook, validate_frontmatter
from docs_cache.maintenance.integrity import check_cache
from docs_cache.maintenance.release import bump_version, git_release, update_manifests


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------

class TestParseFrontmatter:
    def test_values_keep_colons_and_drop_quotes(self) -> None:
        fields = parse_frontmatter('---\nname: "x"\ndescription: Use when: things happen\n---\nbody')
        assert fields == {"name": "x", "description": "Use when: things happen"}

    def test_unclosed(self) -> None:
        assert parse_frontmatter("---\nname: x\nbody") is None


class TestValidateFrontmatter:
    def test_non_plugin_files_pass(self) -> None:
        assert validate_frontmatter("/repo/docs/notes.md", "no frontmatter").allowed
        assert validate_frontmatter("/repo/skills/x/script.py", "").allowed

    def test_only_md_and_upper_md_extensions_are_checked(self) -> None:
        assert not validate_frontmatter("/repo/commands/run.MD", "# Run").allowed
        assert validate_frontmatter("/repo/commands/run.Md", "# Run").allowed
        assert validate_frontmatter("/repo/commands/run.mD", "# Run").allowed

    def test_requires_frontmatter(self) -> None:
        result = validate_frontmatter("/repo/commands/run.md", "# Run")
        assert not result.allowed
        assert "must start with ---" in result.reason

    def test_unclosed_frontmatter(self) -> None:
        result = validate_frontmatter("/repo/commands/run.md", "---\ndescription: x\n")
        assert "not properly closed" in result.reason

    def test_skill_description_limit(self) -> None:
        content = f"---\nname: s\ndescription: {'x' * 1025}\n---\n"
        result = validate_frontmatter("/repo/skills/s/SKILL.md", content)
        assert not result.allowed
        assert "1025 chars" in result.reason

    def test_agent_fields_and_model(self) -> None:
        missing = validate_frontmatter("/repo/agents/a.md", "---\nname: a\ndescription: d\n---\n")
        assert "model, tools" in missing.reason

        bad_model = validate_frontmatter(
            "/repo/agents/a.md", "---\nname: a\ndescription: d\nmodel: gpt\ntools: Read\n---\n"
        )
        assert 'Invalid model "gpt"' in bad_model.reason

        ok = validate_frontmatter("/repo/agents/a.md", "---\nname: a\ndescription: d\nmodel: sonnet\ntools: Read\n---\n")
        assert ok.allowed

    def test_command_needs_description(self) -> None:
        result = validate_frontmatter("/repo/commands/run.md", "---\nname: run\n---\n")
        assert result.reason == 'Command file requires "description" field in frontmatter'


def test_run_hook_allows_by_returning_none() -> None:
    payload = {"tool_input": {"file_path": "/repo/commands/run.md", "content": "---\ndescription: d\n---\n"}}
    assert run_hook(json.dumps(payload)) is None
    assert run_hook("{broken") is None


# ---------------------------------------------------------------------------
# Release
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "kind, expected",
    [("patch", "1.2.4"), ("minor", "1.3.0"), ("major", "2.0.0")],
)
def test_bump_version(kind, expected) -> None:
    assert bump_version("1.2.3", kind) == expected


def test_bump_version_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        bump_version("1.2.3", "huge")
    with pytest.raises(ValueError):
        bump_version("one.two", "patch")


def test_update_manifests_keeps_other_fields(tmp_path) -> None:
    (tmp_path / ".claude-plugin").mkdir()
    (tmp_path / ".claude-plugin" / "plugin.json").write_text(json.dumps({"name": "p", "version": "0.9.9"}))
    (tmp_path / "package.json").write_text(json.dumps({"name": "p", "version": "0.9.9", "private": True}))

    assert update_manifests(tmp_path, "patch") == ("0.9.9", "0.9.10")

    package = (tmp_path / "package.json").read_text()
    assert package.endswith("\n")
    assert json.loads(package) == {"name": "p", "version": "0.9.10", "private": True}


def test_git_release_runs_commands_in_order(tmp_path, monkeypatch) -> None:
    calls = []

    def fake_run(command, cwd, check):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr("docs_cache.maintenance.release.subprocess.run", fake_run)

    git_release(tmp_path, "1.0.1")

    assert calls == [
        ["git", "add", "."],
        ["git", "commit", "-m", "chore: bump version to 1.0.1"],
        ["git", "tag", "v1.0.1"],
        ["git", "push"],
        ["git", "push", "--tags"],
    ]


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------

def test_check_cache_flags_missing_and_empty(write_registry, cache_dir) -> None:
    write_registry(
        [
            {"name": "ok", "url": "https://docs.test/ok"},
            {"name": "empty", "url": "https://docs.test/empty"},
            {"name": "gone", "url": "https://docs.test/gone"},
        ],
        cache={"lastUpdated": "2025-01-01T00:00:00.000Z"},
    )
    (cache_dir / "ok.md").write_text("# ok\n", encoding="utf-8")
    (cache_dir / "empty.md").write_text("", encoding="utf-8")

    issues = check_cache()

    assert [(i.name, i.problem) for i in issues] == [
        ("empty", "empty.md is empty"),
        ("gone", "missing gone.md"),
    ]
