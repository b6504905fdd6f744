"""Tests for the docs-cache CLI.

Mocking strategy:
- The settings singleton points at a temporary cache directory
  (see ``conftest.py``).
- ``respx`` is activated around ``runner.invoke`` so the HTTP client created
  inside ``asyncio.run`` is served by mocked routes.
"""

from __future__ import annotations

import json
import logging

import httpx
import pytest
import respx
from typer.testing import CliRunner

from cli.main import app

CHANGELOG_URL = "https://changelog.test/CHANGELOG.md"

runner = CliRunner()

_SOURCES = [
    {"name": "alpha", "url": "https://raw.test/alpha.md", "type": "md"},
    {"name": "beta", "url": "https://raw.test/beta.md", "type": "md"},
    {"name": "gamma", "url": "https://docs.test/gamma", "type": "html"},
]


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _mock_all(mock: respx.MockRouter, gamma_status: int = 200) -> None:
    mock.get("https://raw.test/alpha.md").mock(return_value=httpx.Response(200, text="# Alpha\n"))
    mock.get("https://raw.test/beta.md").mock(return_value=httpx.Response(200, text="# Beta\n"))
    mock.get("https://docs.test/gamma").mock(
        return_value=httpx.Response(gamma_status, text="<title>Gamma</title><p>g</p>")
    )
    mock.get(CHANGELOG_URL).mock(return_value=httpx.Response(200, text="## 2.1.0\n"))


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

class TestUpdate:
    def test_all_sources_succeed(self, write_registry, cache_dir) -> None:
        write_registry(_SOURCES)
        with respx.mock as mock:
            _mock_all(mock)
            result = runner.invoke(app, ["update"])

        assert result.exit_code == 0, result.output
        assert "Succeeded: 3" in result.output
        assert "Failed: 0" in result.output
        for name in ("alpha", "beta", "gamma"):
            assert (cache_dir / f"{name}.md").is_file()

    def test_one_failure_exits_non_zero(self, write_registry, cache_dir) -> None:
        write_registry(_SOURCES)
        with respx.mock as mock:
            _mock_all(mock, gamma_status=404)
            result = runner.invoke(app, ["update", "--sequential"])

        assert result.exit_code == 1
        assert "Failed: 1" in result.output
        failed_section = result.output.split("Failed:\n", 1)[1]
        assert "gamma" in failed_section
        assert "alpha" not in failed_section
        assert "no cached copy" in failed_section
        assert (cache_dir / "alpha.md").is_file()
        assert (cache_dir / "beta.md").is_file()
        assert not (cache_dir / "gamma.md").exists()

    def test_unknown_source_lists_available_names(self, write_registry) -> None:
        write_registry(_SOURCES)
        with respx.mock as mock:
            result = runner.invoke(app, ["update", "--source", "ghost"])
            assert not mock.calls.called

        assert result.exit_code == 1
        assert "ghost" in result.output
        assert "alpha, beta, gamma" in result.output

    def test_missing_registry(self, cache_dir) -> None:
        result = runner.invoke(app, ["update"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_json_output(self, write_registry) -> None:
        write_registry(_SOURCES)
        with respx.mock as mock:
            _mock_all(mock)
            result = runner.invoke(app, ["update", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [r["name"] for r in payload["results"]] == ["alpha", "beta", "gamma"]
        assert payload["summary"] == {"total": 3, "succeeded": 3, "failed": 0}
        assert payload["detectedVersion"] == "2.1.0"


# ---------------------------------------------------------------------------
# check / version
# ---------------------------------------------------------------------------

class TestCheck:
    def test_healthy_cache(self, write_registry, cache_dir) -> None:
        write_registry(_SOURCES[:1], cache={"lastUpdated": "2025-01-01T00:00:00.000Z"})
        (cache_dir / "alpha.md").write_text("# Alpha\n", encoding="utf-8")

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 0
        assert "complete" in result.output

    def test_reports_missing_files(self, write_registry) -> None:
        write_registry(_SOURCES[:1])

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 1
        assert "alpha: missing alpha.md" in result.output
        assert "lastUpdated" in result.output


class TestVersion:
    def test_never_policy(self, write_registry) -> None:
        write_registry(_SOURCES, cache={"claudeCodeVersion": "1.0.0", "updateBehavior": "never"})
        with respx.mock as mock:
            mock.get(CHANGELOG_URL).mock(return_value=httpx.Response(200, text="## 2.0.0\n"))
            result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Upstream version: 2.0.0" in result.output
        assert "No docs cache update needed" in result.output

    def test_auto_policy_recommends_update(self, write_registry) -> None:
        write_registry(_SOURCES, cache={"claudeCodeVersion": "1.0.0", "updateBehavior": "auto"})
        with respx.mock as mock:
            mock.get(CHANGELOG_URL).mock(return_value=httpx.Response(200, text="## 2.0.0\n"))
            result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "update recommended" in result.output

    def test_ask_policy_prompts(self, write_registry) -> None:
        write_registry(_SOURCES, cache={"claudeCodeVersion": "1.0.0", "updateBehavior": "ask"})
        with respx.mock as mock:
            mock.get(CHANGELOG_URL).mock(return_value=httpx.Response(200, text="## 2.0.0\n"))
            result = runner.invoke(app, ["version"], input="n\n")

        assert result.exit_code == 0
        assert "Update docs cache?" in result.output
        assert "No docs cache update needed" in result.output


# ---------------------------------------------------------------------------
# hook / release
# ---------------------------------------------------------------------------

class TestHook:
    def test_denies_skill_without_description(self) -> None:
        payload = {"tool_input": {"file_path": "/repo/skills/x/SKILL.md", "content": "---\nname: x\n---\nbody"}}

        result = runner.invoke(app, ["hook", "validate-frontmatter"], input=json.dumps(payload))

        assert result.exit_code == 0
        decision = json.loads(result.stdout)["hookSpecificOutput"]
        assert decision["permissionDecision"] == "deny"
        assert "description" in decision["permissionDecisionReason"]

    def test_allows_other_files_silently(self) -> None:
        payload = {"tool_input": {"file_path": "/repo/README.md", "content": "# hi"}}
        result = runner.invoke(app, ["hook", "validate-frontmatter"], input=json.dumps(payload))
        assert result.exit_code == 0
        assert result.stdout == ""

    def test_garbage_input_fails_open(self) -> None:
        result = runner.invoke(app, ["hook", "validate-frontmatter"], input="not json")
        assert result.exit_code == 0
        assert result.stdout == ""


class TestRelease:
    def _manifests(self, root, version: str = "1.2.3") -> None:
        (root / ".claude-plugin").mkdir()
        (root / ".claude-plugin" / "plugin.json").write_text(json.dumps({"name": "p", "version": version}))
        (root / "package.json").write_text(json.dumps({"name": "p", "version": version}))

    def test_bump_without_git(self, tmp_path) -> None:
        self._manifests(tmp_path)

        result = runner.invoke(app, ["release", "bump", "minor", "--root", str(tmp_path), "--no-git"])

        assert result.exit_code == 0, result.output
        assert "1.2.3 → 1.3.0" in result.output
        for rel in (".claude-plugin/plugin.json", "package.json"):
            assert json.loads((tmp_path / rel).read_text())["version"] == "1.3.0"

    def test_bad_kind(self, tmp_path) -> None:
        result = runner.invoke(app, ["release", "bump", "huge", "--root", str(tmp_path)])
        assert result.exit_code == 1
        assert "patch|minor|major" in result.output

    def test_missing_manifest(self, tmp_path) -> None:
        result = runner.invoke(app, ["release", "bump", "--root", str(tmp_path), "--no-git"])
        assert result.exit_code == 1
        assert "Manifest not found" in result.output
