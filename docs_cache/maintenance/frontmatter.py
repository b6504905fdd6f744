"""Frontmatter validation for plugin Markdown files (skills, commands, agents).

Used as a pre-write hook: the hook payload arrives as JSON on stdin and a
denial is reported as JSON on stdout.  Anything unexpected fails open, so a
broken hook never blocks a legitimate write.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

MAX_SKILL_DESCRIPTION = 1024
VALID_MODELS = ("haiku", "sonnet", "opus")

_FRONTMATTER = re.compile(r"^---\r?\n(.*?)\r?\n---", re.DOTALL)
_PLUGIN_DIR = re.compile(r"/(skills|commands|agents)/")


@dataclass
class ValidationResult:
    allowed: bool
    reason: Optional[str] = None


def parse_frontmatter(content: str) -> Optional[Dict[str, str]]:
    """Parse flat ``key: value`` frontmatter; ``None`` when there is none.

    Values keep everything after the first colon, so descriptions containing
    colons survive.  Matching surrounding quotes are removed.
    """
    match = _FRONTMATTER.match(content)
    if not match:
        return None
    fields: Dict[str, str] = {}
    for line in match.group(1).split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        fields[key.strip()] = value
    return fields


def _deny(reason: str) -> ValidationResult:
    return ValidationResult(allowed=False, reason=reason)


def validate_frontmatter(file_path: str, content: str) -> ValidationResult:
    if not file_path.endswith((".md", ".MD")):
        return ValidationResult(allowed=True)
    if not _PLUGIN_DIR.search(file_path):
        return ValidationResult(allowed=True)

    if not content.strip().startswith("---"):
        return _deny("Plugin markdown files require YAML frontmatter (file must start with ---)")

    fields = parse_frontmatter(content)
    if fields is None:
        return _deny("YAML frontmatter is not properly closed (missing closing ---)")

    if "/skills/" in file_path and file_path.endswith("SKILL.md"):
        missing = [f for f in ("name", "description") if not fields.get(f)]
        if missing:
            return _deny(f"SKILL.md requires these fields in frontmatter: {', '.join(missing)}")
        description = fields["description"]
        if len(description) > MAX_SKILL_DESCRIPTION:
            return _deny(
                f"Skill description too long ({len(description)} chars). "
                f"Maximum is {MAX_SKILL_DESCRIPTION} characters."
            )

    if "/agents/" in file_path and "/skills/" not in file_path:
        missing = [f for f in ("name", "description", "model", "tools") if not fields.get(f)]
        if missing:
            return _deny(f"Agent file missing required fields: {', '.join(missing)}")
        model = fields["model"].lower()
        if not any(m in model for m in VALID_MODELS):
            return _deny(f'Invalid model "{fields["model"]}". Use: haiku, sonnet, or opus')

    if "/commands/" in file_path and not fields.get("description"):
        return _deny('Command file requires "description" field in frontmatter')

    return ValidationResult(allowed=True)


def run_hook(raw_input: str) -> Optional[Dict[str, Any]]:
    """Evaluate a hook payload; return the denial document or ``None`` to allow."""
    try:
        payload = json.loads(raw_input)
        tool_input = payload.get("tool_input") or {}
        result = validate_frontmatter(
            str(tool_input.get("file_path") or ""),
            str(tool_input.get("content") or ""),
        )
    except Exception:
        logger.debug("Frontmatter hook failed open", exc_info=True)
        return None

    if result.allowed:
        return None
    return {
        "hookSpecificOutput": {
            "hookEventName": "PreToolUse",
            "permissionDecision": "deny",
            "permissionDecisionReason": result.reason,
        }
    }
