"""Agent file parser: front-matter metadata and markdown body."""
from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from agentbridge.core.types import AgentType
from agentbridge.definitions.types import AgentDefinition

if TYPE_CHECKING:
    from pathlib import Path

AGENT_FILE_SUFFIXES = (".md", ".txt")
DEFAULT_DESCRIPTION = "Agent definition"

_FRONTMATTER = re.compile(r"^---\s*\n(.*?)\n---\s*\n(.*)$", re.DOTALL)
_KEY_VALUE = re.compile(r"^(\w+):\s*(.+)$")
_HEADING_PREFIX = re.compile(r"^#+\s*")

_PLAIN_KEYS = frozenset({"name", "description", "model", "color"})
_AGENT_TYPES = {t.value: t for t in AgentType}


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _parse_bool(value: str) -> bool | None:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def parse_frontmatter(text: str) -> tuple[dict[str, object], str | None]:
    """Split *text* into front-matter metadata and body.

    Only a restricted ``key: value`` block is understood.  Recognized keys
    are ``name``, ``description``, ``model``, ``color``, ``tools`` (comma
    separated), ``autoApprovalMode`` (``true``/``false``) and ``agentType``
    (one of the :class:`AgentType` values).  Unrecognized keys and invalid
    ``agentType``/``autoApprovalMode`` values are ignored.

    Returns:
        A ``(metadata, body)`` tuple.  ``body`` is ``None`` when the text
        does not start with a front-matter block.
    """
    match = _FRONTMATTER.match(text)
    if match is None:
        return {}, None

    meta: dict[str, object] = {}
    for line in match.group(1).split("\n"):
        kv = _KEY_VALUE.match(line.rstrip("\r"))
        if kv is None:
            continue
        key = kv.group(1).strip()
        value = _unquote(kv.group(2).strip())
        if not value:
            continue

        if key in _PLAIN_KEYS:
            meta[key] = value
        elif key == "tools":
            meta["tools"] = tuple(t.strip() for t in value.split(",") if t.strip())
        elif key == "autoApprovalMode":
            flag = _parse_bool(value)
            if flag is not None:
                meta["autoApprovalMode"] = flag
        elif key == "agentType":
            if value in _AGENT_TYPES:
                meta["agentType"] = _AGENT_TYPES[value]

    return meta, match.group(2)


def extract_description(content: str) -> str:
    """Derive a description from the first heading, else the first line."""
    lines = [line for line in content.split("\n") if line.strip()]

    for line in lines:
        if line.startswith("#"):
            return _HEADING_PREFIX.sub("", line).strip()

    if lines:
        return lines[0].strip()

    return DEFAULT_DESCRIPTION


def agent_name_from_path(path: Path) -> str:
    """File name with a recognized agent suffix stripped."""
    name = path.name
    for suffix in AGENT_FILE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def parse_agent_file(path: Path) -> AgentDefinition:
    """Read and parse one agent definition file.

    Raises:
        OSError: If the file cannot be read or stat'ed.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    text = path.read_text(encoding="utf-8")
    mtime = path.stat().st_mtime

    meta, body = parse_frontmatter(text)
    content = text if body is None else body

    name = str(meta.get("name") or agent_name_from_path(path))
    description = str(meta.get("description") or extract_description(content))

    return AgentDefinition(
        name=name,
        description=description,
        content=content,
        file_path=path.resolve(),
        last_modified=datetime.fromtimestamp(mtime, tz=UTC),
        model=meta.get("model"),  # type: ignore[arg-type]
        color=meta.get("color"),  # type: ignore[arg-type]
        tools=meta.get("tools"),  # type: ignore[arg-type]
        auto_approval_mode=meta.get("autoApprovalMode"),  # type: ignore[arg-type]
        agent_type=meta.get("agentType"),  # type: ignore[arg-type]
    )
