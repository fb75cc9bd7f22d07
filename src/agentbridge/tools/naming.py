"""Agent name → MCP tool name mapping."""
from __future__ import annotations

import re

TOOL_PREFIX = "agent_"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_tool_name(agent_name: str) -> str:
    """Return the protocol-safe tool name for *agent_name*.

    Every character outside ``[A-Za-z0-9_-]`` becomes ``_`` one-for-one,
    so distinct agent names can map to the same tool name.
    """
    return f"{TOOL_PREFIX}{_UNSAFE_CHARS.sub('_', agent_name)}"
