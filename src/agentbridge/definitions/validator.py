"""Agent name validation: rejects names unsafe for lookup."""
from __future__ import annotations

import re

from agentbridge.core.errors import InvalidAgentNameError

_NAME_MAX_LENGTH = 255
# Path separators, shell metacharacters and whitespace.
_FORBIDDEN_CHARS = re.compile(r"[<>:\"/\\|?*;`$()&\s]")
_TRAVERSAL_MARKERS = ("..", "./", ".\\")


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code <= 31 or code == 127


def validate_agent_name(name: object) -> str:
    """Validate an agent name before it is used for lookup.

    Returns:
        The name unchanged.

    Raises:
        InvalidAgentNameError: If the name is missing, too long, or
            contains forbidden characters or path traversal sequences.
    """
    if not name or not isinstance(name, str):
        raise InvalidAgentNameError("Invalid agent name: agent name is required")

    if not name.strip():
        raise InvalidAgentNameError(
            "Invalid agent name: empty agent name not allowed"
        )

    if len(name) > _NAME_MAX_LENGTH:
        raise InvalidAgentNameError("Invalid agent name: too long agent name")

    if _FORBIDDEN_CHARS.search(name) or any(_is_control(ch) for ch in name):
        raise InvalidAgentNameError(
            "Invalid agent name: forbidden characters detected"
        )

    if any(marker in name for marker in _TRAVERSAL_MARKERS):
        raise InvalidAgentNameError(
            "Invalid agent name: path traversal attempt detected"
        )

    return name
