"""Agent definition types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from agentbridge.core.types import AgentType


@dataclass(frozen=True, slots=True)
class AgentDefinition:
    """A parsed agent definition from a ``.md`` or ``.txt`` file.

    Recreated on every directory scan; carries no identity beyond the
    file it was read from.  ``content`` is the body with any front-matter
    removed and is handed to the execution engine as the agent's role
    definition.
    """

    name: str
    description: str
    content: str
    file_path: Path
    last_modified: datetime
    model: str | None = None
    color: str | None = None
    tools: tuple[str, ...] | None = None
    auto_approval_mode: bool | None = None
    agent_type: AgentType | None = None
