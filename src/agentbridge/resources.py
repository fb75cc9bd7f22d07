"""The ``agents://list`` resource: a human-readable index of agents."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from agentbridge.core.errors import AgentBridgeError, InvalidResourceError
from agentbridge.core.logging import get_logger
from agentbridge.tools.naming import TOOL_PREFIX, sanitize_tool_name

if TYPE_CHECKING:
    from agentbridge.definitions.loader import AgentLoader
    from agentbridge.definitions.types import AgentDefinition

logger = get_logger("resources")

AGENT_LIST_URI = "agents://list"
TEXT_MIME_TYPE = "text/plain"
NO_AGENTS_TEXT = "No agents available. Check agent directory configuration."


@dataclass(frozen=True, slots=True)
class ResourceInfo:
    uri: str
    name: str
    description: str
    mime_type: str = TEXT_MIME_TYPE


@dataclass(frozen=True, slots=True)
class ResourceContent:
    uri: str
    text: str
    mime_type: str = TEXT_MIME_TYPE

    def to_dict(self) -> dict[str, str]:
        return {"uri": self.uri, "mimeType": self.mime_type, "text": self.text}


AGENT_LIST_RESOURCE = ResourceInfo(
    uri=AGENT_LIST_URI,
    name="Agent List",
    description="List of available agents (each agent is exposed as its own MCP tool)",
)


def _render_agent(agent: AgentDefinition) -> str:
    lines = [
        f"## {agent.name}",
        f"**Description:** {agent.description}",
        f"**Tool Name:** {sanitize_tool_name(agent.name)}",
        f"**File:** {agent.file_path}",
        f"**Last Modified:** {agent.last_modified.isoformat()}",
    ]
    if agent.agent_type is not None:
        lines.append(f"**Agent Type:** {agent.agent_type}")
    if agent.model:
        lines.append(f"**Model:** {agent.model}")
    return "\n".join(lines)


def render_agent_list(agents: list[AgentDefinition]) -> str:
    if not agents:
        return NO_AGENTS_TEXT
    header = (
        f"Available Agents ({len(agents)} total)\n\n"
        f"Each agent is callable as an MCP tool named '{TOOL_PREFIX}<agent name>'.\n\n"
        "---"
    )
    return "\n\n".join([header, *(_render_agent(a) for a in agents)])


class AgentResources:
    """Publishes the single agent listing resource."""

    def __init__(self, loader: AgentLoader) -> None:
        self._loader = loader

    @staticmethod
    def is_valid_resource_uri(uri: str) -> bool:
        return uri == AGENT_LIST_URI

    async def list_resources(self) -> list[ResourceInfo]:
        return [AGENT_LIST_RESOURCE]

    async def read_resource(self, uri: str) -> ResourceContent:
        """Render the resource at *uri*.

        A discovery failure is reported inside the text rather than
        raised.

        Raises:
            InvalidResourceError: For any URI other than ``agents://list``.
        """
        if not self.is_valid_resource_uri(uri):
            raise InvalidResourceError(uri)

        try:
            agents = await self._loader.list_agents()
        except AgentBridgeError as exc:
            logger.error("Failed to build agent list resource: %s", exc)
            return ResourceContent(uri=uri, text=f"Error loading agent list: {exc}")

        return ResourceContent(uri=uri, text=render_agent_list(agents))
