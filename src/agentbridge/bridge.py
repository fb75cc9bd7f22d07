"""Protocol-independent core of the server: tools and resources."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from agentbridge.core.errors import UnknownToolError
from agentbridge.core.logging import get_logger
from agentbridge.definitions.loader import AgentLoader
from agentbridge.execution.executor import AgentExecutor
from agentbridge.resources import AgentResources
from agentbridge.tools.agent_tool import AgentTool
from agentbridge.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from agentbridge.core.config import ServerConfig
    from agentbridge.definitions.types import AgentDefinition
    from agentbridge.resources import ResourceContent, ResourceInfo
    from agentbridge.tools.agent_tool import ToolResponse

logger = get_logger("bridge")


class AgentBridge:
    """Implements list_tools / call_tool / list_resources / read_resource.

    Transport code (see :mod:`agentbridge.server`) adapts these calls to
    MCP message types.  Collaborators may be injected for testing.
    """

    def __init__(
        self,
        config: ServerConfig,
        *,
        loader: AgentLoader | None = None,
        executor: AgentExecutor | None = None,
    ) -> None:
        config.validate()
        self._config = config
        self._loader = loader or AgentLoader(config.agents_dir)
        self._executor = executor or AgentExecutor(config.execution)
        self._registry = ToolRegistry(self._loader, self._make_tool)
        self._resources = AgentResources(self._loader)
        logger.info(
            "Bridge %s v%s initialized (agents: %s, engine: %s)",
            config.server_name,
            config.server_version,
            config.agents_dir,
            config.agent_type,
        )

    def _make_tool(self, agent: AgentDefinition) -> AgentTool:
        return AgentTool.from_definition(agent, self._executor, self._loader)

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def loader(self) -> AgentLoader:
        return self._loader

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def server_info(self) -> dict[str, str]:
        return {
            "name": self._config.server_name,
            "version": self._config.server_version,
        }

    async def list_tools(self) -> list[dict[str, Any]]:
        tools = await self._registry.ensure_loaded()
        return [tool.describe() for tool in tools.values()]

    async def resolve_tool(self, name: str) -> AgentTool:
        """Return the tool registered under *name*.

        Raises:
            UnknownToolError: If no tool has that name.
        """
        await self._registry.ensure_loaded()
        tool = self._registry.get(name)
        if tool is None:
            logger.warning("Call to unknown tool %s", name)
            raise UnknownToolError(name)
        return tool

    async def call_tool(self, name: str, arguments: Any) -> ToolResponse:
        """Dispatch a call to the tool registered under *name*.

        Raises:
            UnknownToolError: If no tool has that name.
        """
        tool = await self.resolve_tool(name)
        return await tool.execute(arguments)

    async def list_resources(self) -> list[ResourceInfo]:
        return await self._resources.list_resources()

    async def read_resource(self, uri: str) -> ResourceContent:
        """Raises :class:`InvalidResourceError` for unknown URIs."""
        return await self._resources.read_resource(uri)

    async def refresh(self) -> int:
        """Drop the registered tools and rebuild them from disk."""
        self._registry.clear()
        tools = await self._registry.ensure_loaded()
        logger.info("Refreshed agent tools: %d registered", len(tools))
        return len(tools)

    def get_server_stats(self) -> dict[str, Any]:
        return {
            "serverInfo": self.server_info,
            "executionStats": {
                tool.name: tool.stats.to_dict() for tool in self._registry.tools()
            },
        }

    def shutdown(self) -> int:
        """Log the final execution count and return it."""
        total = sum(tool.stats.count for tool in self._registry.tools())
        logger.info(
            "Shutting down %s: %d agent execution(s) served",
            self._config.server_name,
            total,
            extra={"execution_count": total},
        )
        return total
