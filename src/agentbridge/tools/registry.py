"""Tool registry: agent definitions → name-addressable tools."""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from agentbridge.core.logging import get_logger
from agentbridge.tools.naming import sanitize_tool_name

if TYPE_CHECKING:
    from agentbridge.definitions.loader import AgentLoader
    from agentbridge.definitions.types import AgentDefinition
    from agentbridge.tools.agent_tool import AgentTool

logger = get_logger("tools.registry")

ToolFactory = Callable[["AgentDefinition"], "AgentTool"]


@dataclass(frozen=True, slots=True)
class ToolCollision:
    """Several agents whose names sanitize to the same tool name."""

    tool_name: str
    agent_names: tuple[str, ...]

    @property
    def hidden_agents(self) -> tuple[str, ...]:
        return self.agent_names[:-1]

    @property
    def accessible_agent(self) -> str:
        return self.agent_names[-1]


@dataclass(frozen=True, slots=True)
class RegistryBuild:
    tools: dict[str, AgentTool]
    collisions: tuple[ToolCollision, ...] = ()


def build_tool_map(
    agents: Iterable[AgentDefinition],
    factory: ToolFactory,
) -> RegistryBuild:
    """Create one tool per agent, keyed by sanitized tool name.

    Agents are registered in order and a later agent replaces an earlier
    one with the same tool name.  Every replacement is logged at warning
    level and a single error-level summary lists all collision groups.
    """
    tools: dict[str, AgentTool] = {}
    names_by_tool: dict[str, list[str]] = {}

    for agent in agents:
        tool_name = sanitize_tool_name(agent.name)
        claimants = names_by_tool.setdefault(tool_name, [])
        claimants.append(agent.name)

        if len(claimants) > 1:
            logger.warning(
                "Tool name collision: %s is claimed by %s; only '%s' will be accessible",
                tool_name,
                ", ".join(f"'{n}'" for n in claimants),
                agent.name,
                extra={"tool_name": tool_name, "colliding_agents": list(claimants)},
            )

        tools[tool_name] = factory(agent)
        logger.debug("Registered tool %s for agent '%s'", tool_name, agent.name)

    collisions = tuple(
        ToolCollision(tool_name=tool_name, agent_names=tuple(names))
        for tool_name, names in names_by_tool.items()
        if len(names) > 1
    )

    if collisions:
        summary = "; ".join(
            f"{c.tool_name}: hidden {list(c.hidden_agents)}, "
            f"accessible '{c.accessible_agent}'"
            for c in collisions
        )
        logger.error(
            "%d tool name collision(s) during registration; rename agent "
            "files to avoid hidden agents: %s",
            len(collisions),
            summary,
            extra={
                "collision_count": len(collisions),
                "collisions": [
                    {"tool_name": c.tool_name, "agents": list(c.agent_names)}
                    for c in collisions
                ],
            },
        )

    return RegistryBuild(tools=tools, collisions=collisions)


class ToolRegistry:
    """Lazily built map of tool name → :class:`AgentTool`.

    The map is built on first use and rebuilt whenever it is empty, so a
    server started against an empty or missing directory picks agents up
    once they appear.
    """

    def __init__(self, loader: AgentLoader, factory: ToolFactory) -> None:
        self._loader = loader
        self._factory = factory
        self._tools: dict[str, AgentTool] = {}
        self._collisions: tuple[ToolCollision, ...] = ()
        self._build_lock = asyncio.Lock()

    @property
    def collisions(self) -> tuple[ToolCollision, ...]:
        return self._collisions

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    async def ensure_loaded(self) -> dict[str, AgentTool]:
        """Build the map if it is empty and return it.

        Concurrent first calls share one build, so every caller gets the
        same tool instances. A failed build leaves the registry empty; the
        error is logged instead of raised.
        """
        if self._tools:
            return self._tools

        async with self._build_lock:
            if self._tools:
                return self._tools

            try:
                agents = await self._loader.list_agents()
                build = build_tool_map(agents, self._factory)
            except Exception as exc:
                logger.warning(
                    "Failed to initialize agent tools (server will have 0 tools): %s",
                    exc,
                    exc_info=True,
                )
                self._tools, self._collisions = {}, ()
                return self._tools

            self._tools, self._collisions = build.tools, build.collisions
            logger.info("Registered %d agent tool(s)", len(build.tools))
            return self._tools

    def get(self, tool_name: str) -> AgentTool | None:
        return self._tools.get(tool_name)

    def tools(self) -> list[AgentTool]:
        return list(self._tools.values())

    def clear(self) -> None:
        self._tools, self._collisions = {}, ()
