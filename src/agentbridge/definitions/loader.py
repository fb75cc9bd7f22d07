"""Agent definition discovery and loading from the filesystem."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from agentbridge.core.errors import DiscoveryError
from agentbridge.core.logging import get_logger
from agentbridge.definitions.parser import AGENT_FILE_SUFFIXES, parse_agent_file
from agentbridge.definitions.validator import validate_agent_name

if TYPE_CHECKING:
    from agentbridge.definitions.types import AgentDefinition

logger = get_logger("definitions.loader")


class AgentLoader:
    """Discovers and loads agent definitions from one directory.

    Every ``.md`` and ``.txt`` file directly inside the directory is an
    agent definition.  Nothing is cached: each call re-reads the
    directory and re-parses every file, so edits on disk are visible to
    the next request.
    """

    def __init__(self, agents_dir: Path | str) -> None:
        self._agents_dir = Path(agents_dir)

    @property
    def agents_dir(self) -> Path:
        return self._agents_dir

    def discover(self) -> list[AgentDefinition]:
        """Scan the directory and return the parsed definitions.

        Files are visited in name order.  When two files derive the same
        agent name, the later file replaces the earlier one.

        Raises:
            DiscoveryError: If the directory cannot be listed.
        """
        return list(self._load_directory().values())

    async def list_agents(self) -> list[AgentDefinition]:
        """Async variant of :meth:`discover`; the scan runs in a worker thread."""
        return await asyncio.to_thread(self.discover)

    async def get_agent(self, name: str) -> AgentDefinition | None:
        """Look up one agent by exact name after a full rescan.

        Raises:
            InvalidAgentNameError: If *name* fails validation.
            DiscoveryError: If the directory cannot be listed.
        """
        validate_agent_name(name)
        agents = await asyncio.to_thread(self._load_directory)
        return agents.get(name)

    async def refresh(self) -> int:
        """Rescan the directory and return how many definitions it holds."""
        agents = await asyncio.to_thread(self._load_directory)
        return len(agents)

    def _load_directory(self) -> dict[str, AgentDefinition]:
        agents_dir = self._agents_dir.expanduser().resolve()
        logger.info("Starting agent discovery in %s", agents_dir)

        try:
            entries = sorted(agents_dir.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            logger.error(
                "Failed to scan agents directory %s: %s", self._agents_dir, exc
            )
            raise DiscoveryError(str(self._agents_dir)) from exc

        agent_files = [
            p for p in entries
            if p.name.endswith(AGENT_FILE_SUFFIXES) and p.is_file()
        ]
        logger.debug(
            "Found %d agent file(s) among %d entries",
            len(agent_files),
            len(entries),
        )

        agents: dict[str, AgentDefinition] = {}
        for path in agent_files:
            try:
                agent = parse_agent_file(path)
            except (OSError, UnicodeDecodeError):
                logger.warning(
                    "Failed to load agent definition from %s",
                    path,
                    exc_info=True,
                )
                continue

            if not agent.name:
                logger.warning("Skipping %s: agent name is empty", path)
                continue

            agents[agent.name] = agent
            logger.debug("Loaded agent '%s' from %s", agent.name, path)

        logger.info("Discovered %d agent definition(s)", len(agents))
        return agents
