"""Runs agent requests through the configured external CLI."""
from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from agentbridge.core.errors import ExecutionError
from agentbridge.core.logging import get_logger
from agentbridge.core.types import ExecutionOutcome
from agentbridge.execution.engines import get_engine
from agentbridge.execution.process import run_process

if TYPE_CHECKING:
    from agentbridge.core.config import ExecutionConfig
    from agentbridge.core.types import ExecutionRequest

logger = get_logger("execution.executor")


def _parse_result_json(stdout: str) -> dict[str, Any] | None:
    """Decode the engine's JSON envelope; plain-text output yields ``None``."""
    text = stdout.strip()
    if not text.startswith("{"):
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class AgentExecutor:
    """Spawns one engine process per request.

    The engine is the request's own ``agent_type`` when set, otherwise
    the configured default.  The process inherits the server's
    environment and receives nothing on stdin.
    """

    def __init__(self, config: ExecutionConfig) -> None:
        self._config = config

    @property
    def config(self) -> ExecutionConfig:
        return self._config

    def build_command(self, request: ExecutionRequest) -> list[str]:
        agent_type = request.agent_type or self._config.agent_type
        engine = get_engine(agent_type)
        return engine.build_command(self._config.command_for(agent_type), request)

    async def execute(self, request: ExecutionRequest) -> ExecutionOutcome:
        """Run *request* to completion or timeout.

        Raises:
            ExecutionError: If the requested working directory does not exist.
        """
        agent_type = request.agent_type or self._config.agent_type
        cwd = self._resolve_cwd(request.cwd)
        argv = self.build_command(request)
        timeout = self._config.execution_timeout_ms / 1000

        logger.info(
            "Executing %s engine (timeout %.0fs, cwd %s)",
            agent_type,
            timeout,
            cwd or ".",
        )
        logger.debug("Engine argv: %s", argv[:-1])

        result = await run_process(
            argv,
            cwd=cwd,
            timeout=timeout,
            kill_grace=self._config.kill_grace_ms / 1000,
        )

        outcome = ExecutionOutcome(
            stdout=result.stdout,
            stderr=result.stderr,
            exit_code=result.exit_code,
            execution_time_ms=result.duration_ms,
            has_result=bool(result.stdout.strip()),
            agent_type=agent_type,
            timed_out=result.timed_out,
            result_json=_parse_result_json(result.stdout),
        )

        logger.info(
            "%s engine finished: exit=%d status=%s in %dms",
            agent_type,
            outcome.exit_code,
            outcome.status,
            outcome.execution_time_ms,
        )
        return outcome

    @staticmethod
    def _resolve_cwd(cwd: str | None) -> str | None:
        if cwd is None or not cwd.strip():
            return None
        path = Path(cwd).expanduser()
        if not path.is_dir():
            raise ExecutionError(f"Working directory does not exist: {cwd}")
        return str(path)
