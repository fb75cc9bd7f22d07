"""One MCP tool per agent definition."""
from __future__ import annotations

import dataclasses
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from agentbridge.core.errors import AgentBridgeError, AgentNotFoundError
from agentbridge.core.logging import get_logger
from agentbridge.core.types import ExecutionRequest, OutcomeStatus
from agentbridge.tools.naming import sanitize_tool_name
from agentbridge.tools.params import (
    AGENT_TOOL_INPUT_SCHEMA,
    compose_instruction,
    validate_params,
)

if TYPE_CHECKING:
    from agentbridge.core.types import ExecutionOutcome
    from agentbridge.definitions.loader import AgentLoader
    from agentbridge.definitions.types import AgentDefinition
    from agentbridge.execution.executor import AgentExecutor

logger = get_logger("tools.agent_tool")


@dataclass(slots=True)
class ExecutionStats:
    """Usage counters for one tool, kept for the life of the process."""

    count: int = 0
    total_time_ms: int = 0
    last_used: datetime | None = None

    @property
    def average_time_ms(self) -> int:
        if self.count == 0:
            return 0
        return round(self.total_time_ms / self.count)

    def record(self, execution_time_ms: int) -> None:
        self.count += 1
        self.total_time_ms += execution_time_ms
        self.last_used = datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "totalTime": self.total_time_ms,
            "averageTime": self.average_time_ms,
            "lastUsed": self.last_used.isoformat() if self.last_used else None,
        }


@dataclass(frozen=True, slots=True)
class ToolResponse:
    """Result of a tool call in MCP ``CallToolResult`` shape."""

    text: str
    is_error: bool
    structured_content: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
            "structuredContent": self.structured_content,
        }


class AgentTool:
    """Callable tool bound to exactly one agent name.

    The definition is looked up again on every call, so edits to the
    agent file apply to the next invocation without re-registering.
    """

    def __init__(
        self,
        agent_name: str,
        description: str,
        executor: AgentExecutor,
        loader: AgentLoader,
    ) -> None:
        self._agent_name = agent_name
        self._executor = executor
        self._loader = loader
        self.name = sanitize_tool_name(agent_name)
        self.description = description
        self.input_schema = AGENT_TOOL_INPUT_SCHEMA
        self._stats = ExecutionStats()

    @classmethod
    def from_definition(
        cls,
        agent: AgentDefinition,
        executor: AgentExecutor,
        loader: AgentLoader,
    ) -> AgentTool:
        return cls(agent.name, agent.description, executor, loader)

    @property
    def agent_name(self) -> str:
        return self._agent_name

    @property
    def stats(self) -> ExecutionStats:
        """Snapshot of the usage counters."""
        return dataclasses.replace(self._stats)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def _new_request_id(self) -> str:
        return f"{self.name}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

    async def execute(self, raw_params: Any) -> ToolResponse:
        """Validate, run the agent and format the outcome.

        Never raises: every failure becomes an ``is_error`` response.
        """
        request_id = self._new_request_id()
        t0 = time.monotonic()
        logger.info(
            "Agent tool %s started (agent '%s')",
            self.name,
            self._agent_name,
            extra={"request_id": request_id, "tool_name": self.name},
        )

        try:
            params = validate_params(raw_params)

            agent = await self._loader.get_agent(self._agent_name)
            if agent is None:
                raise AgentNotFoundError(self._agent_name)

            request = ExecutionRequest(
                system_prompt=agent.content,
                instruction=compose_instruction(
                    params.prompt, params.output_instructions
                ),
                cwd=params.cwd,
                extra_args=params.extra_args or (),
                agent_type=agent.agent_type,
                model=agent.model,
                auto_approval=bool(agent.auto_approval_mode),
            )
            outcome = await self._executor.execute(request)
            self._stats.record(outcome.execution_time_ms)

        except Exception as exc:
            logger.error(
                "Agent tool %s failed after %dms: %s",
                self.name,
                int((time.monotonic() - t0) * 1000),
                exc,
                exc_info=not isinstance(exc, AgentBridgeError),
                extra={"request_id": request_id, "tool_name": self.name},
            )
            return self._error_response(f"Agent execution failed: {exc}")

        logger.info(
            "Agent tool %s completed: exit=%d in %dms",
            self.name,
            outcome.exit_code,
            outcome.execution_time_ms,
            extra={"request_id": request_id, "tool_name": self.name},
        )
        return self._format_response(outcome, request_id, agent.model)

    def _format_response(
        self,
        outcome: ExecutionOutcome,
        request_id: str,
        model: str | None,
    ) -> ToolResponse:
        status = outcome.status
        structured: dict[str, Any] = {
            "agent": self._agent_name,
            "toolName": self.name,
            "exitCode": outcome.exit_code,
            "executionTime": outcome.execution_time_ms,
            "hasResult": outcome.has_result,
            "status": str(status),
            "agentType": str(outcome.agent_type),
        }
        if model:
            structured["model"] = model
        if outcome.result_json is not None:
            structured["result"] = outcome.result_json
        if outcome.stdout and outcome.stderr:
            structured["stderr"] = outcome.stderr
        structured["requestId"] = request_id
        structured["usageCount"] = self._stats.count
        structured["averageTime"] = self._stats.average_time_ms

        return ToolResponse(
            text=outcome.stdout or outcome.stderr or "No output",
            is_error=status is OutcomeStatus.ERROR,
            structured_content=structured,
        )

    def _error_response(self, message: str) -> ToolResponse:
        return ToolResponse(
            text=f"Error: {message}",
            is_error=True,
            structured_content={
                "status": "error",
                "error": message,
                "agent": self._agent_name,
                "toolName": self.name,
            },
        )
