from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

# ── Engine Types ─────────────────────────────────────────────────────

class AgentType(enum.StrEnum):
    """External CLI that executes an agent."""
    CURSOR = "cursor"
    CLAUDE = "claude"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: str | None) -> AgentType | None:
        """Return the matching member, or ``None`` for anything unrecognized."""
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# ── Execution Types ──────────────────────────────────────────────────

class OutcomeStatus(enum.StrEnum):
    SUCCESS = "success"
    PARTIAL = "partial"
    ERROR = "error"


# Exit code reported when the administrative timeout fired.
EXIT_TIMEOUT = 124
# Exit code of a process terminated by SIGTERM (128 + 15).
EXIT_SIGTERM = 143
# Exit code reported when the engine executable could not be started.
EXIT_NOT_FOUND = 127


def classify_outcome(exit_code: int, has_result: bool) -> OutcomeStatus:
    """Tag an execution as success, partial or error.

    A SIGTERM that still produced output counts as success; a timeout that
    produced output is partial; everything else that did not exit 0 is an
    error.
    """
    if exit_code == 0 or (exit_code == EXIT_SIGTERM and has_result):
        return OutcomeStatus.SUCCESS
    if exit_code == EXIT_TIMEOUT and has_result:
        return OutcomeStatus.PARTIAL
    return OutcomeStatus.ERROR


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """Everything needed to run one agent invocation."""
    system_prompt: str
    instruction: str
    cwd: str | None = None
    extra_args: tuple[str, ...] = ()
    agent_type: AgentType | None = None
    model: str | None = None
    auto_approval: bool = False


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Result of running an external engine once."""
    stdout: str
    stderr: str
    exit_code: int
    execution_time_ms: int
    has_result: bool
    agent_type: AgentType
    timed_out: bool = False
    result_json: dict[str, Any] | None = field(default=None, compare=False)

    @property
    def status(self) -> OutcomeStatus:
        return classify_outcome(self.exit_code, self.has_result)
