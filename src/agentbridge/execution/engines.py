"""Command-line builders for the supported agent CLIs."""
from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from agentbridge.core.types import AgentType

if TYPE_CHECKING:
    from agentbridge.core.types import ExecutionRequest


def _merge_prompt(system_prompt: str, instruction: str) -> str:
    """Single-prompt engines receive the role definition ahead of the task."""
    if not system_prompt.strip():
        return instruction
    return f"{system_prompt}\n\n{instruction}"


class CLIEngine:
    """Builds the argv for one external agent CLI."""

    agent_type: ClassVar[AgentType]
    auto_approval_flags: ClassVar[tuple[str, ...]] = ()

    def build_command(self, executable: str, request: ExecutionRequest) -> list[str]:
        raise NotImplementedError

    def _common_flags(self, request: ExecutionRequest) -> list[str]:
        flags: list[str] = []
        if request.auto_approval:
            flags.extend(self.auto_approval_flags)
        if request.model:
            flags.extend(["--model", request.model])
        flags.extend(request.extra_args)
        return flags


class CursorEngine(CLIEngine):
    agent_type = AgentType.CURSOR
    auto_approval_flags = ("-f",)

    def build_command(self, executable: str, request: ExecutionRequest) -> list[str]:
        return [
            executable, "-p", "--output-format", "json",
            *self._common_flags(request),
            _merge_prompt(request.system_prompt, request.instruction),
        ]


class ClaudeEngine(CLIEngine):
    agent_type = AgentType.CLAUDE
    auto_approval_flags = ("--dangerously-skip-permissions",)

    def build_command(self, executable: str, request: ExecutionRequest) -> list[str]:
        cmd = [executable, "-p", "--output-format", "json"]
        if request.system_prompt.strip():
            cmd.extend(["--append-system-prompt", request.system_prompt])
        cmd.extend(self._common_flags(request))
        cmd.append(request.instruction)
        return cmd


class GeminiEngine(CLIEngine):
    agent_type = AgentType.GEMINI
    auto_approval_flags = ("--approval-mode", "yolo")

    def build_command(self, executable: str, request: ExecutionRequest) -> list[str]:
        return [
            executable, "--output-format", "json",
            *self._common_flags(request),
            "-p", _merge_prompt(request.system_prompt, request.instruction),
        ]


ENGINE_REGISTRY: dict[AgentType, CLIEngine] = {
    engine.agent_type: engine
    for engine in (CursorEngine(), ClaudeEngine(), GeminiEngine())
}


def get_engine(agent_type: AgentType) -> CLIEngine:
    return ENGINE_REGISTRY[agent_type]
