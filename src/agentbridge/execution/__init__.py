"""External engine execution: command building and process supervision."""
from __future__ import annotations

from agentbridge.execution.engines import (
    ENGINE_REGISTRY,
    ClaudeEngine,
    CLIEngine,
    CursorEngine,
    GeminiEngine,
    get_engine,
)
from agentbridge.execution.executor import AgentExecutor
from agentbridge.execution.process import ProcessResult, run_process

__all__ = [
    "ENGINE_REGISTRY",
    "AgentExecutor",
    "CLIEngine",
    "ClaudeEngine",
    "CursorEngine",
    "GeminiEngine",
    "ProcessResult",
    "get_engine",
    "run_process",
]
