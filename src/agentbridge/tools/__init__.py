"""Agent tools: naming, parameter validation, and the registry."""
from __future__ import annotations

from agentbridge.tools.agent_tool import AgentTool, ExecutionStats, ToolResponse
from agentbridge.tools.naming import TOOL_PREFIX, sanitize_tool_name
from agentbridge.tools.params import (
    AGENT_TOOL_INPUT_SCHEMA,
    DEFAULT_OUTPUT_INSTRUCTIONS,
    AgentToolParams,
    compose_instruction,
    validate_params,
)
from agentbridge.tools.registry import (
    RegistryBuild,
    ToolCollision,
    ToolRegistry,
    build_tool_map,
)

__all__ = [
    "AGENT_TOOL_INPUT_SCHEMA",
    "DEFAULT_OUTPUT_INSTRUCTIONS",
    "TOOL_PREFIX",
    "AgentTool",
    "AgentToolParams",
    "ExecutionStats",
    "RegistryBuild",
    "ToolCollision",
    "ToolRegistry",
    "ToolResponse",
    "build_tool_map",
    "compose_instruction",
    "sanitize_tool_name",
    "validate_params",
]
