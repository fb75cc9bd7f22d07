"""agentbridge core: shared types, config, errors, and logging."""
from __future__ import annotations

from agentbridge.core.config import ExecutionConfig, ServerConfig
from agentbridge.core.errors import (
    AgentBridgeError,
    AgentError,
    AgentNotFoundError,
    ConfigError,
    DiscoveryError,
    ExecutionError,
    InvalidAgentNameError,
    InvalidResourceError,
    ParameterValidationError,
    ProtocolError,
    UnknownToolError,
)
from agentbridge.core.logging import get_logger, setup_logging
from agentbridge.core.types import (
    AgentType,
    ExecutionOutcome,
    ExecutionRequest,
    OutcomeStatus,
    classify_outcome,
)

__all__ = [
    # Errors
    "AgentBridgeError",
    "AgentError",
    "AgentNotFoundError",
    # Types
    "AgentType",
    "ConfigError",
    "DiscoveryError",
    # Config
    "ExecutionConfig",
    "ExecutionError",
    "ExecutionOutcome",
    "ExecutionRequest",
    "InvalidAgentNameError",
    "InvalidResourceError",
    "OutcomeStatus",
    "ParameterValidationError",
    "ProtocolError",
    "ServerConfig",
    "UnknownToolError",
    "classify_outcome",
    # Logging
    "get_logger",
    "setup_logging",
]
