from __future__ import annotations


class AgentBridgeError(Exception):
    """Base exception for all agentbridge errors."""


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(AgentBridgeError):
    """Invalid or missing configuration."""


# ── Discovery Errors ─────────────────────────────────────────────────

class DiscoveryError(AgentBridgeError):
    """The agents directory could not be scanned."""

    def __init__(self, directory: str) -> None:
        super().__init__(f"Failed to load agents from directory: {directory}")
        self.directory = directory


# ── Agent Errors ─────────────────────────────────────────────────────

class AgentError(AgentBridgeError):
    """Base for agent-related errors."""


class AgentNotFoundError(AgentError):
    """Agent definition vanished between registration and call."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Agent '{name}' not found")
        self.name = name


class InvalidAgentNameError(AgentError):
    """Agent name failed syntactic validation."""


# ── Tool Call Errors ─────────────────────────────────────────────────

class ParameterValidationError(AgentBridgeError, ValueError):
    """Tool call arguments violate the input schema."""


class ExecutionError(AgentBridgeError):
    """The external engine could not be dispatched."""


# ── Protocol Errors ──────────────────────────────────────────────────

class ProtocolError(AgentBridgeError):
    """Client-side contract violation surfaced at the protocol level."""


class UnknownToolError(ProtocolError):
    """Tool name is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class InvalidResourceError(ProtocolError):
    """Resource URI is not published by this server."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"Invalid resource URI: {uri}")
        self.uri = uri
