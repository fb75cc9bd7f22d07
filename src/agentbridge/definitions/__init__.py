"""Agent definition system: file parsing, discovery, and name validation."""
from __future__ import annotations

from agentbridge.definitions.loader import AgentLoader
from agentbridge.definitions.parser import (
    extract_description,
    parse_agent_file,
    parse_frontmatter,
)
from agentbridge.definitions.types import AgentDefinition
from agentbridge.definitions.validator import validate_agent_name

__all__ = [
    "AgentDefinition",
    "AgentLoader",
    "extract_description",
    "parse_agent_file",
    "parse_frontmatter",
    "validate_agent_name",
]
