"""agentbridge: expose markdown-defined agents as MCP tools backed by agent CLIs."""
from __future__ import annotations

from agentbridge._version import __version__

__all__ = ["__version__"]
