from __future__ import annotations

from pathlib import Path

import pytest

from agentbridge.core.errors import InvalidResourceError
from agentbridge.definitions.loader import AgentLoader
from agentbridge.resources import AGENT_LIST_URI, AgentResources


class TestAgentResources:
    async def test_list_resources(self, agents_dir: Path):
        (resource,) = await AgentResources(AgentLoader(agents_dir)).list_resources()
        assert resource.uri == "agents://list"
        assert resource.name == "Agent List"
        assert "available agents" in resource.description
        assert resource.mime_type == "text/plain"

    def test_is_valid_resource_uri(self):
        assert AgentResources.is_valid_resource_uri("agents://list")
        assert not AgentResources.is_valid_resource_uri("agents://other")
        assert not AgentResources.is_valid_resource_uri("file:///etc/passwd")

    async def test_empty_directory(self, agents_dir: Path):
        content = await AgentResources(AgentLoader(agents_dir)).read_resource(AGENT_LIST_URI)
        assert content.text == "No agents available. Check agent directory configuration."
        assert content.uri == AGENT_LIST_URI
        assert content.mime_type == "text/plain"

    async def test_listing(self, agents_dir: Path, write_agent):
        write_agent("code-reviewer.md", "# Code Reviewer\nReviews code.")
        write_agent(
            "fancy.md",
            "---\nname: my.fancy\nmodel: opus\nagentType: claude\n---\nFancy agent",
        )

        text = (await AgentResources(AgentLoader(agents_dir)).read_resource(AGENT_LIST_URI)).text

        assert text.startswith("Available Agents (2 total)")
        assert "## code-reviewer" in text
        assert "**Description:** Code Reviewer" in text
        assert "**Tool Name:** agent_code-reviewer" in text
        assert f"**File:** {(agents_dir / 'code-reviewer.md').resolve()}" in text
        assert "**Last Modified:** " in text
        assert "## my.fancy" in text
        assert "**Tool Name:** agent_my_fancy" in text
        assert "**Agent Type:** claude" in text
        assert "**Model:** opus" in text
        # The plain agent carries no engine or model lines.
        plain_section = text.split("## code-reviewer")[1].split("## my.fancy")[0]
        assert "**Agent Type:**" not in plain_section

    async def test_discovery_failure_is_reported_in_text(self, tmp_path: Path):
        resources = AgentResources(AgentLoader(tmp_path / "missing"))
        content = await resources.read_resource(AGENT_LIST_URI)
        assert content.text.startswith("Error loading agent list: Failed to load agents from directory")

    async def test_invalid_uri(self, agents_dir: Path):
        with pytest.raises(InvalidResourceError, match="Invalid resource URI: agents://nope"):
            await AgentResources(AgentLoader(agents_dir)).read_resource("agents://nope")
