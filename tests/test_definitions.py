from __future__ import annotations

import logging
import re
from datetime import UTC
from pathlib import Path

import pytest

from agentbridge.core.errors import DiscoveryError, InvalidAgentNameError
from agentbridge.core.types import AgentType
from agentbridge.definitions import (
    AgentLoader,
    extract_description,
    parse_agent_file,
    parse_frontmatter,
    validate_agent_name,
)

ADVANCED_AGENT = """---
name: advanced-agent
description: "Does advanced things"
tools: tool1, tool2, tool3
autoApprovalMode: true
model: claude-3
agentType: claude
color: blue
---
# Advanced

Body text.
"""


class TestParseFrontmatter:
    def test_no_frontmatter(self):
        meta, body = parse_frontmatter("# Title\nbody")
        assert meta == {}
        assert body is None

    def test_advanced_agent(self):
        meta, body = parse_frontmatter(ADVANCED_AGENT)
        assert meta["name"] == "advanced-agent"
        assert meta["description"] == "Does advanced things"
        assert meta["tools"] == ("tool1", "tool2", "tool3")
        assert meta["autoApprovalMode"] is True
        assert meta["model"] == "claude-3"
        assert meta["agentType"] is AgentType.CLAUDE
        assert meta["color"] == "blue"
        assert body == "# Advanced\n\nBody text.\n"

    def test_invalid_agent_type_is_dropped(self):
        meta, _ = parse_frontmatter("---\nname: x\nagentType: invalid-value\n---\nbody")
        assert "agentType" not in meta
        assert meta["name"] == "x"

    def test_auto_approval_tokens(self):
        meta, _ = parse_frontmatter("---\nautoApprovalMode: FALSE\n---\n")
        assert meta["autoApprovalMode"] is False
        meta, _ = parse_frontmatter("---\nautoApprovalMode: yes\n---\n")
        assert "autoApprovalMode" not in meta

    def test_single_quotes_stripped_and_unknown_keys_ignored(self):
        meta, _ = parse_frontmatter("---\nname: 'quoted'\nversion: 3\n---\n")
        assert meta == {"name": "quoted"}

    def test_tools_drop_empty_entries(self):
        meta, _ = parse_frontmatter("---\ntools: a, , b ,\n---\n")
        assert meta["tools"] == ("a", "b")


class TestExtractDescription:
    def test_first_heading(self):
        assert extract_description("intro\n## Code Reviewer\nmore") == "Code Reviewer"

    def test_first_non_empty_line(self):
        assert extract_description("\n\n  Reviews code.  \nmore") == "Reviews code."

    def test_fallback(self):
        assert extract_description("   \n\n") == "Agent definition"


class TestParseAgentFile:
    def test_without_frontmatter(self, tmp_path: Path):
        path = tmp_path / "code-reviewer.md"
        path.write_text("# Code Reviewer\nReviews code.")

        agent = parse_agent_file(path)

        assert agent.name == "code-reviewer"
        assert agent.description == "Code Reviewer"
        assert agent.content == "# Code Reviewer\nReviews code."
        assert agent.file_path == path.resolve()
        assert agent.last_modified.tzinfo is UTC
        assert agent.agent_type is None
        assert agent.tools is None

    def test_with_frontmatter(self, tmp_path: Path):
        path = tmp_path / "whatever.txt"
        path.write_text(ADVANCED_AGENT)

        agent = parse_agent_file(path)

        assert agent.name == "advanced-agent"
        assert agent.content.startswith("# Advanced")
        assert "autoApprovalMode" not in agent.content
        assert agent.tools == ("tool1", "tool2", "tool3")
        assert agent.auto_approval_mode is True
        assert agent.agent_type is AgentType.CLAUDE
        assert agent.model == "claude-3"

    def test_description_from_body_when_missing(self, tmp_path: Path):
        path = tmp_path / "helper.md"
        path.write_text("---\nmodel: m\n---\n# Helper Agent\n")
        agent = parse_agent_file(path)
        assert agent.name == "helper"
        assert agent.description == "Helper Agent"


class TestValidateAgentName:
    @pytest.mark.parametrize("name", ["code-reviewer", "my.agent", "a_b", "x" * 255])
    def test_valid(self, name):
        assert validate_agent_name(name) == name

    @pytest.mark.parametrize(
        ("name", "reason"),
        [
            ("", "agent name is required"),
            (None, "agent name is required"),
            ("   ", "empty agent name not allowed"),
            ("x" * 256, "too long agent name"),
            ("a/b", "forbidden characters detected"),
            ("rm;ls", "forbidden characters detected"),
            ("two words", "forbidden characters detected"),
            ("bell\x07", "forbidden characters detected"),
            ("..", "path traversal attempt detected"),
            ("up..there", "path traversal attempt detected"),
        ],
    )
    def test_invalid(self, name, reason):
        with pytest.raises(InvalidAgentNameError, match=f"^Invalid agent name: {reason}$"):
            validate_agent_name(name)


class TestAgentLoader:
    async def test_empty_directory(self, agents_dir: Path):
        loader = AgentLoader(agents_dir)
        assert await loader.list_agents() == []

    async def test_only_agent_files(self, agents_dir: Path, write_agent):
        write_agent("notes.json", "{}")
        write_agent("readme.rst", "x")
        (agents_dir / "nested.md").mkdir()
        write_agent("a.md", "# A")
        write_agent("b.txt", "# B")

        agents = await AgentLoader(agents_dir).list_agents()

        assert [a.name for a in agents] == ["a", "b"]

    async def test_non_agent_files_give_empty_listing(self, agents_dir: Path, write_agent):
        write_agent("data.yaml", "a: 1")
        assert AgentLoader(agents_dir).discover() == []

    async def test_missing_directory(self, tmp_path: Path):
        missing = tmp_path / "nope"
        loader = AgentLoader(missing)
        with pytest.raises(DiscoveryError, match="Failed to load agents from directory"):
            await loader.list_agents()
        with pytest.raises(DiscoveryError):
            await loader.get_agent("anything")

    async def test_not_a_directory(self, tmp_path: Path):
        file_path = tmp_path / "file.md"
        file_path.write_text("x")
        with pytest.raises(DiscoveryError, match=re.escape(str(file_path))):
            AgentLoader(file_path).discover()

    async def test_get_agent(self, agents_dir: Path, write_agent):
        write_agent("code-reviewer.md", "# Code Reviewer\nReviews code.")
        loader = AgentLoader(agents_dir)

        agent = await loader.get_agent("code-reviewer")
        assert agent is not None
        assert agent.description == "Code Reviewer"
        assert await loader.get_agent("other") is None

    async def test_get_agent_validates_name(self, agents_dir: Path):
        with pytest.raises(InvalidAgentNameError):
            await AgentLoader(agents_dir).get_agent("../etc/passwd")

    async def test_rereads_directory(self, agents_dir: Path, write_agent):
        loader = AgentLoader(agents_dir)
        write_agent("a.md", "# First")
        assert (await loader.get_agent("a")).description == "First"

        write_agent("a.md", "# Second")
        write_agent("b.md", "# B")

        assert (await loader.get_agent("a")).description == "Second"
        assert await loader.refresh() == 2

    async def test_repeated_listings_are_equal(self, agents_dir: Path, write_agent):
        write_agent("a.md", "---\nname: alpha\ntools: x, y\n---\n# A")
        loader = AgentLoader(agents_dir)
        assert await loader.list_agents() == await loader.list_agents()

    async def test_file_without_name_is_skipped(self, agents_dir: Path, write_agent, caplog):
        write_agent(".md", "# hidden")
        write_agent("a.md", "# A")

        with caplog.at_level(logging.WARNING, logger="agentbridge"):
            agents = await AgentLoader(agents_dir).list_agents()

        assert [a.name for a in agents] == ["a"]
        assert any("agent name is empty" in r.getMessage() for r in caplog.records)

    async def test_duplicate_names_last_file_wins(self, agents_dir: Path, write_agent):
        write_agent("a.md", "---\nname: shared\n---\n# From A")
        write_agent("b.md", "---\nname: shared\n---\n# From B")

        agents = await AgentLoader(agents_dir).list_agents()

        assert len(agents) == 1
        assert agents[0].description == "From B"

    async def test_unreadable_file_is_skipped(self, agents_dir: Path, write_agent, caplog):
        (agents_dir / "broken.md").write_bytes(b"\xff\xfe\xfa not utf-8")
        write_agent("good.md", "# Good")

        with caplog.at_level(logging.WARNING, logger="agentbridge"):
            agents = await AgentLoader(agents_dir).list_agents()

        assert [a.name for a in agents] == ["good"]
        assert any("broken.md" in r.getMessage() for r in caplog.records)
