from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from agentbridge.core.errors import DiscoveryError, ParameterValidationError
from agentbridge.definitions.types import AgentDefinition
from agentbridge.tools import (
    AGENT_TOOL_INPUT_SCHEMA,
    DEFAULT_OUTPUT_INSTRUCTIONS,
    ToolRegistry,
    build_tool_map,
    compose_instruction,
    sanitize_tool_name,
    validate_params,
)
from agentbridge.tools.agent_tool import AgentTool


def _agent(name: str, description: str = "desc") -> AgentDefinition:
    return AgentDefinition(
        name=name,
        description=description,
        content="body",
        file_path=Path(f"/agents/{name}.md"),
        last_modified=datetime(2024, 1, 1, tzinfo=UTC),
    )


def _factory(agent: AgentDefinition) -> AgentTool:
    return AgentTool(agent.name, agent.description, executor=MagicMock(), loader=MagicMock())


class TestSanitizeToolName:
    @pytest.mark.parametrize(
        ("agent_name", "tool_name"),
        [
            ("code-reviewer", "agent_code-reviewer"),
            ("my.agent", "agent_my_agent"),
            ("my_agent", "agent_my_agent"),
            ("日本", "agent___"),
            ("a b/c", "agent_a_b_c"),
        ],
    )
    def test_mapping(self, agent_name, tool_name):
        assert sanitize_tool_name(agent_name) == tool_name

    def test_length_preserving(self):
        for name in ["x", "with space", "ü-ñ", "a.b.c.d"]:
            tool_name = sanitize_tool_name(name)
            assert tool_name.startswith("agent_")
            assert len(tool_name) == len("agent_") + len(name)


class TestValidateParams:
    def test_minimal(self):
        params = validate_params({"prompt": "  check foo.ts  "})
        assert params.prompt == "check foo.ts"
        assert params.output_instructions is None
        assert params.cwd is None
        assert params.extra_args is None

    def test_all_fields(self):
        params = validate_params({
            "prompt": "p",
            "output_instructions": "be brief",
            "cwd": "/work",
            "extra_args": ["--verbose"],
        })
        assert params.output_instructions == "be brief"
        assert params.cwd == "/work"
        assert params.extra_args == ("--verbose",)

    def test_nulls_accepted(self):
        params = validate_params({
            "prompt": "p", "output_instructions": None, "cwd": None, "extra_args": None,
        })
        assert params.extra_args is None

    def test_prompt_length_boundary(self):
        assert len(validate_params({"prompt": "x" * 50_000}).prompt) == 50_000
        with pytest.raises(ParameterValidationError, match="Prompt too long"):
            validate_params({"prompt": "x" * 50_001})

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ("not a dict", "Invalid parameters: expected object"),
            (None, "Invalid parameters: expected object"),
            ({}, "Prompt parameter is required and must be a string"),
            ({"prompt": 42}, "Prompt parameter is required and must be a string"),
            ({"prompt": ""}, "Prompt parameter is required and must be a string"),
            ({"prompt": "   "}, "Invalid prompt parameter: cannot be empty"),
            ({"prompt": "p", "output_instructions": 1},
             "output_instructions parameter must be a string if provided"),
            ({"prompt": "p", "output_instructions": "x" * 5_001},
             "output_instructions too long (max 5,000 characters)"),
            ({"prompt": "p", "cwd": 5}, "CWD parameter must be a string if provided"),
            ({"prompt": "p", "cwd": "x" * 1_001},
             "Working directory path too long (max 1000 characters)"),
            ({"prompt": "p", "cwd": "/tmp/../etc"}, "Invalid working directory path"),
            ({"prompt": "p", "cwd": "/tmp/\0"}, "Invalid working directory path"),
            ({"prompt": "p", "extra_args": "--flag"},
             "Extra args parameter must be an array if provided"),
            ({"prompt": "p", "extra_args": ["a"] * 21},
             "Too many extra arguments (max 20 allowed)"),
            ({"prompt": "p", "extra_args": ["ok", 3]},
             "Extra argument at index 1 must be a string"),
            ({"prompt": "p", "extra_args": ["x" * 1_001]},
             "Extra argument at index 0 too long (max 1000 characters)"),
        ],
    )
    def test_rejections(self, raw, message):
        with pytest.raises(ParameterValidationError) as exc_info:
            validate_params(raw)
        assert str(exc_info.value) == message

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_params({})

    def test_schema(self):
        assert AGENT_TOOL_INPUT_SCHEMA["required"] == ["prompt"]
        assert set(AGENT_TOOL_INPUT_SCHEMA["properties"]) == {
            "prompt", "output_instructions", "cwd", "extra_args",
        }
        assert AGENT_TOOL_INPUT_SCHEMA["properties"]["extra_args"]["items"] == {"type": "string"}


class TestComposeInstruction:
    def test_default_instructions(self):
        assert compose_instruction("do it") == (
            f"do it\n\n[Output Instructions]\n{DEFAULT_OUTPUT_INSTRUCTIONS}"
        )

    def test_custom_instructions(self):
        assert compose_instruction("do it", "JSON only") == (
            "do it\n\n[Output Instructions]\nJSON only"
        )


class TestBuildToolMap:
    def test_one_tool_per_agent(self):
        build = build_tool_map([_agent("a"), _agent("b-c")], _factory)
        assert list(build.tools) == ["agent_a", "agent_b-c"]
        assert build.tools["agent_b-c"].agent_name == "b-c"
        assert build.collisions == ()

    def test_collision_last_wins_and_is_logged(self, caplog):
        agents = [_agent("my.agent", "first"), _agent("my_agent", "second")]

        with caplog.at_level(logging.WARNING, logger="agentbridge"):
            build = build_tool_map(agents, _factory)

        assert list(build.tools) == ["agent_my_agent"]
        assert build.tools["agent_my_agent"].agent_name == "my_agent"
        assert build.tools["agent_my_agent"].description == "second"

        (collision,) = build.collisions
        assert collision.tool_name == "agent_my_agent"
        assert collision.hidden_agents == ("my.agent",)
        assert collision.accessible_agent == "my_agent"

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(warnings) == 1
        assert "my.agent" in warnings[0].getMessage()
        assert "my_agent" in warnings[0].getMessage()
        assert warnings[0].colliding_agents == ["my.agent", "my_agent"]
        assert len(errors) == 1
        assert "agent_my_agent" in errors[0].getMessage()
        assert "my.agent" in errors[0].getMessage()

    def test_three_way_collision(self):
        build = build_tool_map([_agent("a.b"), _agent("a b"), _agent("a_b")], _factory)
        (collision,) = build.collisions
        assert collision.agent_names == ("a.b", "a b", "a_b")
        assert collision.hidden_agents == ("a.b", "a b")
        assert build.tools["agent_a_b"].agent_name == "a_b"


class TestToolRegistry:
    async def test_concurrent_first_calls_share_one_build(self):
        async def slow_listing():
            await asyncio.sleep(0.05)
            return [_agent("a")]

        loader = MagicMock()
        loader.list_agents = AsyncMock(side_effect=slow_listing)
        registry = ToolRegistry(loader, _factory)

        results = await asyncio.gather(*(registry.ensure_loaded() for _ in range(3)))

        assert loader.list_agents.await_count == 1
        assert all(r["agent_a"] is results[0]["agent_a"] for r in results)

    async def test_lazy_build_and_reuse(self):
        loader = MagicMock()
        loader.list_agents = AsyncMock(return_value=[_agent("a")])
        registry = ToolRegistry(loader, _factory)

        assert len(registry) == 0
        tools = await registry.ensure_loaded()
        await registry.ensure_loaded()

        assert list(tools) == ["agent_a"]
        assert loader.list_agents.await_count == 1
        assert registry.get("agent_a") is tools["agent_a"]
        assert registry.get("agent_b") is None
        assert "agent_a" in registry

    async def test_failed_build_leaves_registry_empty(self, caplog):
        loader = MagicMock()
        loader.list_agents = AsyncMock(side_effect=DiscoveryError("/missing"))
        registry = ToolRegistry(loader, _factory)

        with caplog.at_level(logging.WARNING, logger="agentbridge"):
            tools = await registry.ensure_loaded()

        assert tools == {}
        assert registry.tools() == []
        assert any("0 tools" in r.getMessage() for r in caplog.records)

    async def test_empty_registry_is_rebuilt(self):
        loader = MagicMock()
        loader.list_agents = AsyncMock(side_effect=[[], [_agent("late")]])
        registry = ToolRegistry(loader, _factory)

        assert await registry.ensure_loaded() == {}
        assert list(await registry.ensure_loaded()) == ["agent_late"]

    async def test_clear(self):
        loader = MagicMock()
        loader.list_agents = AsyncMock(return_value=[_agent("x.y"), _agent("x_y")])
        registry = ToolRegistry(loader, _factory)
        await registry.ensure_loaded()
        assert len(registry.collisions) == 1

        registry.clear()

        assert len(registry) == 0
        assert registry.collisions == ()
