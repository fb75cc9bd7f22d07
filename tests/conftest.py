from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

from agentbridge.core.config import ExecutionConfig, ServerConfig
from agentbridge.core.types import AgentType


@pytest.fixture
def agents_dir(tmp_path: Path) -> Path:
    path = tmp_path / "agents"
    path.mkdir()
    return path


@pytest.fixture
def write_agent(agents_dir: Path):
    """Write an agent definition file into ``agents_dir``."""

    def _write(filename: str, text: str) -> Path:
        path = agents_dir / filename
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_engine(tmp_path: Path):
    """Create an executable Python script that stands in for an agent CLI."""

    def _make(body: str, name: str = "fake-engine") -> str:
        path = tmp_path / name
        path.write_text(f"#!{sys.executable}\n{textwrap.dedent(body)}", encoding="utf-8")
        path.chmod(0o755)
        return str(path)

    return _make


# Prints its own argv as a JSON object.
ECHO_ENGINE = """
import json, sys
print(json.dumps({"argv": sys.argv[1:]}))
"""


@pytest.fixture
def echo_engine(make_engine) -> str:
    return make_engine(ECHO_ENGINE, name="echo-engine")


@pytest.fixture
def make_config(agents_dir: Path):
    def _make(command: str = "cursor-agent", **execution) -> ServerConfig:
        execution.setdefault("agent_type", AgentType.CURSOR)
        return ServerConfig(
            agents_dir=agents_dir,
            execution=ExecutionConfig(
                cursor_command=command,
                claude_command=command,
                gemini_command=command,
                **execution,
            ),
        )

    return _make
