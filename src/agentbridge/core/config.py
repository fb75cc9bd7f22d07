from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentbridge._version import __version__
from agentbridge.core.errors import ConfigError
from agentbridge.core.types import AgentType

DEFAULT_TIMEOUT_MS = 300_000   # 5 minutes
MAX_TIMEOUT_MS = 600_000       # 10 minutes hard cap
DEFAULT_CONFIG_FILE = "agentbridge.toml"

_LOG_LEVELS = frozenset({"debug", "info", "warn", "warning", "error"})
_LOG_FORMATS = frozenset({"text", "json"})

# Environment variable -> (section, key)
_ENV_KEYS: dict[str, tuple[str, str]] = {
    "AGENTS_DIR": ("server", "agents_dir"),
    "AGENT_TYPE": ("execution", "agent_type"),
    "LOG_LEVEL": ("server", "log_level"),
    "LOG_FORMAT": ("server", "log_format"),
    "SERVER_NAME": ("server", "server_name"),
    "SERVER_VERSION": ("server", "server_version"),
    "EXECUTION_TIMEOUT_MS": ("execution", "execution_timeout_ms"),
    "CURSOR_CLI": ("execution", "cursor_command"),
    "CLAUDE_CLI": ("execution", "claude_command"),
    "GEMINI_CLI": ("execution", "gemini_command"),
}


def _load_toml(path: Path) -> dict:
    """Load a TOML file, returning empty dict if missing."""
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (1 level deep for TOML sections)."""
    merged = dict(base)
    for key, val in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(val, dict)
        ):
            merged[key] = {**merged[key], **val}
        else:
            merged[key] = val
    return merged


def _pick(section: dict, dc: type) -> dict:
    fields = dc.__dataclass_fields__
    return {k: v for k, v in section.items() if k in fields}


def _parse_agent_type(value: Any) -> AgentType:
    if isinstance(value, AgentType):
        return value
    agent_type = AgentType.parse(str(value))
    if agent_type is None:
        valid = ", ".join(t.value for t in AgentType)
        raise ConfigError(f"Invalid agent type '{value}' (expected one of: {valid})")
    return agent_type


def _parse_timeout(value: Any) -> int:
    try:
        timeout = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid execution timeout: {value!r}") from exc
    if timeout < 1:
        raise ConfigError(f"Execution timeout must be at least 1 ms, got {timeout}")
    return min(timeout, MAX_TIMEOUT_MS)


@dataclass(frozen=True, slots=True)
class ExecutionConfig:
    agent_type: AgentType = AgentType.CURSOR
    execution_timeout_ms: int = DEFAULT_TIMEOUT_MS
    kill_grace_ms: int = 5_000
    cursor_command: str = "cursor-agent"
    claude_command: str = "claude"
    gemini_command: str = "gemini"

    def command_for(self, agent_type: AgentType) -> str:
        """Executable used for *agent_type*."""
        return {
            AgentType.CURSOR: self.cursor_command,
            AgentType.CLAUDE: self.claude_command,
            AgentType.GEMINI: self.gemini_command,
        }[agent_type]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> ExecutionConfig:
        values = _pick(dict(raw), cls)
        if "agent_type" in values:
            values["agent_type"] = _parse_agent_type(values["agent_type"])
        if "execution_timeout_ms" in values:
            values["execution_timeout_ms"] = _parse_timeout(
                values["execution_timeout_ms"]
            )
        if "kill_grace_ms" in values:
            values["kill_grace_ms"] = max(0, int(values["kill_grace_ms"]))
        return cls(**values)


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Top-level configuration, layered from TOML, environment and flags."""
    agents_dir: Path
    log_level: str = "info"
    log_format: str = "text"
    server_name: str = "agentbridge"
    server_version: str = __version__
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)

    @property
    def agent_type(self) -> AgentType:
        """Server-wide default execution engine."""
        return self.execution.agent_type

    def validate(self) -> None:
        """Raise :class:`ConfigError` for an unusable configuration."""
        if not self.server_name or not self.server_name.strip():
            raise ConfigError("Server name cannot be empty")
        if not self.server_version or not self.server_version.strip():
            raise ConfigError("Server version cannot be empty")
        if not str(self.agents_dir).strip():
            raise ConfigError("Agents directory cannot be empty")
        if self.log_level.lower() not in _LOG_LEVELS:
            raise ConfigError(f"Invalid log level: '{self.log_level}'")
        if self.log_format.lower() not in _LOG_FORMATS:
            raise ConfigError(f"Invalid log format: '{self.log_format}'")

    @classmethod
    def load(
        cls,
        config_path: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> ServerConfig:
        """Load config with file → environment → flag layering.

        Resolution order (later wins):
        1. Built-in defaults
        2. TOML file: *config_path*, ``$AGENTBRIDGE_CONFIG`` or
           ``./agentbridge.toml``
        3. Environment variables (``AGENTS_DIR``, ``AGENT_TYPE``, ...)
        4. Explicit *overrides* whose value is not ``None``
        """
        env = os.environ if environ is None else environ

        if config_path is None:
            config_path = env.get("AGENTBRIDGE_CONFIG") or DEFAULT_CONFIG_FILE
        file_raw = _load_toml(Path(config_path))

        env_raw: dict[str, dict[str, str]] = {}
        for var, (section, key) in _ENV_KEYS.items():
            value = env.get(var)
            if value is not None and value.strip():
                env_raw.setdefault(section, {})[key] = value.strip()

        flag_raw: dict[str, dict[str, Any]] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            section = "execution" if key in ExecutionConfig.__dataclass_fields__ else "server"
            flag_raw.setdefault(section, {})[key] = value

        merged = _deep_merge(_deep_merge(file_raw, env_raw), flag_raw)
        return cls._from_raw(merged)

    @classmethod
    def _from_raw(cls, raw: dict) -> ServerConfig:
        server_raw = dict(raw.get("server", {}))
        execution_raw = dict(raw.get("execution", {}))

        # agent_type reads naturally under [server]; it belongs to execution.
        if "agent_type" in server_raw:
            execution_raw.setdefault("agent_type", server_raw.pop("agent_type"))

        agents_dir = server_raw.pop("agents_dir", None)
        if not agents_dir:
            raise ConfigError(
                "Agents directory is not configured (set AGENTS_DIR or "
                "[server] agents_dir)"
            )

        config = cls(
            agents_dir=Path(agents_dir).expanduser(),
            execution=ExecutionConfig.from_raw(execution_raw),
            **_pick(server_raw, cls),
        )
        config.validate()
        return config
