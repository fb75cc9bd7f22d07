from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from agentbridge.core.config import ServerConfig
from agentbridge.core.errors import ConfigError

console = Console()
err_console = Console(stderr=True)


def load_config_or_exit(config_file: Path | None = None, **overrides: Any) -> ServerConfig:
    """Resolve configuration, exiting with status 1 on a ConfigError."""
    try:
        return ServerConfig.load(config_file, **overrides)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(1) from exc
