"""``agentbridge serve``: run the MCP server over stdio."""
from __future__ import annotations

from pathlib import Path

import typer

from agentbridge.cli.commands._common import err_console, load_config_or_exit
from agentbridge.core.errors import ConfigError
from agentbridge.core.logging import get_logger, setup_logging
from agentbridge.server import run_stdio

logger = get_logger("cli.serve")


def serve_command(
    agents_dir: Path | None = typer.Option(
        None, "--agents-dir", "-d", help="Directory holding agent .md/.txt files"
    ),
    agent_type: str | None = typer.Option(
        None, "--agent-type", "-t", help="Default engine: cursor, claude or gemini"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="debug, info, warn or error"
    ),
    timeout_ms: int | None = typer.Option(
        None, "--timeout-ms", help="Execution timeout in milliseconds"
    ),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="Path to an agentbridge.toml file"
    ),
) -> None:
    """Serve agents as MCP tools over stdio."""
    config = load_config_or_exit(
        config_file,
        agents_dir=agents_dir,
        agent_type=agent_type,
        log_level=log_level,
        execution_timeout_ms=timeout_ms,
    )
    setup_logging(config.log_level, json_output=config.log_format == "json")

    logger.info(
        "Starting %s v%s (agents: %s, engine: %s)",
        config.server_name,
        config.server_version,
        config.agents_dir,
        config.agent_type,
    )
    try:
        run_stdio(config)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
