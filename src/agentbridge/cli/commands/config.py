from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from agentbridge.cli.commands._common import console, load_config_or_exit

config_app = typer.Typer(
    name="config",
    help="Inspect the resolved configuration",
    no_args_is_help=True,
)


@config_app.command("show")
def config_show(
    agents_dir: Path | None = typer.Option(None, "--agents-dir", "-d"),
    config_file: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Show configuration after file, environment and flag layering."""
    config = load_config_or_exit(config_file, agents_dir=agents_dir)
    execution = config.execution

    table = Table(title="agentbridge configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    for key, value in [
        ("agents_dir", config.agents_dir),
        ("agent_type", execution.agent_type),
        ("execution_timeout_ms", execution.execution_timeout_ms),
        ("kill_grace_ms", execution.kill_grace_ms),
        ("cursor_command", execution.cursor_command),
        ("claude_command", execution.claude_command),
        ("gemini_command", execution.gemini_command),
        ("log_level", config.log_level),
        ("log_format", config.log_format),
        ("server_name", config.server_name),
        ("server_version", config.server_version),
    ]:
        table.add_row(key, str(value))

    console.print(table)
