"""Agent inspection commands: list, info, tools."""
from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from agentbridge.bridge import AgentBridge
from agentbridge.cli.commands._common import console, err_console, load_config_or_exit
from agentbridge.core.errors import AgentBridgeError
from agentbridge.definitions.loader import AgentLoader
from agentbridge.definitions.types import AgentDefinition
from agentbridge.tools.naming import sanitize_tool_name

agents_app = typer.Typer(no_args_is_help=True)

_AGENTS_DIR_OPTION = typer.Option(
    None, "--agents-dir", "-d", help="Directory holding agent .md/.txt files"
)
_CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="Path to an agentbridge.toml file"
)


def _discover(agents_dir: Path | None, config_file: Path | None) -> list[AgentDefinition]:
    config = load_config_or_exit(config_file, agents_dir=agents_dir)
    try:
        return AgentLoader(config.agents_dir).discover()
    except AgentBridgeError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


@agents_app.command("list")
def agents_list(
    agents_dir: Path | None = _AGENTS_DIR_OPTION,
    config_file: Path | None = _CONFIG_OPTION,
) -> None:
    """List discovered agent definitions."""
    agents = _discover(agents_dir, config_file)

    if not agents:
        console.print("[yellow]No agents found.[/yellow]")
        raise typer.Exit(0)

    table = Table(
        title="Discovered Agents",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Name", style="bold")
    table.add_column("Tool")
    table.add_column("Engine", justify="center")
    table.add_column("Description")

    for agent in agents:
        table.add_row(
            agent.name,
            sanitize_tool_name(agent.name),
            agent.agent_type or "-",
            agent.description,
        )

    console.print(table)
    console.print(f"\n[dim]{len(agents)} agent(s) found.[/dim]")


@agents_app.command("info")
def agents_info(
    name: str = typer.Argument(..., help="Name of the agent to inspect"),
    agents_dir: Path | None = _AGENTS_DIR_OPTION,
    config_file: Path | None = _CONFIG_OPTION,
) -> None:
    """Show details of one agent definition."""
    agents = _discover(agents_dir, config_file)

    match = next((a for a in agents if a.name == name), None)
    if match is None:
        console.print(f"[red]Agent not found:[/red] '{name}'")
        if agents:
            available = ", ".join(a.name for a in agents)
            console.print(f"[dim]Available agents: {available}[/dim]")
        raise typer.Exit(1)

    meta_lines = [
        f"[bold]Name:[/bold]          {match.name}",
        f"[bold]Tool:[/bold]          {sanitize_tool_name(match.name)}",
        f"[bold]Description:[/bold]   {match.description}",
        f"[bold]File:[/bold]          {match.file_path}",
        f"[bold]Modified:[/bold]      {match.last_modified.isoformat()}",
    ]
    if match.agent_type:
        meta_lines.append(f"[bold]Engine:[/bold]        {match.agent_type}")
    if match.model:
        meta_lines.append(f"[bold]Model:[/bold]         {match.model}")
    if match.tools:
        meta_lines.append(f"[bold]Tools:[/bold]         {', '.join(match.tools)}")
    if match.auto_approval_mode is not None:
        meta_lines.append(f"[bold]Auto-approve:[/bold]  {match.auto_approval_mode}")

    console.print(Panel(
        "\n".join(meta_lines),
        title=f"Agent: {match.name}",
        border_style="cyan",
    ))

    if match.content.strip():
        preview = match.content
        if len(preview) > 500:
            preview = preview[:500] + "\n\n... (truncated)"
        console.print()
        console.print(Panel(
            Syntax(preview, "markdown", theme="monokai", word_wrap=True),
            title="Definition (preview)",
            border_style="dim",
        ))


@agents_app.command("tools")
def agents_tools(
    agents_dir: Path | None = _AGENTS_DIR_OPTION,
    config_file: Path | None = _CONFIG_OPTION,
) -> None:
    """Show the MCP tools the server would register, and any collisions."""
    config = load_config_or_exit(config_file, agents_dir=agents_dir)
    bridge = AgentBridge(config)
    tools = asyncio.run(bridge.list_tools())

    if not tools:
        console.print("[yellow]No tools registered.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Agent Tools", show_header=True, header_style="bold cyan")
    table.add_column("Tool", style="bold")
    table.add_column("Agent")
    for tool in bridge.registry.tools():
        table.add_row(tool.name, tool.agent_name)
    console.print(table)

    for collision in bridge.registry.collisions:
        hidden = ", ".join(collision.hidden_agents)
        console.print(
            f"[yellow]Collision:[/yellow] {collision.tool_name} hides {hidden}; "
            f"'{collision.accessible_agent}' is accessible"
        )
