from __future__ import annotations

import typer

from agentbridge._version import __version__
from agentbridge.cli.commands._common import console
from agentbridge.cli.commands.agent_mgmt import agents_app
from agentbridge.cli.commands.config import config_app
from agentbridge.cli.commands.serve import serve_command

app = typer.Typer(
    name="agentbridge",
    help="agentbridge: serve markdown agent definitions as MCP tools",
    no_args_is_help=True,
)

app.command("serve")(serve_command)
app.add_typer(agents_app, name="agents", help="Inspect agent definitions")
app.add_typer(config_app, name="config", help="Inspect configuration")


@app.command()
def version() -> None:
    """Show the agentbridge version."""
    console.print(f"agentbridge {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
