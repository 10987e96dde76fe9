"""Main CLI application module.

This module provides the main entry point for the helm-deploy CLI.

Commands:
- run: Execute a deployment from action inputs and the deployment event
- render: Render value files against a JSON context
"""

import typer

from .deploy_commands import render, run

# Create the main CLI application
app = typer.Typer(
    help="⎈ Helm deployment for GitHub deployment events",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(run)
app.command()(render)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
