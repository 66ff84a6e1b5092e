#!/usr/bin/env python3
"""
recordstore CLI - typed record normalization and storage

Main entrypoint for the recordstore command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import key, record, seal
from recordstore.logging_config import setup_logging

# Initialize Typer app
app = typer.Typer(
    name="recordstore",
    help="Typed record normalization and storage CLI",
    add_completion=False,
)

# Console for rich output
console = Console()

# Add command groups
app.add_typer(record.app, name="record", help="Record operations")
app.add_typer(key.app, name="key", help="Sealing key management")

# Add standalone commands
app.command("seal")(seal.seal_command)
app.command("unseal")(seal.unseal_command)


@app.callback()
def configure(
    log_level: str = typer.Option("WARNING", "--log-level", envvar="RECORDSTORE_LOG_LEVEL", help="Log level"),
    log_format: str = typer.Option("text", "--log-format", envvar="RECORDSTORE_LOG_FORMAT", help="json or text"),
):
    """Configure logging for every command."""
    setup_logging(level=log_level, log_format=log_format)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from recordstore import __version__ as library_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]recordstore CLI[/bold]", f"v{__version__}")
    table.add_row("Library", f"v{library_version}")
    table.add_row("Interchange", "JSON, dates as seconds since 2001-01-01Z, binary as base64")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
