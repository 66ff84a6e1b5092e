"""
Key commands: generate, show
"""

import json
import os
import typer
from typing import Optional
from rich.console import Console
from rich.table import Table

from recordstore.config import StoreConfig
from recordstore.sealing import SealingKey

app = typer.Typer()
console = Console()


@app.command()
def generate(
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Key file (default: RECORDSTORE_KEY_PATH)"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Generate an AES-256-GCM sealing key.

    Examples:
        recordstore key generate
        recordstore key generate --path ./record.key --force
    """
    key_path = os.path.expanduser(path or StoreConfig.from_env().key_path)
    if os.path.exists(key_path) and not force:
        if json_output:
            print(json.dumps({"error": "Key file already exists", "path": key_path}))
        else:
            console.print(f"[red]Error: Key file already exists:[/red] {key_path} (use --force)")
        raise typer.Exit(1)

    key = SealingKey.generate()
    try:
        key.save_to_file(key_path)
    except OSError as e:
        if json_output:
            print(json.dumps({"error": str(e), "path": key_path}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        print(json.dumps({"path": key_path, "key_id": key.key_id()}))
    else:
        console.print(f"[green]✓ Generated sealing key[/green] {key_path}")
        console.print(f"  Key id: [yellow]{key.key_id()}[/yellow]")


@app.command()
def show(
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Key file (default: RECORDSTORE_KEY_PATH)"),
):
    """Show the identifier of a sealing key (never the key itself)."""
    key_path = os.path.expanduser(path or StoreConfig.from_env().key_path)
    try:
        key = SealingKey.load_from_file(key_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Path[/bold]", key_path)
    table.add_row("[bold]Key id[/bold]", key.key_id())
    console.print(table)
