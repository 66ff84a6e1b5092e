"""
Seal commands: seal and unseal files with an AES-GCM key
"""

import typer
from pathlib import Path
from typing import Optional
from rich.console import Console

from recordstore.config import StoreConfig
from recordstore.core.errors import RecordStoreError
from recordstore.sealing import SealingKey

console = Console()


def _load_key(key_path: Optional[str]) -> SealingKey:
    try:
        return SealingKey.load_from_file(key_path or StoreConfig.from_env().key_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: cannot load key:[/red] {e}")
        raise typer.Exit(2)


def seal_command(
    path: Path = typer.Argument(..., help="File to seal"),
    key_path: Optional[str] = typer.Option(None, "--key", "-k", help="Sealing key (default: RECORDSTORE_KEY_PATH)"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output file (default: overwrite input)"),
):
    """
    Seal a stored record in place (or into --out).

    Examples:
        recordstore seal ~/.recordstore/records/Settings.json
        recordstore seal Settings.json --key ./record.key --out Settings.sealed
    """
    key = _load_key(key_path)
    try:
        sealed = key.seal(path.read_bytes())
        (output or path).write_bytes(sealed)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    console.print(f"[green]✓ Sealed[/green] {output or path} (key {key.key_id()})")


def unseal_command(
    path: Path = typer.Argument(..., help="File to unseal"),
    key_path: Optional[str] = typer.Option(None, "--key", "-k", help="Sealing key (default: RECORDSTORE_KEY_PATH)"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output file (default: overwrite input)"),
):
    """
    Open a sealed record in place (or into --out).

    Examples:
        recordstore unseal Settings.json
        recordstore unseal Settings.sealed --out Settings.json
    """
    key = _load_key(key_path)
    try:
        data = key.open(path.read_bytes())
        (output or path).write_bytes(data)
    except (OSError, RecordStoreError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    console.print(f"[green]✓ Unsealed[/green] {output or path}")
