"""
Record commands: normalize, inspect
"""

import json
import typer
from pathlib import Path
from typing import Any, List, NoReturn, Optional
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from recordstore.config import StoreConfig
from recordstore.core import Diagnostic, classify, flatten, json_loads
from recordstore.core.errors import RecordStoreError
from recordstore.sealing import SealingKey
from recordstore.storage import FileResourceStore, locator_name

app = typer.Typer()
console = Console()


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return "null"


def _preview(value: Any, width: int = 48) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return text if len(text) <= width else text[: width - 3] + "..."


def _fail(message: str, json_output: bool) -> NoReturn:
    if json_output:
        print(json.dumps({"error": message}))
    else:
        console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(2)


@app.command()
def normalize(
    path: Path = typer.Argument(..., help="JSON file holding an object (or an array)"),
    json_output: bool = typer.Option(False, "--json", help="Output flattened form as JSON only"),
):
    """
    Classify a JSON document and show its canonical buckets.

    Examples:
        recordstore record normalize settings.json
        recordstore record normalize settings.json --json
    """
    try:
        obj = json_loads(path.read_bytes())
    except OSError as e:
        _fail(f"cannot read {path}: {e}", json_output)
    except RecordStoreError as e:
        _fail(str(e), json_output)

    if isinstance(obj, list):
        obj = {"Array": obj}
    if not isinstance(obj, dict):
        _fail("document is neither an object nor an array", json_output)

    diagnostics: List[Diagnostic] = []
    tree = classify(obj, observer=diagnostics.append)
    flat = flatten(tree)

    if json_output:
        print(json.dumps(flat, indent=2, ensure_ascii=False))
        return

    table = Table(title=f"Canonical buckets: {path}")
    table.add_column("Key", style="cyan")
    table.add_column("Bucket", style="green")
    table.add_column("Flattened value", style="dim")
    for key in tree.keys():
        table.add_row(key, tree.category_of(key).value, _preview(flat[key]))
    console.print(table)

    for diagnostic in diagnostics:
        console.print(
            f"[yellow]Fallback:[/yellow] {diagnostic.key} ({diagnostic.reason}) {diagnostic.description}"
        )
    console.print(f"\n[bold]Total keys:[/bold] {len(tree)}")


@app.command()
def inspect(
    name: str = typer.Argument(..., help="Record name or type name (extension optional)"),
    directory: Optional[str] = typer.Option(None, "--dir", "-d", help="Store directory (default: RECORDSTORE_DIR)"),
    key_path: Optional[str] = typer.Option(None, "--key", "-k", help="Sealing key, for sealed records"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the stored, flattened form of a record.

    Examples:
        recordstore record inspect Settings
        recordstore record inspect Settings --key ~/.recordstore/keys/record_aesgcm
        recordstore record inspect Settings.json --json
    """
    config = StoreConfig.from_env()
    try:
        store = FileResourceStore(directory or config.directory)
        locator = locator_name(name, extension=config.extension)
        data = store.read(locator)
        if key_path:
            data = SealingKey.load_from_file(key_path).open(data)
        obj = json_loads(data)
    except (RecordStoreError, OSError, ValueError) as e:
        _fail(str(e), json_output)

    if json_output:
        print(json.dumps({"record": obj, "path": store.describe(locator)}, indent=2, ensure_ascii=False))
        return

    if not isinstance(obj, dict):
        console.print(Syntax(json.dumps(obj, indent=2, ensure_ascii=False), "json", theme="monokai"))
        return

    table = Table(title=f"Record: {store.describe(locator)}")
    table.add_column("Key", style="cyan")
    table.add_column("JSON type", style="green")
    table.add_column("Value", style="dim")
    for key in sorted(obj):
        table.add_row(key, _json_type(obj[key]), _preview(obj[key]))
    console.print(table)
    console.print(f"\n[bold]Total keys:[/bold] {len(obj)}")
