"""
entity-reflect command line interface.

Commands:
    inspect  Show members, accessors, markers and the identifier of a class
    coerce   Convert a string to a target type
"""

from __future__ import annotations

import importlib
import json
import platform
from datetime import date, datetime
from typing import Annotated, Any
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from entity_reflect import __version__
from entity_reflect.coercion import coerce as coerce_value
from entity_reflect.config import get_settings
from entity_reflect.descriptor import Accessor, Member, TypeDescriptor
from entity_reflect.errors import EntityReflectError, NoIdentifierFound, ParseError
from entity_reflect.identifier import locate_identifier_field, resolve_identifier_type
from entity_reflect.logging_config import configure_logging
from entity_reflect.markers import Id
from entity_reflect.members import enumerate_members
from entity_reflect.scalars import (
    BigDecimal,
    BigInteger,
    Byte,
    Double,
    Float,
    Int,
    Long,
    Short,
    target_name,
)

app = typer.Typer(
    help="Inspect entity metadata and coerce raw values",
    no_args_is_help=True,
)

console = Console()

TYPE_ALIASES: dict[str, Any] = {
    "bool": bool,
    "byte": Byte,
    "short": Short,
    "int": Int,
    "long": Long,
    "float": Float,
    "double": Double,
    "biginteger": BigInteger,
    "bigdecimal": BigDecimal,
    "date": date,
    "datetime": datetime,
    "uuid": UUID,
    "str": str,
}


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"entity-reflect version {__version__}")
        typer.echo(f"  Python: {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
) -> None:
    """Inspect entity metadata and coerce raw values."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


def _load_object(target: str) -> Any:
    """Import ``module:attr`` (or ``module.attr``) and return the attribute."""
    if ":" in target:
        module_name, _, attr_path = target.partition(":")
    else:
        module_name, _, attr_path = target.rpartition(".")
    if not module_name or not attr_path:
        raise typer.BadParameter(f"Expected 'module:Name', got '{target}'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        console.print(f"[red]Cannot import module '{module_name}': {exc}[/red]")
        raise typer.Exit(code=1) from exc

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            console.print(f"[red]'{module_name}' has no attribute '{attr_path}'[/red]")
            raise typer.Exit(code=1) from exc
    return obj


def _member_to_dict(member: Member) -> dict[str, Any]:
    return {
        "name": member.name,
        "declared_in": member.declaring_type.__qualname__,
        "type": target_name(member.type),
        "markers": [repr(m) for m in member.markers],
    }


def _accessor_to_dict(accessor: Accessor) -> dict[str, Any]:
    return {
        "name": accessor.name,
        "declared_in": accessor.declaring_type.__qualname__,
        "type": target_name(accessor.return_type),
        "markers": [repr(m) for m in accessor.markers],
    }


def _resolve_type(name: str) -> Any:
    if name.lower() in TYPE_ALIASES:
        return TYPE_ALIASES[name.lower()]
    if ":" in name or "." in name:
        return _load_object(name)
    raise typer.BadParameter(
        f"Unknown type '{name}'. Use one of {', '.join(TYPE_ALIASES)} or module:Enum"
    )


# =============================================================================
# Commands
# =============================================================================


@app.command(name="inspect")
def inspect_cmd(
    target: Annotated[str, typer.Argument(help="Class to inspect, as module:Class")],
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show members, accessors, class markers and the identifier of a class."""
    cls = _load_object(target)
    if not isinstance(cls, type):
        console.print(f"[red]'{target}' is not a class[/red]")
        raise typer.Exit(code=1)

    descriptor = TypeDescriptor(cls)
    try:
        members = enumerate_members(cls)
        accessors = descriptor.accessors()
        class_markers = [
            (klass.name, repr(m)) for klass in descriptor.ancestors() for m in klass.markers()
        ]
        id_member = locate_identifier_field(cls)
        try:
            id_type: str | None = target_name(resolve_identifier_type(cls))
        except NoIdentifierFound:
            id_type = None
    except EntityReflectError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    id_accessor = next((a.name for a in accessors if a.has_marker(Id)), None)
    identifier_name = id_accessor or (id_member.name if id_member else None)

    if output_json:
        payload = {
            "class": descriptor.name,
            "ancestors": [k.name for k in descriptor.ancestors()],
            "markers": [{"declared_in": where, "marker": m} for where, m in class_markers],
            "members": [_member_to_dict(m) for m in members],
            "accessors": [_accessor_to_dict(a) for a in accessors],
            "identifier": {"name": identifier_name, "type": id_type} if id_type else None,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    chain = " -> ".join(k.name for k in descriptor.ancestors())
    console.print(f"[bold]{descriptor.name}[/bold]  ({chain})")
    for where, marker in class_markers:
        console.print(f"  {marker}  [dim]on {where}[/dim]")

    table = Table(title="Members")
    table.add_column("Name", style="cyan")
    table.add_column("Declared in")
    table.add_column("Type")
    table.add_column("Markers")
    for row in [_member_to_dict(m) for m in members] + [_accessor_to_dict(a) for a in accessors]:
        table.add_row(row["name"], row["declared_in"], row["type"], ", ".join(row["markers"]))
    console.print(table)

    if id_type is None:
        console.print("[yellow]No identifier[/yellow]")
    else:
        console.print(f"Identifier: [green]{identifier_name}[/green] ({id_type})")


@app.command(name="coerce")
def coerce_cmd(
    value: Annotated[str, typer.Argument(help="Raw string value")],
    type_name: Annotated[
        str, typer.Argument(metavar="TYPE", help="Target type alias or module:Enum")
    ],
) -> None:
    """Convert a raw string to a target type."""
    target = _resolve_type(type_name)
    try:
        result = coerce_value(value, target)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    typer.echo(f"{result!r} ({type(result).__qualname__})")


def main() -> None:
    """Console script entry point."""
    app()
