"""Command-line interface for ProtoJson definitions and payloads."""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, TextIO

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from protojson.generator import build_messages, parse, python
from protojson.proto.codec import CodecError
from protojson.proto.introspect import Inspector

if TYPE_CHECKING:
    from protojson.generator.types import ProtoEnumDef, ProtoExtendDef, ProtoMessageDef

FORMS = ("canonical", "indexed", "pblite")


def _read_definitions(
    input_file: str,
) -> tuple[list[ProtoEnumDef], list[ProtoMessageDef], list[ProtoExtendDef]]:
    with open(input_file, encoding="utf-8") as f:
        return parse(f.read())


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """ProtoJson message tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="protojson.proto",
    help="Import path for the runtime",
)
def gen(input_file: str, output_file: str, runtime_import: str) -> None:
    """Generate a Python module from a definition file."""
    definitions = _read_definitions(input_file)
    generated_file = python.render(*definitions, runtime_import=runtime_import)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the messages and fields of a definition file."""
    enums, messages, extensions = _read_definitions(input_file)

    if output_json:
        data = {
            "enums": [enum.to_dict() for enum in enums],
            "messages": [message.to_dict() for message in messages],
            "extensions": [ext.to_dict() for ext in extensions],
        }
        print(json.dumps(data, indent=2))
        return

    kinds = build_messages(enums, messages, extensions)
    console = Console()

    for name, kind in kinds.items():
        inspector = Inspector(kind)
        console.print(f"[bold cyan]{name}[/bold cyan]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Tag", style="green", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Label", style="dim")
        table.add_column("Type", style="yellow")
        table.add_column("Extension", style="dim")

        for field in inspector.fields():
            field_type = str(field.simple_type)
            if field.reference:
                field_type = f"{field_type} ({field.reference})"
            label = "repeated" if field.is_repeated else "required" if field.is_required else "optional"
            table.add_row(
                str(field.number), field.name, label, field_type, "yes" if field.is_extension else ""
            )

        console.print(table)
        ranges = ", ".join(f"{low}-{high}" for low, high in inspector.schema.ranges)
        if ranges:
            console.print(f"[dim]Extension ranges: {ranges}[/dim]")
        console.print()

    for enum in enums:
        values = ", ".join(f"{value.name}={value.number}" for value in enum.values)
        console.print(f"[bold cyan]{enum.name}[/bold cyan] (enum): {values}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--message", "-m", "message_name", required=True, help="Message name")
@click.option("--to", "to_form", type=click.Choice(FORMS), default="canonical", help="Output form")
@click.option("--compat", is_flag=True, default=False, help="Write PbLite gaps as null")
@click.argument("payload", type=click.File("r"), default="-")
def convert(
    input_file: str, message_name: str, to_form: str, compat: bool, payload: TextIO
) -> None:
    """Convert a payload between wire forms."""
    kinds = build_messages(*_read_definitions(input_file))
    if message_name not in kinds:
        print(f"Unknown message: {message_name}")
        sys.exit(1)

    message = kinds[message_name]()
    try:
        message.parse_json(payload.read())
    except CodecError as e:
        print(f"Invalid payload: {e}")
        sys.exit(1)

    if to_form == "canonical":
        print(message.serialize_as_json())
    elif to_form == "indexed":
        print(message.serialize_as_json(compact=True))
    else:
        print(message.serialize_as_pblite_json(compat=compat))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
