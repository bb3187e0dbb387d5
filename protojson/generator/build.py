"""Build runtime message kinds from parsed definitions."""

from typing import Any

from protojson.proto.message import Message, create, extend
from protojson.proto.schema import Schema
from protojson.proto.types import FieldType

from .types import ProtoEnumDef, ProtoExtendDef, ProtoFieldDef, ProtoMessageDef


def field_definition(f: ProtoFieldDef) -> tuple[str, int, int, str | None, Any, dict[str, Any]]:
    """Convert a parsed field to a schema definition tuple."""
    return (f.name, f.flag, f.type, f.reference, f.default, f.extra_options)


def build_schema(message: ProtoMessageDef) -> Schema:
    """Create the schema for a parsed message."""
    return Schema(
        {f.number: field_definition(f) for f in message.fields},
        ranges=[(r.min, r.max) for r in message.extension_ranges],
        options=message.options,
    )


def _register(kind: type[Message], fields: list[ProtoFieldDef], kinds: dict[str, type[Message]]) -> None:
    for f in fields:
        if f.type == FieldType.MESSAGE and f.reference in kinds:
            kind.register(f.reference, kinds[f.reference])


def build_messages(
    _enums: list[ProtoEnumDef],
    messages: list[ProtoMessageDef],
    extensions: list[ProtoExtendDef],
) -> dict[str, type[Message]]:
    """Create a message kind per parsed message.

    Message fields referencing a kind of the same file are registered so
    nested payloads decode into instances, and ``extend`` blocks are merged
    into their target kinds.

    Returns:
        Message kinds keyed by message name.
    """
    kinds = {message.name: create(build_schema(message), name=message.name) for message in messages}

    for message in messages:
        _register(kinds[message.name], message.fields, kinds)

    for ext in extensions:
        kind = kinds[ext.target]
        extend(kind, {f.number: field_definition(f) for f in ext.fields})
        _register(kind, ext.fields, kinds)

    return kinds
