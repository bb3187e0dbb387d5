"""Message definition parser using Lark."""

import json
import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from protojson.proto.schema import MAX_FIELD_NUMBER
from protojson.proto.types import FieldType

from .types import (
    SCALAR_TYPES,
    ProtoEnumDef,
    ProtoEnumValue,
    ProtoExtendDef,
    ProtoFieldDef,
    ProtoMessageDef,
    ProtoRange,
    is_scalar,
)

_g_parser: Lark | None = None


class ValidationError(RuntimeError):
    """Raised when definition validation fails."""


@dataclass
class _Option:
    name: str
    value: Any


@dataclass
class _FieldOptions:
    options: list[_Option]


@dataclass
class _Ranges:
    ranges: list[ProtoRange]


TFilter = TypeVar("TFilter")


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _options(args: list[Any]) -> dict[str, Any]:
    return {opt.name: opt.value for opt in _filter(args, _Option)}


class TreeTransformer(Transformer):
    """Transform parse tree into definition types."""

    def start(self, args: list[Any]) -> list[Any]:
        return args

    def message(self, args: list[Any]) -> ProtoMessageDef:
        return ProtoMessageDef(
            name=str(args[0]),
            fields=_filter(args, ProtoFieldDef),
            extension_ranges=[r for ranges in _filter(args, _Ranges) for r in ranges.ranges],
            options=_options(args),
        )

    def enum(self, args: list[Any]) -> ProtoEnumDef:
        return ProtoEnumDef(
            name=str(args[0]),
            values=_filter(args, ProtoEnumValue),
            options=_options(args),
        )

    def enum_value(self, args: list[Any]) -> ProtoEnumValue:
        return ProtoEnumValue(name=str(args[0]), number=int(args[1]))

    def extend(self, args: list[Any]) -> ProtoExtendDef:
        return ProtoExtendDef(target=str(args[0]), fields=_filter(args, ProtoFieldDef))

    def field(self, args: list[Any]) -> ProtoFieldDef:
        label, type_name, name, number = args[:4]
        field_options = _filter(args, _FieldOptions)
        return ProtoFieldDef(
            name=str(name),
            number=int(number),
            label=str(label),
            type_name=str(type_name),
            options=_options(field_options[0].options) if field_options else {},
        )

    def field_options(self, args: list[Any]) -> _FieldOptions:
        return _FieldOptions(options=args)

    def field_option(self, args: list[Any]) -> _Option:
        return _Option(name=str(args[0]), value=args[1])

    def option(self, args: list[Any]) -> _Option:
        return _Option(name=str(args[0]), value=args[1])

    def extensions(self, args: list[Any]) -> _Ranges:
        return _Ranges(ranges=args)

    def range(self, args: list[Any]) -> ProtoRange:
        low = int(args[0])
        if len(args) == 1:
            return ProtoRange(min=low, max=low)
        high = args[1]
        if isinstance(high, Token) and high.type == "MAX":
            return ProtoRange(min=low, max=MAX_FIELD_NUMBER)
        return ProtoRange(min=low, max=int(high))

    def string(self, args: list[Any]) -> str:
        return json.loads(args[0])

    def number(self, args: list[Any]) -> int | float:
        text = str(args[0])
        if any(c in text for c in ".eE"):
            return float(text)
        return int(text)

    def ident(self, args: list[Any]) -> Any:
        value = str(args[0])
        if value in ("true", "false"):
            return value == "true"
        return value


def _resolve_types(
    fields: list[ProtoFieldDef], message_names: set[str], enum_names: set[str], owner: str
) -> None:
    for f in fields:
        if is_scalar(f.type_name):
            f.type = SCALAR_TYPES[f.type_name]
        elif f.type_name in enum_names:
            f.type = FieldType.ENUM
            f.reference = f.type_name
        elif f.type_name in message_names:
            f.type = FieldType.MESSAGE
            f.reference = f.type_name
        else:
            raise ValidationError(f"{owner}.{f.name} has unknown type {f.type_name}")


def _validate_fields(fields: list[ProtoFieldDef], owner: str) -> None:
    numbers: set[int] = set()
    names: set[str] = set()
    for f in fields:
        if f.number <= 0:
            raise ValidationError(f"{owner}.{f.name} must have a positive field number")
        if f.number in numbers:
            raise ValidationError(f"{owner} field number {f.number} is used more than once")
        if f.name in names:
            raise ValidationError(f"{owner} field name {f.name} is used more than once")
        numbers.add(f.number)
        names.add(f.name)


def validate(
    enums: list[ProtoEnumDef],
    messages: list[ProtoMessageDef],
    extensions: list[ProtoExtendDef],
) -> None:
    """Validate parsed definitions and resolve field types."""
    enum_names = {enum.name for enum in enums}
    message_map = {message.name: message for message in messages}

    for message in messages:
        _validate_fields(message.fields, message.name)
        _resolve_types(message.fields, set(message_map), enum_names, message.name)

    extended: dict[str, list[ProtoFieldDef]] = {}
    for ext in extensions:
        target = message_map.get(ext.target)
        if target is None:
            raise ValidationError(f"{ext.target} is extended, but not declared")

        extended.setdefault(ext.target, list(target.fields)).extend(ext.fields)
        _validate_fields(extended[ext.target], ext.target)
        _resolve_types(ext.fields, set(message_map), enum_names, ext.target)

        for f in ext.fields:
            if not any(r.min <= f.number <= r.max for r in target.extension_ranges):
                raise ValidationError(
                    f"{ext.target}.{f.name} field number {f.number} is outside the extension ranges"
                )


def parse(
    text: str,
) -> tuple[list[ProtoEnumDef], list[ProtoMessageDef], list[ProtoExtendDef]]:
    """Parse a message definition file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/protodef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    items = TreeTransformer().transform(tree)

    enums = _filter(items, ProtoEnumDef)
    messages = _filter(items, ProtoMessageDef)
    extensions = _filter(items, ProtoExtendDef)

    validate(enums, messages, extensions)

    return (enums, messages, extensions)
