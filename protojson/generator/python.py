"""Python code generator for ProtoJson message definitions."""

from jinja2 import Environment, PackageLoader

from protojson.proto.types import FieldFlag, FieldType

from .types import ProtoEnumDef, ProtoExtendDef, ProtoFieldDef, ProtoMessageDef

env = Environment(
    loader=PackageLoader("protojson.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)
env.filters["repr"] = repr

template = env.get_template("python.py.j2")


def _field_tuple(f: ProtoFieldDef) -> str:
    """Render a field as a schema definition tuple."""
    flag = f"FieldFlag.{FieldFlag(f.flag).name}"
    field_type = f"FieldType.{FieldType(f.type).name}"
    return f"({f.name!r}, {flag}, {field_type}, {f.reference!r}, {f.default!r}, {f.extra_options!r})"


def _range_list(message: ProtoMessageDef) -> str:
    return repr([(r.min, r.max) for r in message.extension_ranges])


def _nested_references(fields: list[ProtoFieldDef], messages: list[ProtoMessageDef]) -> list[str]:
    """Message names referenced by fields, in first-use order."""
    names = {m.name for m in messages}
    result: list[str] = []
    for f in fields:
        if f.type == FieldType.MESSAGE and f.reference in names and f.reference not in result:
            result.append(f.reference)
    return result


def render(
    enums: list[ProtoEnumDef],
    messages: list[ProtoMessageDef],
    extensions: list[ProtoExtendDef],
    runtime_import: str = "protojson.proto",
) -> str:
    """Render message definitions to Python source code.

    Registrations of nested kinds are emitted after every class exists, so
    messages may reference each other in any order.
    """
    registrations = [
        (message.name, reference)
        for message in messages
        for reference in _nested_references(message.fields, messages)
    ]

    return template.render(
        enums=enums,
        messages=messages,
        extensions=extensions,
        registrations=registrations,
        field_tuple=_field_tuple,
        range_list=_range_list,
        nested_references=lambda fields: _nested_references(fields, messages),
        runtime_import=runtime_import,
    )
