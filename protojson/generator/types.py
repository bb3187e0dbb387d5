"""Type definitions for message definition parsing and code generation."""

from dataclasses import dataclass, field
from typing import Any

from dataclasses_json import DataClassJsonMixin

from protojson.proto.types import FieldFlag, FieldType

LABELS: dict[str, FieldFlag] = {
    "optional": FieldFlag.OPTIONAL,
    "required": FieldFlag.REQUIRED,
    "repeated": FieldFlag.REPEATED,
}

SCALAR_TYPES: dict[str, FieldType] = {
    "double": FieldType.DOUBLE,
    "float": FieldType.FLOAT,
    "int64": FieldType.INT64,
    "uint64": FieldType.UINT64,
    "int32": FieldType.INT32,
    "fixed64": FieldType.FIXED64,
    "fixed32": FieldType.FIXED32,
    "bool": FieldType.BOOL,
    "string": FieldType.STRING,
    "bytes": FieldType.BYTES,
    "uint32": FieldType.UINT32,
    "sfixed32": FieldType.SFIXED32,
    "sfixed64": FieldType.SFIXED64,
    "sint32": FieldType.SINT32,
    "sint64": FieldType.SINT64,
}


@dataclass
class ProtoFieldDef(DataClassJsonMixin):
    """Represents a field declaration.

    ``type`` and ``reference`` are filled in once every message and enum of
    the file is known; ``reference`` is set for message and enum fields only.
    """

    name: str
    number: int
    label: str
    type_name: str
    options: dict[str, Any] = field(default_factory=dict)
    type: int | None = None
    reference: str | None = None

    @property
    def flag(self) -> FieldFlag:
        return LABELS[self.label]

    @property
    def default(self) -> Any:
        return self.options.get("default")

    @property
    def extra_options(self) -> dict[str, Any]:
        """Field options other than the default value."""
        return {k: v for k, v in self.options.items() if k != "default"}


@dataclass
class ProtoRange(DataClassJsonMixin):
    """Represents an inclusive extension range."""

    min: int
    max: int


@dataclass
class ProtoMessageDef(DataClassJsonMixin):
    """Represents a message definition."""

    name: str
    fields: list[ProtoFieldDef]
    extension_ranges: list[ProtoRange] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProtoEnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    number: int


@dataclass
class ProtoEnumDef(DataClassJsonMixin):
    """Represents an enum definition."""

    name: str
    values: list[ProtoEnumValue]
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProtoExtendDef(DataClassJsonMixin):
    """Represents an ``extend`` block adding fields to a message."""

    target: str
    fields: list[ProtoFieldDef]


def is_scalar(type_name: str) -> bool:
    """Check if a type name is a scalar type."""
    return type_name in SCALAR_TYPES
