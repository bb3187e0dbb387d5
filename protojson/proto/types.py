"""Runtime field descriptors for ProtoJson messages.

A field descriptor is the static description of one tag number: its name,
presence flag, wire type and the descriptive metadata that travels with it.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import IntEnum, StrEnum, auto
from typing import Any


class FieldFlag(IntEnum):
    """Presence of a field."""

    OPTIONAL = 1
    REQUIRED = 2
    REPEATED = 3


class FieldType(IntEnum):
    """Protocol Buffers field type numbers."""

    DOUBLE = 1
    FLOAT = 2
    INT64 = 3
    UINT64 = 4
    INT32 = 5
    FIXED64 = 6
    FIXED32 = 7
    BOOL = 8
    STRING = 9
    GROUP = 10  # deprecated
    MESSAGE = 11
    BYTES = 12
    UINT32 = 13
    ENUM = 14
    SFIXED32 = 15
    SFIXED64 = 16
    SINT32 = 17
    SINT64 = 18


class SimpleType(StrEnum):
    """Coarse classification of field types for generic tooling."""

    NUMBER = auto()
    BOOLEAN = auto()
    STRING = auto()
    MESSAGE = auto()
    BYTES = auto()
    ENUM = auto()
    UNKNOWN = auto()


_SIMPLE_TYPES: dict[int, SimpleType] = {
    FieldType.DOUBLE: SimpleType.NUMBER,
    FieldType.FLOAT: SimpleType.NUMBER,
    FieldType.INT64: SimpleType.NUMBER,
    FieldType.UINT64: SimpleType.NUMBER,
    FieldType.INT32: SimpleType.NUMBER,
    FieldType.FIXED64: SimpleType.NUMBER,
    FieldType.FIXED32: SimpleType.NUMBER,
    FieldType.UINT32: SimpleType.NUMBER,
    FieldType.SFIXED32: SimpleType.NUMBER,
    FieldType.SFIXED64: SimpleType.NUMBER,
    FieldType.SINT32: SimpleType.NUMBER,
    FieldType.SINT64: SimpleType.NUMBER,
    FieldType.BOOL: SimpleType.BOOLEAN,
    FieldType.STRING: SimpleType.STRING,
    FieldType.MESSAGE: SimpleType.MESSAGE,
    FieldType.BYTES: SimpleType.BYTES,
    FieldType.ENUM: SimpleType.ENUM,
}


def simple_type(field_type: int) -> SimpleType:
    """Classify a field type number, GROUP and unknown numbers included."""
    return _SIMPLE_TYPES.get(field_type, SimpleType.UNKNOWN)


def _coerce(enum_type: type[IntEnum], value: int) -> int:
    try:
        return enum_type(value)
    except ValueError:
        return value


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Describes the semantics of a single tag number."""

    number: int
    name: str
    flag: int = FieldFlag.OPTIONAL
    type: int = FieldType.STRING
    reference: str | None = None  # message or enum name, opaque
    default: Any = None  # descriptive only, never applied by the codec
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_repeated(self) -> bool:
        return self.flag == FieldFlag.REPEATED

    @property
    def is_message(self) -> bool:
        return self.type == FieldType.MESSAGE

    def as_tuple(self) -> tuple[str, int, int, str | None, Any, Mapping[str, Any]]:
        """Return the definition tuple in canonical order."""
        return (self.name, self.flag, self.type, self.reference, self.default, dict(self.options))

    @classmethod
    def from_definition(
        cls, number: int, definition: "FieldDescriptor | Sequence[Any]"
    ) -> "FieldDescriptor":
        """Build a descriptor from a definition tuple.

        Args:
            number: The tag number the definition is keyed under.
            definition: Either a descriptor or a sequence in the order
                (name, flag, type, reference, default[, options]).

        Returns:
            A descriptor bound to ``number``.
        """
        if isinstance(definition, FieldDescriptor):
            if definition.number == number:
                return definition
            return replace(definition, number=number)

        name, flag, field_type, *rest = definition
        reference = rest[0] if len(rest) > 0 else None
        default = rest[1] if len(rest) > 1 else None
        options = rest[2] if len(rest) > 2 and rest[2] is not None else {}

        return cls(
            number=number,
            name=name,
            flag=_coerce(FieldFlag, flag),
            type=_coerce(FieldType, field_type),
            reference=reference,
            default=default,
            options=dict(options),
        )
