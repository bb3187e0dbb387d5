"""Read-only reflection over message schemas."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .message import Message
from .schema import Schema
from .types import FieldDescriptor, FieldFlag, SimpleType, simple_type


@dataclass(frozen=True)
class FieldInfo:
    """A field descriptor as seen from its message."""

    descriptor: FieldDescriptor
    is_extension: bool

    @property
    def number(self) -> int:
        return self.descriptor.number

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def flag(self) -> int:
        return self.descriptor.flag

    @property
    def type(self) -> int:
        return self.descriptor.type

    @property
    def reference(self) -> str | None:
        return self.descriptor.reference

    @property
    def default(self) -> Any:
        return self.descriptor.default

    @property
    def options(self) -> Mapping[str, Any]:
        return self.descriptor.options

    @property
    def is_required(self) -> bool:
        return self.flag == FieldFlag.REQUIRED

    @property
    def is_optional(self) -> bool:
        """True for optional and repeated fields."""
        return self.flag != FieldFlag.REQUIRED

    @property
    def is_repeated(self) -> bool:
        return self.flag == FieldFlag.REPEATED

    @property
    def simple_type(self) -> SimpleType:
        return simple_type(self.type)

    def has_option(self, name: str) -> bool:
        return name in self.options

    def option(self, name: str) -> Any:
        return self.options.get(name)


class Inspector:
    """Inspect the fields and options of a message kind.

    Accepts a message kind, a message instance or a bare schema.
    """

    def __init__(self, target: type[Message] | Message | Schema) -> None:
        self._schema = target if isinstance(target, Schema) else target.schema

    @property
    def schema(self) -> Schema:
        return self._schema

    def _info(self, descriptor: FieldDescriptor) -> FieldInfo:
        return FieldInfo(descriptor, self._schema.is_extension(descriptor.number))

    def _find(self, number_or_name: int | str) -> FieldDescriptor | None:
        if isinstance(number_or_name, int):
            return self._schema.field(number_or_name)
        if number_or_name.isdigit():
            return self._schema.field(int(number_or_name))
        return self._schema.field_by_name(number_or_name)

    def fields(self) -> list[FieldInfo]:
        """All fields in ascending tag order."""
        return [self._info(descriptor) for descriptor in self._schema]

    def field(self, number_or_name: int | str) -> FieldInfo | None:
        descriptor = self._find(number_or_name)
        if descriptor is None:
            return None
        return self._info(descriptor)

    def has_field(self, number_or_name: int | str) -> bool:
        return self._find(number_or_name) is not None

    def is_extension(self, number: int) -> bool:
        return self._schema.is_extension(number)

    def options(self) -> dict[str, Any]:
        return dict(self._schema.options)

    def option(self, name: str) -> Any:
        return self._schema.options.get(name)

    def has_option(self, name: str) -> bool:
        return name in self._schema.options
