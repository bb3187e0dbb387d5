"""Message schemas: tag number to field descriptor maps plus message metadata."""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any, Self

from .types import FieldDescriptor, FieldFlag

logger = logging.getLogger(__name__)

# Highest tag number allowed by Protocol Buffers (2^29 - 1)
MAX_FIELD_NUMBER = 536870911


class SchemaError(RuntimeError):
    """Raised when a sealed schema is modified."""


def _tag(number: int | str) -> int:
    # Definitions loaded from JSON carry their tag numbers as strings
    return int(number)


class Schema:
    """Field descriptors for one message kind.

    Schemas are mutable while a message kind is being set up. Once every
    field and extension has been defined, ``seal()`` turns the schema
    read-only so it can be shared between concurrent encode/decode calls.

    Example:
        schema = Schema(
            {
                1: ("name", FieldFlag.REQUIRED, FieldType.STRING, None, None),
                2: ("ids", FieldFlag.REPEATED, FieldType.INT32, None, None),
            },
            ranges=[(100, 199)],
        )
    """

    def __init__(
        self,
        fields: Mapping[int | str, FieldDescriptor | Sequence[Any]] | None = None,
        ranges: Iterable[Sequence[int]] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self._fields: dict[int, FieldDescriptor] = {}
        self._names: dict[str, FieldDescriptor] = {}
        self._ranges: list[tuple[int, int]] = []
        self._options: dict[str, Any] = {}
        self._sealed = False

        for number, definition in (fields or {}).items():
            self.define(FieldDescriptor.from_definition(_tag(number), definition))
        for extension_range in ranges or []:
            self.declare_extension_range(*extension_range)
        for name, value in (options or {}).items():
            self.set_option(name, value)

    @classmethod
    def from_definition(cls, definition: Mapping[str, Any]) -> Self:
        """Build a schema from a ``{"fields", "ranges", "options"}`` mapping."""
        return cls(
            fields=definition.get("fields"),
            ranges=definition.get("ranges"),
            options=definition.get("options"),
        )

    @property
    def fields(self) -> Mapping[int, FieldDescriptor]:
        return MappingProxyType(self._fields)

    @property
    def ranges(self) -> tuple[tuple[int, int], ...]:
        return tuple(self._ranges)

    @property
    def options(self) -> Mapping[str, Any]:
        return MappingProxyType(self._options)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Make the schema read-only."""
        self._sealed = True

    def _check_mutable(self) -> None:
        if self._sealed:
            raise SchemaError("Schema is sealed and can no longer be modified")

    def define(self, descriptor: FieldDescriptor) -> None:
        """Insert a descriptor, replacing any existing one with the same tag.

        A field already holding the same name under another tag is dropped,
        so each name maps to exactly one tag.
        """
        self._check_mutable()

        previous = self._fields.get(descriptor.number)
        if previous is not None and self._names.get(previous.name) is previous:
            del self._names[previous.name]

        renamed = self._names.get(descriptor.name)
        if renamed is not None and renamed.number != descriptor.number:
            logger.warning(
                f"Field {descriptor.name} moves from tag {renamed.number} to tag {descriptor.number}"
            )
            del self._fields[renamed.number]

        self._fields[descriptor.number] = descriptor
        self._names[descriptor.name] = descriptor
        logger.debug(f"Defined field {descriptor.number} ({descriptor.name})")

    def define_field(
        self,
        number: int,
        name: str,
        type: int,
        flag: int = FieldFlag.OPTIONAL,
        reference: str | None = None,
        default: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> FieldDescriptor:
        """Define a field from its parts and return the new descriptor."""
        descriptor = FieldDescriptor.from_definition(
            number, (name, flag, type, reference, default, options)
        )
        self.define(descriptor)
        return descriptor

    def declare_extension_range(self, min: int, max: int = MAX_FIELD_NUMBER) -> None:
        """Reserve an inclusive tag range for extensions.

        Ranges are kept in declaration order and are neither merged nor
        checked for overlap.
        """
        self._check_mutable()
        self._ranges.append((min, max))

    def set_option(self, name: str, value: Any) -> None:
        """Store a message level option."""
        self._check_mutable()
        self._options[name] = value

    def merge(self, descriptors: Iterable[FieldDescriptor]) -> list[FieldDescriptor]:
        """Merge extension descriptors into the schema.

        A descriptor whose tag is already defined replaces the existing one.

        Returns:
            The merged descriptors, in the order given.
        """
        self._check_mutable()

        merged: list[FieldDescriptor] = []
        for descriptor in descriptors:
            previous = self._fields.get(descriptor.number)
            if previous is not None:
                logger.warning(
                    f"Extension field {descriptor.name} replaces field "
                    f"{previous.name} at tag {descriptor.number}"
                )
            self.define(descriptor)
            merged.append(descriptor)
        return merged

    def field(self, number: int) -> FieldDescriptor | None:
        return self._fields.get(number)

    def field_by_name(self, name: str) -> FieldDescriptor | None:
        return self._names.get(name)

    def is_extension(self, number: int) -> bool:
        """Check if a tag number falls inside a declared extension range."""
        return any(low <= number <= high for low, high in self._ranges)

    def __contains__(self, number: object) -> bool:
        return number in self._fields

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(sorted(self._fields.values(), key=lambda d: d.number))

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        names = ", ".join(f"{d.number}:{d.name}" for d in self)
        return f"Schema({names})"
