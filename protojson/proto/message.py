"""Message instances and the accessors generated for their fields."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import partialmethod
from typing import Any, ClassVar

from . import codec
from .schema import Schema
from .types import FieldDescriptor, FieldFlag

logger = logging.getLogger(__name__)

ACCESSOR_OPERATIONS = ("get", "set", "has", "clear", "add")


def accessor_name(operation: str, field_name: str, extension: bool = False) -> str:
    """Name of a generated accessor, e.g. ``get_name`` or ``get_extension_name``."""
    prefix = "extension_" if extension else ""
    return f"{operation}_{prefix}{field_name}"


def generate_accessors(
    kind: type["Message"], descriptors: Iterable[FieldDescriptor], extension: bool = False
) -> None:
    """Attach named get/set/has/clear/add methods for the given fields.

    Accessors that would shadow a ``Message`` method are skipped.
    """
    for descriptor in descriptors:
        for operation in ACCESSOR_OPERATIONS:
            attr = accessor_name(operation, descriptor.name, extension)
            if hasattr(Message, attr):
                logger.warning(f"Skipping accessor {attr} on {kind.__name__}: name is reserved")
                continue
            setattr(kind, attr, partialmethod(getattr(Message, operation), descriptor.name))


class Message:
    """Base class for message kinds.

    A kind declares its ``schema`` as a class attribute; accessors for every
    field are generated when the class is created.

    Example:
        class Person(Message):
            schema = Schema({1: ("name", FieldFlag.OPTIONAL, FieldType.STRING, None, None)})

        person = Person({"1": "Ada"})
        person.get_name()  # "Ada"
        person.serialize_as_array()  # ["1", "Ada"]
    """

    schema: ClassVar[Schema]
    _message_types: ClassVar[dict[str, type["Message"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._message_types = dict(cls._message_types)

        if "schema" in cls.__dict__:
            generate_accessors(cls, cls.schema)
        elif getattr(cls, "schema", None) is None:
            cls.schema = Schema()

    def __init__(self, data: Any = None) -> None:
        self._values: dict[str, Any] = {}
        self._unknown: dict[int, Any] = {}
        if data is not None:
            self.parse(data)

    @classmethod
    def register(cls, reference: str, kind: type["Message"]) -> None:
        """Register the message kind used for fields referencing ``reference``."""
        cls._message_types[reference] = kind

    @classmethod
    def message_type(cls, reference: str | None) -> type["Message"] | None:
        if reference is None:
            return None
        return cls._message_types.get(reference)

    # Field values by name

    def get(self, name: str) -> Any:
        """Get a field value, an empty list for unset repeated fields."""
        if name not in self._values:
            descriptor = self.schema.field_by_name(name)
            if descriptor is not None and descriptor.is_repeated:
                return []
            return None
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def has(self, name: str) -> bool:
        return name in self._values

    def clear(self, name: str) -> None:
        self._values.pop(name, None)

    def add(self, name: str, value: Any) -> None:
        """Append to a repeated field.

        The field must already hold a list; adding to an unset field raises
        ``KeyError``.
        """
        self._values[name].append(value)

    # Field values by tag number, unknown tags are ignored

    def get_by_number(self, number: int) -> Any:
        descriptor = self.schema.field(number)
        if descriptor is None:
            return None
        return self.get(descriptor.name)

    def set_by_number(self, number: int, value: Any) -> None:
        descriptor = self.schema.field(number)
        if descriptor is not None:
            self.set(descriptor.name, value)

    def has_by_number(self, number: int) -> bool:
        descriptor = self.schema.field(number)
        return descriptor is not None and self.has(descriptor.name)

    def clear_by_number(self, number: int) -> None:
        descriptor = self.schema.field(number)
        if descriptor is not None:
            self.clear(descriptor.name)

    def add_by_number(self, number: int, value: Any) -> None:
        descriptor = self.schema.field(number)
        if descriptor is not None:
            self.add(descriptor.name, value)

    def set_unknown(self, number: int, value: Any) -> None:
        """Keep the value of a tag number the schema does not define."""
        self._unknown[number] = value

    @property
    def unknown_fields(self) -> dict[int, Any]:
        return dict(self._unknown)

    # Plain objects keyed by field name

    def export_as_object(self, recurse: bool = False) -> dict[str, Any]:
        """Export set fields keyed by name.

        Args:
            recurse: Also export nested messages as plain objects.
        """
        result: dict[str, Any] = {}
        for descriptor in self.schema:
            if not self.has(descriptor.name):
                continue
            value = self.get(descriptor.name)
            if recurse:
                value = _map_messages(value, lambda m: m.export_as_object(recurse))
            result[descriptor.name] = value
        return result

    def import_from_object(self, obj: Mapping[str, Any]) -> None:
        """Set fields from an object keyed by field name.

        Plain objects given for fields of a registered message kind are
        imported into new instances of that kind.
        """
        for name, value in obj.items():
            descriptor = self.schema.field_by_name(name)
            kind = self.message_type(descriptor.reference) if descriptor else None
            if kind is not None and value is not None:
                if descriptor.is_repeated and isinstance(value, Sequence):
                    value = [_import(kind, item) for item in value]
                else:
                    value = _import(kind, value)
            self.set(name, value)

    # Wire forms

    def parse(self, data: Any) -> None:
        """Parse a payload in canonical, indexed or PbLite form."""
        codec.decode(self, data)

    def parse_json(self, text: str) -> None:
        """Parse JSON text in any wire form, PbLite elisions included."""
        codec.decode(self, codec.loads(text))

    def serialize(self, compact: bool = False) -> dict[int, Any] | list[Any]:
        return self.serialize_as_array() if compact else self.serialize_as_object()

    def _tagged_values(self, encode: Callable[["Message"], Any]) -> dict[int, Any]:
        # Nested messages go through ``encode``, unknown fields stay verbatim
        result: dict[int, Any] = {}
        for descriptor in self.schema:
            if self.has(descriptor.name):
                result[descriptor.number] = _map_messages(self._values[descriptor.name], encode)

        result.update(self._unknown)
        return dict(sorted(result.items()))

    def serialize_as_object(self) -> dict[int, Any]:
        """Serialize set fields and unknown fields keyed by tag number."""
        return self._tagged_values(lambda m: m.serialize_as_object())

    def serialize_as_array(self) -> list[Any]:
        """Serialize to the index-prefixed array form."""
        return codec.encode_indexed(self._tagged_values(lambda m: m.serialize_as_array()))

    def serialize_as_pblite(self) -> list[Any]:
        """Serialize to the positional PbLite array, ``None`` marking gaps."""
        return codec.encode_pblite(self._tagged_values(lambda m: m.serialize_as_pblite()))

    def serialize_as_json(self, compact: bool = False) -> str:
        return codec.dumps(self.serialize(compact))

    def serialize_as_pblite_json(self, compat: bool = False) -> str:
        """Serialize to PbLite JSON text.

        Args:
            compat: Write gaps as ``null`` instead of eliding them.
        """
        return codec.render_pblite(self.serialize_as_pblite(), compat)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values and self._unknown == other._unknown

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


def _map_messages(value: Any, fn: Any) -> Any:
    if isinstance(value, Message):
        return fn(value)
    if isinstance(value, (list, tuple)):
        return [fn(item) if isinstance(item, Message) else item for item in value]
    return value


def _import(kind: type[Message], value: Any) -> Any:
    if not isinstance(value, Mapping):
        return value
    message = kind()
    message.import_from_object(value)
    return message


def create(definition: Schema | Mapping[str, Any], name: str = "Message") -> type[Message]:
    """Create a message kind at runtime.

    Args:
        definition: A schema, or a ``{"fields", "ranges", "options"}`` mapping.
        name: Class name of the new kind.

    Returns:
        A ``Message`` subclass with accessors for every field.
    """
    schema = definition if isinstance(definition, Schema) else Schema.from_definition(definition)
    return type(name, (Message,), {"schema": schema})


def extend(
    kind: type[Message],
    extensions: Mapping[int | str, FieldDescriptor | Sequence[Any]],
) -> list[FieldDescriptor]:
    """Merge extension fields into a kind's schema.

    Accessors are generated for the new fields only, with an ``extension_``
    prefix. A tag that is already defined is replaced.

    Returns:
        The merged descriptors.
    """
    descriptors = [
        FieldDescriptor.from_definition(int(number), definition)
        for number, definition in extensions.items()
    ]
    merged = kind.schema.merge(descriptors)
    generate_accessors(kind, merged, extension=True)
    return merged


class DynamicMessage(Message):
    """Message kind whose fields are defined at runtime.

    Every subclass owns a separate, initially empty schema.

    Example:
        class Point(DynamicMessage):
            pass

        Point.define_field(1, "x", FieldType.INT32)
        Point.define_field(2, "y", FieldType.INT32)
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        if "schema" not in cls.__dict__:
            cls.schema = Schema()
        super().__init_subclass__(**kwargs)

    @classmethod
    def define_field(
        cls,
        number: int,
        name: str,
        type: int,
        flag: int = FieldFlag.OPTIONAL,
        reference: str | None = None,
        default: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> FieldDescriptor:
        descriptor = cls.schema.define_field(number, name, type, flag, reference, default, options)
        generate_accessors(cls, [descriptor])
        return descriptor

    @classmethod
    def define_extension_range(cls, min: int, max: int | None = None) -> None:
        if max is None:
            cls.schema.declare_extension_range(min)
        else:
            cls.schema.declare_extension_range(min, max)

    @classmethod
    def define_option(cls, name: str, value: Any) -> None:
        cls.schema.set_option(name, value)
