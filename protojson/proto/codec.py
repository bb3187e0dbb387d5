"""Conversions between the ProtoJson wire forms.

Every wire form is derived from the canonical object form, a mapping of tag
number to value, and parsed back into it before being applied to a message:

    canonical   {1: "Ada", 2: [10, 20]}
    indexed     ["12", "Ada", [10, 20]]
    PbLite      [None, "Ada", [10, 20]]    rendered as [,"Ada",[10,20]]
"""

import json
import logging
import os
from collections.abc import Mapping, Sequence
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from lark import Lark
from lark.exceptions import LarkError, VisitError
from lark.visitors import Transformer

if TYPE_CHECKING:
    from .message import Message

logger = logging.getLogger(__name__)

# Index characters encode tag numbers as chr(number + 48), tag 1 -> "1"
INDEX_OFFSET = 48

_g_parser: Lark | None = None


class CodecError(RuntimeError):
    """Base exception for wire form conversion errors."""


class MalformedInputError(CodecError):
    """Raised when the input is not a suitable message payload."""


class EmptySequenceError(CodecError):
    """Raised when an array payload has no elements."""


class IndexLengthMismatchError(CodecError):
    """Raised when an index string does not describe the array it heads."""


class UnrecognizedArrayShapeError(CodecError):
    """Raised when an array payload is neither indexed nor PbLite."""


class WireForm(StrEnum):
    """Shape of a payload handed to the decoder."""

    CANONICAL = auto()
    INDEXED = auto()
    PBLITE = auto()
    INVALID = auto()


def _is_sequence(data: Any) -> bool:
    return isinstance(data, Sequence) and not isinstance(data, (str, bytes, bytearray))


def classify(data: Any) -> WireForm:
    """Classify a payload by its shape."""
    if isinstance(data, Mapping):
        return WireForm.CANONICAL
    if _is_sequence(data) and len(data) > 0:
        if data[0] is None:
            return WireForm.PBLITE
        if isinstance(data[0], str):
            return WireForm.INDEXED
    return WireForm.INVALID


def encode_indexed(obj: Mapping[int, Any]) -> list[Any]:
    """Encode a tag-keyed object as an index-prefixed array.

    Values are written as given. Nested messages are encoded by the caller,
    so plain objects held by unknown fields pass through untouched.
    """
    index = "".join(chr(int(number) + INDEX_OFFSET) for number in obj)
    return [index, *obj.values()]


def encode_pblite(obj: Mapping[int, Any]) -> list[Any]:
    """Encode a tag-keyed object as a positional array.

    Position 0 is always empty and positions without a value are ``None``.
    Values are written as given, like ``encode_indexed``.
    """
    numbers = [int(number) for number in obj]
    result: list[Any] = [None] * (max(numbers, default=0) + 1)

    for number, value in zip(numbers, obj.values()):
        result[number] = value

    return result


def render_pblite(value: Any, compat: bool = False) -> str:
    """Render a PbLite array as JSON text.

    Empty slots are elided (``[,"x"]``) unless ``compat`` is set, in which
    case they are written as ``null``.
    """
    if _is_sequence(value):
        items = []
        for item in value:
            if item is None:
                items.append("null" if compat else "")
            else:
                items.append(render_pblite(item, compat))
        text = ",".join(items)
        # A trailing empty slot needs its own comma, [,] has one slot
        if value and value[-1] is None and not compat:
            text += ","
        return f"[{text}]"

    if isinstance(value, Mapping):
        pairs = (f"{json.dumps(str(k))}:{render_pblite(v, compat)}" for k, v in value.items())
        return "{" + ",".join(pairs) + "}"

    return json.dumps(value)


def _tag(key: Any) -> int:
    if isinstance(key, int) and not isinstance(key, bool):
        return key
    if isinstance(key, str) and key.strip().isdecimal():
        return int(key)
    raise MalformedInputError(f"Invalid tag number {key!r}")


def _from_canonical(data: Mapping[Any, Any]) -> dict[int, Any]:
    return {_tag(key): value for key, value in data.items()}


def _from_indexed(data: Sequence[Any]) -> dict[int, Any]:
    index = data[0]
    if len(index) != len(data) - 1:
        raise IndexLengthMismatchError("Index length does not match array length")

    return {ord(char) - INDEX_OFFSET: value for char, value in zip(index, data[1:])}


def _from_pblite(data: Sequence[Any]) -> dict[int, Any]:
    return {number: value for number, value in enumerate(data) if number > 0 and value is not None}


def decode_object(data: Any) -> dict[int, Any]:
    """Convert a payload in any wire form to its canonical object.

    Raises:
        EmptySequenceError: The payload is an empty array.
        IndexLengthMismatchError: The index string has the wrong length.
        UnrecognizedArrayShapeError: The array is neither indexed nor PbLite.
        MalformedInputError: The payload is neither an array nor an object.
    """
    form = classify(data)

    if form is WireForm.CANONICAL:
        return _from_canonical(data)
    if form is WireForm.INDEXED:
        return _from_indexed(data)
    if form is WireForm.PBLITE:
        return _from_pblite(data)

    if _is_sequence(data):
        if not data:
            raise EmptySequenceError("Supplied data is empty")
        raise UnrecognizedArrayShapeError("Unrecognized structure")
    raise MalformedInputError("Unsuitable data to parse")


def _nested(message: "Message", number: int, value: Any) -> Any:
    descriptor = message.schema.field(number)
    if descriptor is None or not descriptor.is_message or value is None:
        return value

    kind = type(message).message_type(descriptor.reference)
    if kind is None:
        return value

    def build(item: Any) -> Any:
        return item if isinstance(item, kind) or item is None else kind(item)

    if descriptor.is_repeated and _is_sequence(value):
        return [build(item) for item in value]
    return build(value)


def apply_object(message: "Message", obj: Mapping[int, Any]) -> None:
    """Route a canonical object into a message.

    Known tags are written through the named setter, everything else is kept
    verbatim in the message's unknown fields.
    """
    schema = message.schema

    for number, value in obj.items():
        descriptor = schema.field(number)
        if descriptor is None:
            logger.debug(f"Keeping unknown field {number} on {type(message).__name__}")
            message.set_unknown(number, value)
        else:
            message.set(descriptor.name, _nested(message, number, value))


def decode(message: "Message", data: Any) -> None:
    """Parse a payload in any wire form into a message."""
    apply_object(message, decode_object(data))


class _Hole:
    pass


_HOLE = _Hole()


class SparseTransformer(Transformer):
    """Transform a sparse JSON parse tree into Python values."""

    def array(self, args: list[Any]) -> list[Any]:
        # A trailing hole is the trailing comma, or the inside of []
        if args and args[-1] is _HOLE:
            args = args[:-1]
        return [None if item is _HOLE else item for item in args]

    def element(self, args: list[Any]) -> Any:
        return args[0] if args else _HOLE

    def object(self, args: list[Any]) -> dict[str, Any]:
        return dict(pair for pair in args if pair is not None)

    def pair(self, args: list[Any]) -> tuple[str, Any]:
        return (args[0], args[1])

    def string(self, args: list[Any]) -> str:
        return json.loads(args[0])

    def number(self, args: list[Any]) -> int | float:
        text = str(args[0])
        if any(c in text for c in ".eE"):
            return float(text)
        return int(text)

    def true(self, _args: list[Any]) -> bool:
        return True

    def false(self, _args: list[Any]) -> bool:
        return False

    def null(self, _args: list[Any]) -> None:
        return None


def loads(text: str) -> Any:
    """Parse JSON text, accepting the elided array slots of PbLite text."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/sparse.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, parser="lalr", maybe_placeholders=True)

    try:
        tree = _g_parser.parse(text)
        return SparseTransformer().transform(tree)
    except VisitError as e:
        raise MalformedInputError(f"Unparsable payload: {e.orig_exc}") from e
    except LarkError as e:
        raise MalformedInputError(f"Unparsable payload: {e}") from e


def dumps(value: Any) -> str:
    """Serialize a canonical object or an indexed array as JSON text."""
    return json.dumps(value, separators=(",", ":"))
