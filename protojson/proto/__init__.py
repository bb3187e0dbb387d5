"""ProtoJson runtime: schemas, messages and wire form codecs."""

from .codec import (
    CodecError,
    EmptySequenceError,
    IndexLengthMismatchError,
    MalformedInputError,
    UnrecognizedArrayShapeError,
    WireForm,
    classify,
)
from .introspect import FieldInfo, Inspector
from .message import DynamicMessage, Message, create, extend, generate_accessors
from .schema import MAX_FIELD_NUMBER, Schema, SchemaError
from .types import FieldDescriptor, FieldFlag, FieldType, SimpleType, simple_type

__all__ = [
    "MAX_FIELD_NUMBER",
    "CodecError",
    "DynamicMessage",
    "EmptySequenceError",
    "FieldDescriptor",
    "FieldFlag",
    "FieldInfo",
    "FieldType",
    "IndexLengthMismatchError",
    "Inspector",
    "MalformedInputError",
    "Message",
    "Schema",
    "SchemaError",
    "SimpleType",
    "UnrecognizedArrayShapeError",
    "WireForm",
    "classify",
    "create",
    "extend",
    "generate_accessors",
    "simple_type",
]
