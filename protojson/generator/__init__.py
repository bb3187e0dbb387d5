"""ProtoJson definition parser and code generator."""

from .build import build_messages as build_messages
from .build import build_schema as build_schema
from .parser import ValidationError as ValidationError
from .parser import parse as parse
from .types import *
