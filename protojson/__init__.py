"""ProtoJson - JSON adaptation of Protocol Buffers messages."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protojson")
except PackageNotFoundError:
    __version__ = "(local)"
