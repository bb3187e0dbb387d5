"""Unit tests configuration file."""

import pytest

from protojson.proto import FieldFlag, FieldType, Message, create


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def address_kind() -> type[Message]:
    return create(
        {
            "fields": {
                1: ("street", FieldFlag.OPTIONAL, FieldType.STRING, None, None),
                2: ("city", FieldFlag.OPTIONAL, FieldType.STRING, None, "Springfield"),
            }
        },
        name="Address",
    )


@pytest.fixture
def person_kind(address_kind) -> type[Message]:
    kind = create(
        {
            "fields": {
                1: ("name", FieldFlag.OPTIONAL, FieldType.STRING, None, None),
                2: ("ids", FieldFlag.REPEATED, FieldType.INT32, None, None),
                3: ("home", FieldFlag.OPTIONAL, FieldType.MESSAGE, "Address", None),
                4: ("past", FieldFlag.REPEATED, FieldType.MESSAGE, "Address", None),
                5: ("email", FieldFlag.REQUIRED, FieldType.STRING, None, None, {"deprecated": True}),
            },
            "ranges": [[50, 100]],
            "options": {"message_set_wire_format": False},
        },
        name="Person",
    )
    kind.register("Address", address_kind)
    return kind
