"""Tests for message values and generated accessors"""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import logging

import pytest

from protojson.proto import (
    DynamicMessage,
    FieldDescriptor,
    FieldFlag,
    FieldType,
    Message,
    Schema,
    SchemaError,
    create,
    extend,
)


def describe_values():
    def starts_empty(expect, person_kind):
        person = person_kind()
        expect(person.has("name")) == False
        expect(person.get("name")) == None
        expect(person.serialize_as_object()) == {}

    def returns_empty_list_for_unset_repeated(expect, person_kind):
        person = person_kind()
        expect(person.has("ids")) == False
        expect(person.get("ids")) == []

    def does_not_apply_defaults(expect, address_kind):
        address = address_kind()
        expect(address.get("city")) == None

    def sets_without_validation(expect, person_kind):
        person = person_kind()
        person.set("name", 42)
        person.set("ids", "not a list")
        expect(person.get("name")) == 42
        expect(person.get("ids")) == "not a list"

    def clears_values(expect, person_kind):
        person = person_kind()
        person.set("name", 1)
        person.clear("name")
        expect(person.has("name")) == False
        expect(person.get("name")) == None

    def clears_repeated_back_to_empty_list(expect, person_kind):
        person = person_kind()
        person.set("ids", [1])
        person.clear("ids")
        expect(person.has("ids")) == False
        expect(person.get("ids")) == []

    def ignores_clearing_unset_fields(expect, person_kind):
        person = person_kind()
        person.clear("name")
        expect(person.has("name")) == False

    def adds_to_repeated_fields(expect, person_kind):
        person = person_kind()
        person.set("ids", [])
        person.add("ids", 1)
        person.add("ids", 2)
        expect(person.get("ids")) == [1, 2]
        expect(person.has("ids")) == True

    def requires_initialized_list_to_add(expect, person_kind):
        person = person_kind()
        with pytest.raises(KeyError):
            person.add("ids", 1)

    def treats_none_as_a_value(expect, person_kind):
        person = person_kind({"1": None})
        expect(person.has("name")) == True
        expect(person.serialize_as_object()) == {1: None}


def describe_tag_numbers():
    def resolves_tag_numbers(expect, person_kind):
        person = person_kind()
        person.set_by_number(1, "Ada")
        expect(person.get("name")) == "Ada"
        expect(person.get_by_number(1)) == "Ada"
        expect(person.has_by_number(1)) == True

        person.set_by_number(2, [])
        person.add_by_number(2, 7)
        expect(person.get_by_number(2)) == [7]

        person.clear_by_number(1)
        expect(person.has_by_number(1)) == False

    def ignores_unknown_tag_numbers(expect, person_kind):
        person = person_kind()
        person.set_by_number(99, "x")
        person.add_by_number(99, "x")
        person.clear_by_number(99)
        expect(person.get_by_number(99)) == None
        expect(person.has_by_number(99)) == False
        expect(person.serialize_as_object()) == {}

    def returns_empty_list_for_unset_repeated_by_number(expect, person_kind):
        expect(person_kind().get_by_number(2)) == []


def describe_accessors():
    def generates_named_accessors(expect, person_kind):
        person = person_kind()
        person.set_name("Ada")
        expect(person.get_name()) == "Ada"
        expect(person.has_name()) == True
        person.clear_name()
        expect(person.has_name()) == False

    def generates_add_accessor(expect, person_kind):
        person = person_kind()
        person.set_ids([1])
        person.add_ids(2)
        expect(person.get_ids()) == [1, 2]

    def generates_accessors_for_declared_schema(expect):
        class Point(Message):
            schema = Schema(
                {
                    1: ("x", FieldFlag.REQUIRED, FieldType.SINT32, None, 0),
                    2: ("y", FieldFlag.REQUIRED, FieldType.SINT32, None, 0),
                }
            )

        point = Point(["12", 3, -4])
        expect(point.get_x()) == 3
        expect(point.get_y()) == -4

    def inherits_schema_and_accessors(expect, person_kind):
        class Employee(person_kind):
            pass

        employee = Employee({"1": "Ada"})
        expect(employee.get_name()) == "Ada"
        expect(Employee.schema) == person_kind.schema

    def skips_reserved_names(expect, caplog):
        with caplog.at_level(logging.WARNING):
            kind = create({"fields": {1: ("unknown", FieldFlag.OPTIONAL, FieldType.STRING, None, None)}})

        expect("set_unknown" in kind.__dict__) == False
        expect("get_unknown" in kind.__dict__) == True
        expect("set_unknown" in caplog.text) == True

        message = kind({"1": "x", "2": "y"})
        expect(message.get_unknown()) == "x"
        expect(message.unknown_fields) == {2: "y"}


def describe_extensions():
    def merges_extension_fields(expect, person_kind):
        merged = extend(person_kind, {50: ("nickname", FieldFlag.OPTIONAL, FieldType.STRING, None, None)})
        expect([d.name for d in merged]) == ["nickname"]
        expect(person_kind.schema.field(50).name) == "nickname"

        person = person_kind({"1": "Ada", "50": "Countess"})
        expect(person.get_extension_nickname()) == "Countess"
        expect(person.get_name()) == "Ada"
        expect(hasattr(person, "get_nickname")) == False

    def accepts_descriptors(expect, person_kind):
        descriptor = FieldDescriptor(60, "rank", FieldFlag.OPTIONAL, FieldType.UINT32)
        extend(person_kind, {60: descriptor})
        person = person_kind()
        person.set_extension_rank(3)
        expect(person.serialize_as_object()) == {60: 3}

    def replaces_colliding_tags(expect, person_kind, caplog):
        with caplog.at_level(logging.WARNING):
            extend(person_kind, {1: ("alias", FieldFlag.OPTIONAL, FieldType.STRING, None, None)})

        expect(person_kind.schema.field(1).name) == "alias"
        expect(person_kind.schema.field_by_name("name")) == None
        expect("replaces field name" in caplog.text) == True

    def serializes_reused_names_once(expect, person_kind):
        extend(person_kind, {50: ("name", FieldFlag.OPTIONAL, FieldType.STRING, None, None)})
        person = person_kind()
        person.set_name("Ada")

        expect(person.get_extension_name()) == "Ada"
        expect(person.serialize_as_object()) == {50: "Ada"}

    def rejects_sealed_schema(expect, person_kind):
        person_kind.schema.seal()
        with pytest.raises(SchemaError):
            extend(person_kind, {50: ("nickname", FieldFlag.OPTIONAL, FieldType.STRING, None, None)})


def describe_objects():
    def exports_by_name(expect, person_kind):
        person = person_kind({"1": "Ada", "2": [1], "9": "unknown"})
        expect(person.export_as_object()) == {"name": "Ada", "ids": [1]}

    def exports_nested_messages(expect, person_kind, address_kind):
        person = person_kind({"3": {"1": "Main"}, "4": [{"2": "Ogdenville"}]})
        exported = person.export_as_object()
        expect(isinstance(exported["home"], address_kind)) == True

        expect(person.export_as_object(recurse=True)) == {
            "home": {"street": "Main"},
            "past": [{"city": "Ogdenville"}],
        }

    def imports_by_name(expect, person_kind, address_kind):
        person = person_kind()
        person.import_from_object({"name": "Ada", "home": {"street": "Main"}, "past": [{"city": "X"}]})
        expect(person.get("name")) == "Ada"
        expect(isinstance(person.get("home"), address_kind)) == True
        expect(person.get("home").get("street")) == "Main"
        expect(person.get("past")[0].get("city")) == "X"

    def round_trips_plain_objects(expect, person_kind):
        person = person_kind({"1": "Ada", "3": {"1": "Main"}})
        copy = person_kind()
        copy.import_from_object(person.export_as_object(recurse=True))
        expect(copy) == person


def describe_equality():
    def compares_values_and_unknown_fields(expect, person_kind):
        expect(person_kind({"1": "Ada"})) == person_kind(["1", "Ada"])
        expect(person_kind({"1": "Ada"}) == person_kind({"1": "Ada", "8": 1})) == False

    def compares_kinds(expect, person_kind, address_kind):
        expect(person_kind({"1": "x"}) == address_kind({"1": "x"})) == False

    def has_readable_repr(expect, person_kind):
        expect(repr(person_kind({"1": "Ada"}))) == "Person({'name': 'Ada'})"


def describe_dynamic_messages():
    def defines_fields_at_runtime(expect):
        class Point(DynamicMessage):
            pass

        Point.define_field(1, "x", FieldType.INT32)
        Point.define_field(2, "tags", FieldType.STRING, FieldFlag.REPEATED)
        Point.define_option("map_entry", False)

        point = Point(["12", 5, ["a"]])
        expect(point.get_x()) == 5
        expect(point.get_tags()) == ["a"]
        expect(dict(Point.schema.options)) == {"map_entry": False}

    def keeps_schemas_apart(expect):
        class First(DynamicMessage):
            pass

        class Second(DynamicMessage):
            pass

        First.define_field(1, "a", FieldType.BOOL)
        expect(len(First.schema)) == 1
        expect(len(Second.schema)) == 0
        expect(hasattr(Second, "get_a")) == False

    def defines_extension_ranges(expect):
        class Extendable(DynamicMessage):
            pass

        Extendable.define_extension_range(100)
        Extendable.define_extension_range(10, 20)
        expect(Extendable.schema.ranges) == ((100, 536870911), (10, 20))
