"""
Tests for rendering models into message and enum blocks
"""

# Third Party
import pytest

# Local
from openapi_to_proto.api_definition import Schema
from openapi_to_proto.schema_to_message import (
    is_message_ref,
    render_enum,
    render_message,
    render_model,
    resolve_ref,
)

## Helpers #####################################################################

STRING = Schema(type="string")
INTEGER = Schema(type="integer")


def render(name, schema, definitions=None):
    return "\n".join(render_message(name, schema, definitions or {}))


## Messages ####################################################################


def test_render_message_numbers_fields_in_sorted_order():
    """Make sure fields are sorted by name and numbered 1..N"""
    schema = Schema(
        type="object",
        properties={
            "zeta": STRING,
            "alpha": INTEGER,
            "mid": Schema(type="boolean"),
        },
    )
    assert render("Thing", schema) == (
        "message Thing {\n"
        "    int32 alpha = 1;\n"
        "    bool mid = 2;\n"
        "    string zeta = 3;\n"
        "}"
    )


def test_render_message_empty():
    """Make sure a model without properties is still a valid message"""
    assert render("Nothing", Schema(type="object")) == "message Nothing {\n}"


def test_render_message_scalar_formats():
    """Make sure formats select the right scalar types"""
    schema = Schema(
        properties={
            "a": Schema(type="integer", format="int64"),
            "b": Schema(type="integer", format="uint32"),
            "c": Schema(type="number"),
            "d": Schema(type="number", format="float"),
            "e": Schema(type="string", format="byte"),
            "f": Schema(type="string", format="date-time"),
        }
    )
    assert render("Formats", schema) == (
        "message Formats {\n"
        "    int64 a = 1;\n"
        "    uint32 b = 2;\n"
        "    double c = 3;\n"
        "    float d = 4;\n"
        "    bytes e = 5;\n"
        "    string f = 6;\n"
        "}"
    )


def test_render_message_nested_object():
    """Make sure inline objects become nested messages that take no number"""
    schema = Schema(
        properties={
            "name": STRING,
            "address": Schema(type="object", properties={"city": STRING}),
        }
    )
    assert render("Person", schema) == (
        "message Person {\n"
        "    message Address {\n"
        "        string city = 1;\n"
        "    }\n"
        "    Address address = 1;\n"
        "    string name = 2;\n"
        "}"
    )


def test_render_message_deep_nesting_indents():
    """Make sure every level of nesting adds one level of indentation"""
    schema = Schema(
        properties={
            "inner": Schema(
                properties={"leaf": Schema(properties={"v": INTEGER})},
            )
        }
    )
    assert render("Outer", schema) == (
        "message Outer {\n"
        "    message Inner {\n"
        "        message Leaf {\n"
        "            int32 v = 1;\n"
        "        }\n"
        "        Leaf leaf = 1;\n"
        "    }\n"
        "    Inner inner = 1;\n"
        "}"
    )


def test_render_message_enum_property():
    """Make sure enum properties get a nested enum numbered from 0"""
    schema = Schema(
        properties={"status": Schema(type="string", enum=["active", "in progress", ""])}
    )
    assert render("Task", schema) == (
        "message Task {\n"
        "    enum Status {\n"
        "        STATUS_ACTIVE = 0;\n"
        "        STATUS_IN_PROGRESS = 1;\n"
        "        STATUS_EMPTY = 2;\n"
        "    }\n"
        "    Status status = 1;\n"
        "}"
    )


def test_render_message_arrays():
    """Make sure arrays become repeated fields of their item type"""
    definitions = {"Tag": Schema(properties={"name": STRING})}
    schema = Schema(
        properties={
            "names": Schema(type="array", items=STRING),
            "tags": Schema(type="array", items=Schema(ref="Tag")),
            "lines": Schema(
                type="array", items=Schema(type="object", properties={"sku": STRING})
            ),
        }
    )
    assert render("Order", schema, definitions) == (
        "message Order {\n"
        "    message Lines {\n"
        "        string sku = 1;\n"
        "    }\n"
        "    repeated Lines lines = 1;\n"
        "    repeated string names = 2;\n"
        "    repeated Tag tags = 3;\n"
        "}"
    )


def test_render_message_array_of_arrays():
    """Make sure nested arrays get an intermediate wrapper message"""
    schema = Schema(
        properties={
            "matrix": Schema(
                type="array",
                items=Schema(type="array", items=Schema(type="number")),
            )
        }
    )
    assert render("Grid", schema) == (
        "message Grid {\n"
        "    message Matrix {\n"
        "        repeated double items = 1;\n"
        "    }\n"
        "    repeated Matrix matrix = 1;\n"
        "}"
    )


def test_render_message_maps_and_any():
    """Make sure additionalProperties become maps and free-form objects Any"""
    schema = Schema(
        properties={
            "labels": Schema(type="object", additional_properties=INTEGER),
            "extra": Schema(type="object", additional_properties=True),
            "blob": Schema(type="object"),
        }
    )
    assert render("Bag", schema) == (
        "message Bag {\n"
        "    google.protobuf.Any blob = 1;\n"
        "    map<string, google.protobuf.Any> extra = 2;\n"
        "    map<string, int32> labels = 3;\n"
        "}"
    )


def test_render_message_nullable_scalars():
    """Make sure nullable scalars use the wrapper types"""
    schema = Schema(
        properties={
            "nickname": Schema(type="string", nullable=True),
            "age": Schema(type="integer", format="int64", nullable=True),
        }
    )
    assert render("Profile", schema) == (
        "message Profile {\n"
        "    google.protobuf.Int64Value age = 1;\n"
        "    google.protobuf.StringValue nickname = 2;\n"
        "}"
    )


def test_render_message_sanitizes_field_names():
    schema = Schema(properties={"x-request-id": STRING})
    assert render("Headers", schema) == (
        "message Headers {\n" "    string x_request_id = 1;\n" "}"
    )


## References ##################################################################


def test_cyclic_references_are_not_expanded():
    """Make sure models referencing each other render as plain type names"""
    definitions = {
        "A": Schema(properties={"b": Schema(ref="B")}),
        "B": Schema(properties={"a": Schema(ref="A")}),
    }
    assert render_model("A", definitions["A"], definitions) == [
        "message A {",
        "    B b = 1;",
        "}",
    ]
    assert render_model("B", definitions["B"], definitions) == [
        "message B {",
        "    A a = 1;",
        "}",
    ]


def test_self_reference():
    definitions = {"Node": Schema(properties={"next": Schema(ref="Node")})}
    assert render_model("Node", definitions["Node"], definitions) == [
        "message Node {",
        "    Node next = 1;",
        "}",
    ]


def test_unknown_reference_raises():
    """Make sure a reference to a missing model is an error"""
    with pytest.raises(ValueError):
        render_message("Broken", Schema(properties={"x": Schema(ref="Nope")}), {})


def test_resolve_ref_scalar_and_alias_models():
    """Make sure references to scalar models and aliases resolve in place"""
    definitions = {
        "Id": Schema(type="string", format="byte"),
        "PetId": Schema(ref="Id"),
        "Pet": Schema(properties={"id": Schema(ref="PetId")}),
        "Loop": Schema(ref="Loop"),
    }
    assert resolve_ref("Id", definitions) == "bytes"
    assert resolve_ref("PetId", definitions) == "bytes"
    assert resolve_ref("Pet", definitions) == "Pet"
    with pytest.raises(ValueError):
        resolve_ref("Loop", definitions)


def test_is_message_ref():
    definitions = {
        "Pet": Schema(properties={"name": STRING}),
        "Pets": Schema(type="array", items=Schema(ref="Pet")),
        "Color": Schema(type="string", enum=["red"]),
        "Name": STRING,
        "Alias": Schema(ref="Pet"),
    }
    assert is_message_ref("Pet", definitions)
    assert is_message_ref("Pets", definitions)
    assert is_message_ref("Alias", definitions)
    assert not is_message_ref("Color", definitions)
    assert not is_message_ref("Name", definitions)
    assert not is_message_ref("Missing", definitions)


## Top-level models ############################################################


def test_render_model_enum():
    """Make sure enum models render as top-level enums"""
    schema = Schema(type="string", enum=["red", "Red & Blue"])
    assert render_model("Color", schema, {}) == [
        "enum Color {",
        "    COLOR_RED = 0;",
        "    COLOR_RED_AND_BLUE = 1;",
        "}",
    ]


def test_render_model_array():
    """Make sure array models are wrapped in a message"""
    definitions = {
        "Pet": Schema(properties={"name": STRING}),
        "Pets": Schema(type="array", items=Schema(ref="Pet")),
    }
    assert render_model("Pets", definitions["Pets"], definitions) == [
        "message Pets {",
        "    repeated Pet items = 1;",
        "}",
    ]


def test_render_model_scalar_and_alias_render_nothing():
    definitions = {"Id": STRING, "Other": Schema(ref="Id")}
    assert render_model("Id", definitions["Id"], definitions) == []
    assert render_model("Other", definitions["Other"], definitions) == []


def test_render_model_sanitizes_name():
    assert render_model("pet_category", Schema(type="object"), {}) == [
        "message PetCategory {",
        "}",
    ]


## Enums #######################################################################


def test_render_enum_numbers_from_zero():
    """Make sure M values are numbered 0..M-1"""
    values = ["a", "b", "c", "d"]
    lines = render_enum("Letter", values)
    numbers = [int(line.rstrip(";").split("=")[1]) for line in lines[1:-1]]
    assert numbers == list(range(len(values)))


def test_render_enum_depth():
    assert render_enum("Kind", ["x"], depth=2) == [
        "        enum Kind {",
        "            KIND_X = 0;",
        "        }",
    ]


def test_render_enum_skips_null_literal():
    """Make sure a null literal does not collide with the empty-string value"""
    assert render_enum("Kind", ["a", None, ""]) == [
        "enum Kind {",
        "    KIND_A = 0;",
        "    KIND_EMPTY = 1;",
        "}",
    ]


def test_render_message_null_only_enum_is_scalar():
    """Make sure an enum holding only null falls back to its scalar type"""
    schema = Schema(properties={"flag": Schema(type="string", enum=[None])})
    assert render("Holder", schema) == (
        "message Holder {\n" "    string flag = 1;\n" "}"
    )


## Name clashes ################################################################


def test_nested_declaration_does_not_shadow_model():
    """Make sure a nested message named like a model gets a distinct name so
    that references to the model still resolve to the top-level message
    """
    definitions = {
        "Address": Schema(properties={"street": STRING}),
        "Person": Schema(
            properties={
                "address": Schema(type="object", properties={"city": STRING}),
                "home": Schema(ref="Address"),
            }
        ),
    }
    assert render_model("Person", definitions["Person"], definitions) == [
        "message Person {",
        "    message AddressNested {",
        "        string city = 1;",
        "    }",
        "    AddressNested address = 1;",
        "    Address home = 2;",
        "}",
    ]


def test_nested_enum_does_not_shadow_model():
    definitions = {
        "Status": Schema(properties={"code": INTEGER}),
        "StatusNested": Schema(properties={"code": INTEGER}),
        "Job": Schema(properties={"status": Schema(type="string", enum=["done"])}),
    }
    assert render_model("Job", definitions["Job"], definitions) == [
        "message Job {",
        "    enum StatusNestedNested {",
        "        STATUSNESTEDNESTED_DONE = 0;",
        "    }",
        "    StatusNestedNested status = 1;",
        "}",
    ]
