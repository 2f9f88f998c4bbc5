"""
This module implements the recursive rendering of schema models into proto
message and enum blocks. Each render function returns the block as a list of
already-indented lines.
"""

# Standard
from typing import Dict, List, Optional

# Third Party
from google.protobuf import any_pb2, wrappers_pb2

# First Party
import alog

# Local
from .api_definition import Schema
from .field_numbers import FieldNumberAllocator, enum_counter, message_counter
from .naming import field_name, message_name, to_enum

log = alog.use_channel("SCH2M")

## Globals #####################################################################

PROTO_FILE_INDENT = "    "

ANY_TYPE = any_pb2.Any.DESCRIPTOR.full_name

SCALAR_TYPES = ("integer", "number", "boolean", "string")

INTEGER_FORMATS = {
    "int32": "int32",
    "int64": "int64",
    "uint32": "uint32",
    "uint64": "uint64",
}

NUMBER_FORMATS = {
    "float": "float",
    "double": "double",
    "int32": "int32",
    "int64": "int64",
}

STRING_FORMATS = {
    "byte": "bytes",
    "binary": "bytes",
}

# Nullable scalars are carried in the well-known wrapper messages
WRAPPER_TYPES = {
    "double": wrappers_pb2.DoubleValue.DESCRIPTOR.full_name,
    "float": wrappers_pb2.FloatValue.DESCRIPTOR.full_name,
    "int64": wrappers_pb2.Int64Value.DESCRIPTOR.full_name,
    "uint64": wrappers_pb2.UInt64Value.DESCRIPTOR.full_name,
    "int32": wrappers_pb2.Int32Value.DESCRIPTOR.full_name,
    "uint32": wrappers_pb2.UInt32Value.DESCRIPTOR.full_name,
    "bool": wrappers_pb2.BoolValue.DESCRIPTOR.full_name,
    "string": wrappers_pb2.StringValue.DESCRIPTOR.full_name,
    "bytes": wrappers_pb2.BytesValue.DESCRIPTOR.full_name,
}

# Name of the single field used when an array or map has to be wrapped in a
# message of its own
WRAPPER_FIELD_NAMES = {
    "array": "items",
    "map": "values",
}

# Appended to nested declaration names that clash with a model name
NESTED_SUFFIX = "Nested"


## Interface ###################################################################


def render_model(
    name: str,
    schema: Schema,
    definitions: Dict[str, Schema],
) -> List[str]:
    """Render a top-level model definition

    Enum models become top-level enums, arrays and maps are wrapped in a
    message holding a single field, and objects become messages. Scalar and
    alias models render nothing since references to them are resolved in
    place.

    Args:
        name:  str
            The name of the model in the definitions
        schema:  Schema
            The model itself
        definitions:  Dict[str, Schema]
            All named models, used to resolve references

    Returns:
        lines:  List[str]
            The lines of the rendered block (empty for scalars and aliases)
    """
    type_name = message_name(name)
    kind = _kind(schema)
    log.debug2("Rendering %s model %s", kind, type_name)
    if kind == "enum":
        return render_enum(type_name, _enum_values(schema))
    if kind in WRAPPER_FIELD_NAMES:
        return render_message(type_name, _wrap(kind, schema), definitions)
    if kind in ("ref", "scalar"):
        return []
    return render_message(type_name, schema, definitions)


def render_message(
    name: str,
    schema: Schema,
    definitions: Dict[str, Schema],
    depth: int = 0,
) -> List[str]:
    """Render a message block for an object schema at the given depth. Fields
    are emitted in sorted property-name order and numbered from 1.
    """
    log.debug3("Rendering message %s at depth %d", name, depth)
    counter = message_counter()
    lines = [f"{_indent(depth)}message {name} {{"]
    for prop_name in sorted(schema.properties):
        lines.extend(
            render_field(
                prop_name, schema.properties[prop_name], definitions, depth, counter
            )
        )
    lines.append(f"{_indent(depth)}}}")
    return lines


def render_enum(name: str, values: List, depth: int = 0) -> List[str]:
    """Render an enum block with values numbered from 0. A null literal only
    marks the schema as nullable, so it does not get a value of its own.
    """
    log.debug3("Rendering enum %s at depth %d", name, depth)
    counter = enum_counter()
    lines = [f"{_indent(depth)}enum {name} {{"]
    for value in values:
        if value is None:
            continue
        lines.append(f"{_indent(depth + 1)}{to_enum(name, value)} = {counter.next()};")
    lines.append(f"{_indent(depth)}}}")
    return lines


def render_field(
    prop_name: str,
    schema: Schema,
    definitions: Dict[str, Schema],
    depth: int,
    counter: FieldNumberAllocator,
) -> List[str]:
    """Render one field of a message at the given depth, preceded by any nested
    enum or message declarations that the field's type needs
    """
    lines = []
    nested_name = message_name(prop_name)
    kind = _kind(schema)
    label = ""
    if kind == "array":
        label = "repeated "
        field_type = _value_type(
            nested_name, schema.items or Schema(), definitions, depth + 1, lines
        )
    elif kind == "map":
        value_schema = schema.additional_properties
        if not isinstance(value_schema, Schema):
            value_schema = Schema()
        value_type = _value_type(
            nested_name, value_schema, definitions, depth + 1, lines
        )
        field_type = f"map<string, {value_type}>"
    else:
        field_type = _value_type(nested_name, schema, definitions, depth + 1, lines)

    # Nested declarations don't take a number, only the field itself does
    lines.append(
        f"{_indent(depth + 1)}{label}{field_type} {field_name(prop_name)} = {counter.next()};"
    )
    return lines


def resolve_ref(
    ref: str,
    definitions: Dict[str, Schema],
    seen: Optional[List[str]] = None,
) -> str:
    """Get the type name for a reference to a named model. References are never
    expanded; only alias models (a model that is itself a reference) are
    followed.
    """
    seen = seen or []
    if ref not in definitions:
        raise ValueError(f"Reference to unknown model: {ref}")
    if ref in seen:
        raise ValueError(f"Circular model alias: {' -> '.join(seen + [ref])}")
    model = definitions[ref]
    kind = _kind(model)
    if kind == "ref":
        return resolve_ref(model.ref, definitions, seen + [ref])
    if kind == "scalar":
        return _scalar_type(model)
    return message_name(ref)


def is_message_ref(ref: str, definitions: Dict[str, Schema]) -> bool:
    """Check whether a reference resolves to a model rendered as a message"""
    seen = []
    while ref in definitions and definitions[ref].ref and ref not in seen:
        seen.append(ref)
        ref = definitions[ref].ref
    return ref in definitions and _kind(definitions[ref]) not in (
        "ref",
        "enum",
        "scalar",
    )


## Impl ########################################################################


def _indent(depth: int) -> str:
    return PROTO_FILE_INDENT * depth


def _kind(schema: Schema) -> str:
    """Classify a schema node. A reference wins over everything, then enums,
    then arrays.
    """
    if schema.ref:
        return "ref"
    if _enum_values(schema):
        return "enum"
    if schema.type == "array":
        return "array"
    if schema.properties:
        return "object"
    if schema.additional_properties:
        return "map"
    if schema.type in SCALAR_TYPES:
        return "scalar"
    return "any"


def _enum_values(schema: Schema) -> List:
    return [value for value in schema.enum if value is not None]


def _wrap(kind: str, schema: Schema) -> Schema:
    """Make an object schema holding the given array/map as its only field"""
    return Schema(type="object", properties={WRAPPER_FIELD_NAMES[kind]: schema})


def _value_type(
    type_name: str,
    schema: Schema,
    definitions: Dict[str, Schema],
    depth: int,
    lines: List[str],
) -> str:
    """Get the type name for a single (non-repeated) value, adding any nested
    declarations it needs to lines at the given depth
    """
    kind = _kind(schema)
    if kind == "ref":
        return resolve_ref(schema.ref, definitions)
    if kind == "scalar":
        return _scalar_type(schema)
    if kind == "any":
        return ANY_TYPE

    # A nested declaration named like a model would shadow that model for every
    # reference made inside the enclosing message
    model_names = {message_name(model_name) for model_name in definitions}
    while type_name in model_names:
        type_name = f"{type_name}{NESTED_SUFFIX}"

    if kind == "enum":
        lines.extend(render_enum(type_name, _enum_values(schema), depth))
    elif kind == "object":
        lines.extend(render_message(type_name, schema, definitions, depth))
    else:
        # Arrays of arrays and containers of maps need an intermediate message
        lines.extend(render_message(type_name, _wrap(kind, schema), definitions, depth))
    return type_name


def _scalar_type(schema: Schema) -> str:
    if schema.type == "integer":
        proto_type = INTEGER_FORMATS.get(schema.format, "int32")
    elif schema.type == "number":
        proto_type = NUMBER_FORMATS.get(schema.format, "double")
    elif schema.type == "boolean":
        proto_type = "bool"
    else:
        proto_type = STRING_FORMATS.get(schema.format, "string")
    if schema.nullable:
        return WRAPPER_TYPES[proto_type]
    return proto_type
