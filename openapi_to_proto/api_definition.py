"""
This module holds the in-memory API definition tree that the renderer walks,
along with an adapter that builds the tree from an already-decoded Swagger 2.0
or OpenAPI 3.x document dict.
"""

# Standard
from typing import Any, Dict, List, Optional, Union
import dataclasses

# First Party
import alog

log = alog.use_channel("APIDEF")

## Globals #####################################################################

# The HTTP verbs that can appear as operations on a path, in render order
HTTP_METHODS = ["get", "put", "post", "delete", "options", "head", "patch"]

# Preferred request/response content types when a document offers several
JSON_CONTENT_TYPES = ["application/json", "multipart/form-data"]


## Data Model ##################################################################


@dataclasses.dataclass
class Schema:
    """A single schema node. This is used both for named top-level models and
    for the properties, items and map values nested inside them.
    """

    type: Optional[str] = None
    format: Optional[str] = None
    ref: Optional[str] = None
    enum: List[Any] = dataclasses.field(default_factory=list)
    properties: Dict[str, "Schema"] = dataclasses.field(default_factory=dict)
    items: Optional["Schema"] = None
    additional_properties: Union[bool, "Schema", None] = None
    nullable: bool = False


# A named model and a property share the same shape
Model = Schema
Property = Schema


@dataclasses.dataclass
class Parameter:
    name: str
    location: str
    schema: Schema = dataclasses.field(default_factory=Schema)


@dataclasses.dataclass
class Operation:
    method: str
    operation_id: str = ""
    parameters: List[Parameter] = dataclasses.field(default_factory=list)
    request_body: Optional[Schema] = None
    responses: Dict[str, Optional[Schema]] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class Endpoint:
    """All of the operations available on a single path"""

    operations: Dict[str, Operation] = dataclasses.field(default_factory=dict)
    parameters: List[Parameter] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Info:
    title: str


@dataclasses.dataclass
class APIDefinition:
    info: Info
    paths: Dict[str, Endpoint] = dataclasses.field(default_factory=dict)
    definitions: Dict[str, Schema] = dataclasses.field(default_factory=dict)


## Interface ###################################################################


def api_definition_from_dict(doc: Dict[str, Any]) -> APIDefinition:
    """Build an APIDefinition from a decoded OpenAPI/Swagger document

    Args:
        doc:  Dict[str, Any]
            The document as produced by a YAML or JSON loader

    Returns:
        api_definition:  APIDefinition
            The API definition tree ready for rendering
    """
    info = doc.get("info") or {}
    components = doc.get("components") or {}
    raw_definitions = doc.get("definitions") or components.get("schemas") or {}
    log.debug2("Loading %d definitions", len(raw_definitions))
    definitions = {
        name: schema_from_dict(raw_schema)
        for name, raw_schema in raw_definitions.items()
    }

    paths = {}
    for path, path_item in (doc.get("paths") or {}).items():
        log.debug3("Loading path %s", path)
        paths[path] = _endpoint_from_dict(path_item, doc)

    return APIDefinition(
        info=Info(title=info.get("title", "")),
        paths=paths,
        definitions=definitions,
    )


def schema_from_dict(raw: Optional[Dict[str, Any]]) -> Schema:
    """Convert a single JSON-schema style dict into a Schema node"""
    if not raw:
        return Schema()

    # OpenAPI 3.1 style nullable types are given as a list of type names
    schema_type = raw.get("type")
    nullable = bool(raw.get("nullable") or raw.get("x-nullable"))
    if isinstance(schema_type, list):
        nullable = nullable or "null" in schema_type
        non_null = [type_name for type_name in schema_type if type_name != "null"]
        schema_type = non_null[0] if non_null else None

    additional = raw.get("additionalProperties")
    if isinstance(additional, dict):
        additional = schema_from_dict(additional)
    elif additional is not None:
        additional = bool(additional)

    return Schema(
        type=schema_type,
        format=raw.get("format"),
        ref=_ref_name(raw["$ref"]) if "$ref" in raw else None,
        enum=list(raw.get("enum") or []),
        properties={
            prop_name: schema_from_dict(prop)
            for prop_name, prop in (raw.get("properties") or {}).items()
        },
        items=schema_from_dict(raw["items"]) if raw.get("items") else None,
        additional_properties=additional,
        nullable=nullable,
    )


## Impl ########################################################################


def _ref_name(ref: str) -> str:
    """Get the model name that a local $ref points at"""
    return ref.rsplit("/", 1)[-1]


def _resolve_local_ref(raw: Dict[str, Any], doc: Dict[str, Any]) -> Dict[str, Any]:
    """Follow a local #/... $ref to shared parameters, responses or bodies"""
    ref = raw.get("$ref")
    if ref is None:
        return raw
    if not ref.startswith("#/"):
        raise ValueError(f"Only local references are supported: {ref}")
    node = doc
    for part in ref[2:].split("/"):
        if not isinstance(node, dict) or part not in node:
            raise ValueError(f"Unresolvable reference: {ref}")
        node = node[part]
    return node


def _endpoint_from_dict(path_item: Dict[str, Any], doc: Dict[str, Any]) -> Endpoint:
    operations = {}
    for method in HTTP_METHODS:
        raw_operation = path_item.get(method)
        if raw_operation is None:
            continue
        operations[method] = _operation_from_dict(method, raw_operation, doc)
    return Endpoint(
        operations=operations,
        parameters=[
            _parameter_from_dict(raw_param, doc)
            for raw_param in path_item.get("parameters") or []
        ],
    )


def _operation_from_dict(
    method: str, raw: Dict[str, Any], doc: Dict[str, Any]
) -> Operation:
    request_body = None
    if raw.get("requestBody"):
        request_body = _content_schema(_resolve_local_ref(raw["requestBody"], doc))

    responses = {}
    for status, raw_response in (raw.get("responses") or {}).items():
        raw_response = _resolve_local_ref(raw_response or {}, doc)
        if "schema" in raw_response:
            responses[str(status)] = schema_from_dict(raw_response["schema"])
        else:
            responses[str(status)] = _content_schema(raw_response)

    return Operation(
        method=method,
        operation_id=raw.get("operationId", ""),
        parameters=[
            _parameter_from_dict(raw_param, doc)
            for raw_param in raw.get("parameters") or []
        ],
        request_body=request_body,
        responses=responses,
    )


def _parameter_from_dict(raw: Dict[str, Any], doc: Dict[str, Any]) -> Parameter:
    raw = _resolve_local_ref(raw, doc)
    # OpenAPI 3 and Swagger body parameters carry a schema; Swagger non-body
    # parameters describe their type inline
    if "schema" in raw:
        schema = schema_from_dict(raw["schema"])
    else:
        schema = schema_from_dict(raw)
    return Parameter(
        name=raw["name"],
        location=raw.get("in", "query"),
        schema=schema,
    )


def _content_schema(body: Dict[str, Any]) -> Optional[Schema]:
    """Pick the schema out of an OpenAPI 3 content map"""
    content = body.get("content") or {}
    for content_type in JSON_CONTENT_TYPES:
        if content_type in content:
            return _media_schema(content[content_type])
    for media in content.values():
        return _media_schema(media)
    return None


def _media_schema(media: Optional[Dict[str, Any]]) -> Optional[Schema]:
    if not media or "schema" not in media:
        return None
    return schema_from_dict(media["schema"])
