"""
This module renders the request/response messages and the rpc lines for the
operations on a single API path
"""

# Standard
from typing import Dict, Iterable, List, Optional, Tuple
import dataclasses

# Third Party
from google.protobuf import empty_pb2

# First Party
import alog

# Local
from .api_definition import HTTP_METHODS, Endpoint, Operation, Parameter, Schema
from .field_numbers import message_counter
from .naming import field_name, path_method_to_name
from .schema_to_message import (
    PROTO_FILE_INDENT,
    is_message_ref,
    render_field,
    render_message,
    resolve_ref,
)

log = alog.use_channel("EP2RPC")

## Globals #####################################################################

EMPTY_TYPE = empty_pb2.Empty.DESCRIPTOR.full_name

# Field name used for an OpenAPI 3 request body in the request message
REQUEST_BODY_FIELD = "body"
REQUEST_BODY_LOCATION = "request"


@dataclasses.dataclass
class Rpc:
    """Everything needed to render one operation of a path"""

    name: str
    request_type: str
    response_type: str
    messages: List[str]


## Interface ###################################################################


def render_endpoint_messages(
    path: str,
    endpoint: Endpoint,
    definitions: Dict[str, Schema],
) -> List[str]:
    """Render the request/response messages for every operation on the path"""
    lines = []
    for rpc in endpoint_rpcs(path, endpoint, definitions):
        lines.extend(rpc.messages)
    return lines


def render_endpoint_rpcs(
    path: str,
    endpoint: Endpoint,
    definitions: Dict[str, Schema],
) -> List[str]:
    """Render the service rpc lines for every operation on the path"""
    return [
        f"{PROTO_FILE_INDENT}rpc {rpc.name}({rpc.request_type}) returns ({rpc.response_type});"
        for rpc in endpoint_rpcs(path, endpoint, definitions)
    ]


def endpoint_rpcs(
    path: str,
    endpoint: Endpoint,
    definitions: Dict[str, Schema],
) -> List[Rpc]:
    """Work out the rpc name, request/response types and wrapper messages for
    each operation on the path

    Args:
        path:  str
            The URL path the endpoint is mounted on
        endpoint:  Endpoint
            The operations available on the path
        definitions:  Dict[str, Schema]
            All named models, used to resolve references

    Returns:
        rpcs:  List[Rpc]
            One entry per operation in HTTP verb order
    """
    rpcs = []
    for method, operation in _ordered_operations(endpoint):
        name = path_method_to_name(path, method, operation.operation_id)
        log.debug2("Rendering %s %s as %s", method.upper(), path, name)
        request_type, request_lines = _request(name, endpoint, operation, definitions)
        response_type, response_lines = _response(name, operation, definitions)
        rpcs.append(
            Rpc(
                name=name,
                request_type=request_type,
                response_type=response_type,
                messages=request_lines + response_lines,
            )
        )
    return rpcs


## Impl ########################################################################


def _ordered_operations(endpoint: Endpoint) -> Iterable[Tuple[str, Operation]]:
    known = [method for method in HTTP_METHODS if method in endpoint.operations]
    others = sorted(method for method in endpoint.operations if method not in known)
    for method in known + others:
        yield method, endpoint.operations[method]


def _merged_parameters(
    shared: List[Parameter], own: List[Parameter]
) -> List[Parameter]:
    """Path-level parameters apply to every operation unless the operation
    redeclares a parameter with the same name and location
    """
    own_keys = {(param.name, param.location) for param in own}
    return [
        param for param in shared if (param.name, param.location) not in own_keys
    ] + list(own)


def _request_fields(
    params: List[Parameter], request_body: Optional[Schema]
) -> List[Tuple[str, Schema]]:
    """Lay out the request message fields: non-body parameters, then body
    parameters, then the OpenAPI 3 request body. A name that is already taken
    is prefixed with its location, then numbered until it is free.
    """
    located = [
        (param.name, param.location, param.schema)
        for param in params
        if param.location != "body"
    ]
    located.extend(
        (param.name, param.location, param.schema)
        for param in params
        if param.location == "body"
    )
    if request_body is not None:
        located.append((REQUEST_BODY_FIELD, REQUEST_BODY_LOCATION, request_body))

    fields = []
    taken = set()
    for name, location, schema in located:
        unique_name = field_name(name)
        if _json_key(unique_name) in taken:
            unique_name = field_name(f"{location}_{name}")
        candidate = unique_name
        suffix = 2
        while _json_key(candidate) in taken:
            candidate = f"{unique_name}_{suffix}"
            suffix += 1
        if candidate != field_name(name):
            log.debug2("Renaming %s parameter %s to %s", location, name, candidate)
        taken.add(_json_key(candidate))
        fields.append((candidate, schema))
    return fields


def _json_key(name: str) -> str:
    """Fields whose names only differ in case or underscores share a JSON name"""
    return name.replace("_", "").lower()


def _request(
    name: str,
    endpoint: Endpoint,
    operation: Operation,
    definitions: Dict[str, Schema],
) -> Tuple[str, List[str]]:
    params = _merged_parameters(endpoint.parameters, operation.parameters)
    fields = _request_fields(params, operation.request_body)
    if not fields:
        return EMPTY_TYPE, []

    message_name = f"{name}Request"
    counter = message_counter()
    lines = [f"message {message_name} {{"]
    for request_field, schema in fields:
        lines.extend(render_field(request_field, schema, definitions, 0, counter))
    lines.append("}")
    return message_name, lines


def _response(
    name: str,
    operation: Operation,
    definitions: Dict[str, Schema],
) -> Tuple[str, List[str]]:
    status = _success_status(operation.responses)
    schema = operation.responses.get(status) if status else None
    if schema is None:
        return EMPTY_TYPE, []

    # A message model can be returned as-is
    if schema.ref and is_message_ref(schema.ref, definitions):
        return resolve_ref(schema.ref, definitions), []

    message_name = f"{name}Response"
    if schema.properties and not (schema.ref or schema.enum or schema.type == "array"):
        return message_name, render_message(message_name, schema, definitions)

    # Everything else gets wrapped in a single-field message
    wrapper_field = "items" if schema.type == "array" else "value"
    wrapper = Schema(type="object", properties={wrapper_field: schema})
    return message_name, render_message(message_name, wrapper, definitions)


def _success_status(responses: Dict[str, Optional[Schema]]) -> Optional[str]:
    """Pick the first 2xx status code, falling back to the default response"""
    success = sorted(status for status in responses if status.startswith("2"))
    if success:
        return success[0]
    if "default" in responses:
        return "default"
    return None
