"""
This module assembles the full .proto document for an API definition
"""

# Standard
from typing import List

# First Party
import alog

# Local
from .api_definition import APIDefinition
from .endpoint_to_rpc import render_endpoint_messages, render_endpoint_rpcs
from .naming import package_name, service_name
from .postprocess import SYNTAX_LINE, add_imports, clean_spacing
from .schema_to_message import render_model

log = alog.use_channel("API2P")


class RenderFailure(ValueError):
    """Raised when an API definition cannot be rendered to a proto schema"""


## Interface ###################################################################


def generate_proto(api_definition: APIDefinition) -> bytes:
    """Generate a proto3 schema from the given API definition

    Args:
        api_definition:  APIDefinition
            The resolved API definition tree. It is not modified.

    Returns:
        proto_file_content:  bytes
            The UTF-8 encoded .proto document

    Raises:
        RenderFailure: If any part of the definition cannot be rendered. No
            partial output is produced.
    """
    try:
        content = assemble_proto(api_definition)
    except Exception as err:
        raise RenderFailure(f"unable to generate protobuf schema: {err}") from err
    return clean_spacing(add_imports(content)).encode("utf-8")


def assemble_proto(api_definition: APIDefinition) -> str:
    """Lay out the raw document: syntax, package, endpoint messages, model
    messages and finally the service. Paths and definitions are visited in
    sorted key order so the output is reproducible.
    """
    title = api_definition.info.title
    paths = api_definition.paths
    definitions = api_definition.definitions
    proto_file_lines = [SYNTAX_LINE, "", f"package {package_name(title)};"]

    log.debug("Rendering messages for %d paths", len(paths))
    for path in sorted(paths):
        _add_block(
            proto_file_lines,
            render_endpoint_messages(path, paths[path], definitions),
        )

    log.debug("Rendering %d definitions", len(definitions))
    for model_name in sorted(definitions):
        _add_block(
            proto_file_lines,
            render_model(model_name, definitions[model_name], definitions),
        )

    log.debug("Rendering service")
    proto_file_lines.append("")
    proto_file_lines.append(f"service {service_name(title)} {{")
    for path in sorted(paths):
        proto_file_lines.extend(render_endpoint_rpcs(path, paths[path], definitions))
    proto_file_lines.append("}")
    return "\n".join(proto_file_lines) + "\n"


## Impl ########################################################################


def _add_block(proto_file_lines: List[str], block_lines: List[str]):
    if block_lines:
        proto_file_lines.append("")
        proto_file_lines.extend(block_lines)
