"""
Text-level passes run over the assembled .proto content
"""

# Standard
import re

# Third Party
from google.protobuf import any_pb2, empty_pb2, wrappers_pb2

# First Party
import alog

log = alog.use_channel("POSTP")

## Globals #####################################################################

SYNTAX_LINE = 'syntax = "proto3";'

# Ordered (pattern, import file) checks. The wrapper check is a pattern since
# any of the *Value types lives in wrappers.proto.
WELL_KNOWN_IMPORTS = [
    (re.compile(re.escape(any_pb2.Any.DESCRIPTOR.full_name)), any_pb2.DESCRIPTOR.name),
    (
        re.compile(re.escape(empty_pb2.Empty.DESCRIPTOR.full_name)),
        empty_pb2.DESCRIPTOR.name,
    ),
    (re.compile("google.protobuf.*Value"), wrappers_pb2.DESCRIPTOR.name),
]

_MESSAGE_SPACING = re.compile(r"}\n*message")


## Interface ###################################################################


def clean_spacing(content: str) -> str:
    """Put exactly one blank line between a closing brace and the message
    that follows it
    """
    return _MESSAGE_SPACING.sub("}\n\nmessage", content)


def add_imports(content: str) -> str:
    """Add an import directly after the syntax line for each well-known type
    that the content references. Each check inserts at the top, so the last
    matching check ends up first.
    """
    for pattern, import_file in WELL_KNOWN_IMPORTS:
        if pattern.search(content):
            log.debug2("Adding import for %s", import_file)
            content = content.replace(
                SYNTAX_LINE, f'{SYNTAX_LINE}\n\nimport "{import_file}";', 1
            )
    return content
