"""
This library holds utilities for converting OpenAPI / Swagger API definitions
to Protobuf.

References:
* https://spec.openapis.org/oas/latest.html
* https://developers.google.com/protocol-buffers

Example:

```
import json
import openapi_to_proto

def write_petstore_proto(openapi_filename: str, proto_filename: str):
    \"\"\"Convert a JSON OpenAPI document into a .proto file\"\"\"
    with open(openapi_filename, "r") as handle:
        api = openapi_to_proto.api_definition_from_dict(json.load(handle))
    with open(proto_filename, "wb") as handle:
        handle.write(openapi_to_proto.generate_proto(api))
```
"""

# Local
from .api_definition import (
    APIDefinition,
    Endpoint,
    Info,
    Model,
    Operation,
    Parameter,
    Property,
    Schema,
    api_definition_from_dict,
)
from .api_to_proto import RenderFailure, generate_proto
