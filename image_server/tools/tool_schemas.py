"""Auto-generate tool schemas from tool handler signatures.

Introspects each registered tool handler to produce JSON Schema definitions
compatible with the MCP ``tools/list`` format. Parameter names are published
under their camelCase wire names.
"""

from __future__ import annotations

import inspect
import logging
import types
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints

from image_server.tools.dispatcher import TOOL_HANDLERS, WIRE_NAMES

logger = logging.getLogger(__name__)

# Python type → JSON Schema type
_TYPE_MAP: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}

# Numeric bounds not expressible in the annotations themselves
_PARAM_BOUNDS: dict[str, dict[str, int]] = {
    "quality": {"minimum": 1, "maximum": 100},
    "width": {"minimum": 1},
    "height": {"minimum": 1},
    "max_dimension": {"minimum": 1},
}


def _python_type_to_json_schema(annotation: Any) -> dict[str, Any]:
    """Convert a Python type annotation to a JSON Schema fragment."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return {"type": "string"}

    origin = get_origin(annotation)

    # Handle Literal["a", "b"]
    if origin is Literal:
        choices = list(get_args(annotation))
        return {"type": "string", "enum": choices}

    # Handle Optional[X] / X | None
    if origin is Union or isinstance(annotation, types.UnionType):
        non_none = [a for a in get_args(annotation) if a is not type(None)]
        if len(non_none) == 1:
            return _python_type_to_json_schema(non_none[0])
        return {"type": "string"}

    # Handle list[X]
    if origin is list:
        args = get_args(annotation)
        items = _python_type_to_json_schema(args[0]) if args else {"type": "string"}
        return {"type": "array", "items": items}

    if origin is dict:
        return {"type": "object"}

    if annotation in _TYPE_MAP:
        return {"type": _TYPE_MAP[annotation]}

    return {"type": "string"}


def _extract_param_descriptions(docstring: str | None) -> dict[str, str]:
    """Extract parameter descriptions from a Google-style docstring."""
    if not docstring:
        return {}

    descriptions: dict[str, str] = {}
    in_params = False

    for line in docstring.split("\n"):
        stripped = line.strip()
        if stripped.lower() in ("args:", "parameters:", "params:"):
            in_params = True
            continue
        if in_params:
            if not stripped or (stripped.endswith(":") and " " not in stripped):
                in_params = False
                continue
            # Match "param_name: description" or "param_name (type): description"
            if ":" in stripped:
                name, desc = stripped.split(":", 1)
                param_name = name.split("(")[0].strip()
                if param_name and desc.strip():
                    descriptions[param_name] = desc.strip()

    return descriptions


def generate_tool_schema(tool_name: str) -> dict[str, Any] | None:
    """Generate an MCP-compatible tool schema for a single tool."""
    handler = TOOL_HANDLERS.get(tool_name)
    if handler is None:
        return None

    sig = inspect.signature(handler)
    hints = get_type_hints(handler)
    docstring = inspect.getdoc(handler) or f"Execute the {tool_name} tool."
    param_docs = _extract_param_descriptions(docstring)

    # Use just the first line of docstring as description
    description = docstring.split("\n")[0].strip() or f"Execute the {tool_name} tool."

    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in sig.parameters.items():
        # 'context' is injected by the dispatcher
        if param_name == "context":
            continue

        schema = _python_type_to_json_schema(hints.get(param_name, param.annotation))
        schema.update(_PARAM_BOUNDS.get(param_name, {}))

        if param_name in param_docs:
            schema["description"] = param_docs[param_name]

        wire_name = WIRE_NAMES.get(param_name, param_name)
        if param.default is not inspect.Parameter.empty:
            if param.default is not None:
                schema["default"] = param.default
        else:
            required.append(wire_name)

        properties[wire_name] = schema

    return {
        "name": tool_name,
        "description": description,
        "input_schema": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }


def generate_all_tool_schemas() -> list[dict[str, Any]]:
    """Generate schemas for all registered tools."""
    schemas = []
    for tool_name in sorted(TOOL_HANDLERS.keys()):
        schema = generate_tool_schema(tool_name)
        if schema:
            schemas.append(schema)
    return schemas
