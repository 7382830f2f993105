# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Tool registry: the fixed set of tools the server advertises and how each one
maps onto the catalog client.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from shopify_mcp.catalog import CatalogClient, ProductRecord
from shopify_mcp.errors import InvalidArguments, UnknownTool

ToolHandler = Callable[[CatalogClient, dict[str, Any]], Awaitable[list[ProductRecord]]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler

    def to_descriptor(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


async def _search_products(catalog: CatalogClient, arguments: dict[str, Any]) -> list[ProductRecord]:
    return await catalog.search_products(arguments["keyword"])


async def _recommend_products(catalog: CatalogClient, arguments: dict[str, Any]) -> list[ProductRecord]:
    return await catalog.recommend_products()


# Declaration order is the order tools/list reports them in
TOOL_DEFINITIONS = (
    ToolDefinition(
        name="search_products",
        description="Search Shopify products by keyword",
        input_schema={
            "type": "object",
            "properties": {"keyword": {"type": "string", "minLength": 1, "description": "Search term matched against product titles"}},
            "required": ["keyword"],
        },
        handler=_search_products,
    ),
    ToolDefinition(
        name="recommend_products",
        description="Recommend top-selling Shopify products",
        input_schema={"type": "object", "properties": {}},
        handler=_recommend_products,
    ),
)

TOOL_REGISTRY: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}

_TYPE_CHECKS = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "object": dict,
    "array": list,
}


def list_tools() -> list[ToolDefinition]:
    """Return all registered tool definitions in declaration order."""
    return list(TOOL_DEFINITIONS)


def get_tool(name: str) -> ToolDefinition:
    """Look up a tool definition by name."""
    try:
        return TOOL_REGISTRY[name]
    except KeyError:
        raise UnknownTool(name) from None


def validate_arguments(tool: ToolDefinition, arguments: Any) -> dict[str, Any]:
    """Check arguments against the tool's input schema and return them as a dict.

    Missing arguments are treated as an empty object. Arguments the schema does
    not declare are passed through unchecked.

    Raises:
        InvalidArguments: On a missing required field or a type mismatch
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidArguments(f"Arguments for tool '{tool.name}' must be an object")

    schema = tool.input_schema
    properties = schema.get("properties") or {}
    for field_name in schema.get("required") or []:
        if field_name not in arguments:
            raise InvalidArguments(f"Missing required argument '{field_name}' for tool '{tool.name}'")

    for name, value in arguments.items():
        if name in properties:
            _validate_value(tool.name, name, value, properties[name])
    return arguments


def _validate_value(tool_name: str, name: str, value: Any, schema: dict[str, Any]) -> None:
    expected_type = schema.get("type")
    py_type = _TYPE_CHECKS.get(expected_type)
    if py_type is None:
        return

    # bool is an int subclass; don't let True pass as a number
    if isinstance(value, bool) and expected_type in ("integer", "number"):
        raise InvalidArguments(f"Argument '{name}' for tool '{tool_name}' must be of type {expected_type}")
    if not isinstance(value, py_type):
        raise InvalidArguments(f"Argument '{name}' for tool '{tool_name}' must be of type {expected_type}")

    min_length = schema.get("minLength")
    if expected_type == "string" and min_length is not None and len(value) < min_length:
        raise InvalidArguments(f"Argument '{name}' for tool '{tool_name}' must not be empty")
