"""Tool registry for MCP tools.

Provides decorator-based tool registration with automatic schema generation
and optional feature-flag gating.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter, signature
from typing import Any, Union, get_args, get_origin, get_type_hints

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return (inner type, is_optional) for ``X | None`` / ``Optional[X]``."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) < len(get_args(annotation)):
            return (args[0] if len(args) == 1 else Any), True
    return annotation, False


def _type_schema(annotation: Any) -> dict[str, Any] | None:
    if annotation in _JSON_TYPES:
        return {"type": _JSON_TYPES[annotation]}
    origin = get_origin(annotation)
    if annotation is list or origin is list:
        item_args = get_args(annotation)
        item_type = _JSON_TYPES.get(item_args[0], "string") if item_args else "string"
        return {"type": "array", "items": {"type": item_type}}
    if annotation is dict or origin is dict:
        return {"type": "object"}
    return None


@dataclass
class ToolMetadata:
    """Metadata for a registered tool.

    Attributes:
        name: Tool name as seen by MCP clients (e.g., "checkStock")
        handler: The async function that implements the tool
        description: Human-readable description of what the tool does
        title: Short display title
        feature_flag: Flag that must be enabled at startup for the tool to be
            exposed; None for tools that are always exposed
        schema: JSON schema for tool input validation (auto-generated if not provided)
    """

    name: str
    handler: Callable
    description: str = ""
    title: str | None = None
    feature_flag: str | None = None
    schema: dict[str, Any] | None = None

    def __post_init__(self):
        """Auto-generate schema if not provided."""
        if self.schema is None:
            self.schema = self._infer_schema()

    @property
    def gated(self) -> bool:
        return self.feature_flag is not None

    def _infer_schema(self) -> dict[str, Any]:
        """Infer JSON schema from function signature.

        Returns:
            JSON schema dict with properties and required fields
        """
        sig = signature(self.handler)
        try:
            hints = get_type_hints(self.handler)
        except Exception:
            # Unresolvable forward references; fall back to raw annotations
            hints = {}
        properties = {}
        required = []

        for param_name, param in sig.parameters.items():
            if param.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue

            param_type, is_optional = _unwrap_optional(hints.get(param_name, param.annotation))
            schema = _type_schema(param_type)
            if schema is None:
                logger.warning(
                    "Falling back to string schema for parameter '%s' with unknown type %r in tool '%s'",
                    param_name,
                    param_type,
                    self.name,
                )
                schema = {"type": "string"}
            properties[param_name] = schema

            if param.default is Parameter.empty and not is_optional:
                required.append(param_name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }


class ToolRegistry:
    """Registry of candidate tools.

    Holds every tool the process knows about. Which of them the server
    actually exposes is decided at startup by the feature-flag gate.

    Example:
        from mcp_analytics.mcp.registry import tool, tool_registry

        @tool(name="hello", description="Say hello")
        async def hello_world(name: str):
            return f"Hello, {name}!"

        metadata = tool_registry.get("hello")
        result = await metadata.handler(name="World")
    """

    def __init__(self):
        self._tools: dict[str, ToolMetadata] = {}

    def register(self, metadata: ToolMetadata) -> None:
        """Register a tool in the registry.

        Args:
            metadata: Tool metadata including name, handler, and configuration

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if metadata.name in self._tools:
            raise ValueError(f"Tool '{metadata.name}' is already registered")

        self._tools[metadata.name] = metadata
        logger.debug("Registered tool: %s (feature_flag=%s)", metadata.name, metadata.feature_flag)

    def get(self, name: str) -> ToolMetadata | None:
        """Get tool metadata by name.

        Args:
            name: Tool name

        Returns:
            Tool metadata if found, None otherwise
        """
        return self._tools.get(name)

    def list_tools(self) -> list[ToolMetadata]:
        """List all registered tools in registration order."""
        return list(self._tools.values())

    def gated_tools(self) -> list[ToolMetadata]:
        """List tools that require a feature flag."""
        return [t for t in self._tools.values() if t.gated]

    def ungated_tools(self) -> list[ToolMetadata]:
        """List tools that are always exposed."""
        return [t for t in self._tools.values() if not t.gated]

    def clear(self) -> None:
        """Clear all registered tools (for testing)."""
        self._tools.clear()


# Global registry instance
tool_registry = ToolRegistry()


def tool(
    name: str,
    *,
    description: str = "",
    title: str | None = None,
    feature_flag: str | None = None,
    schema: dict[str, Any] | None = None,
):
    """Decorator to register a tool with the registry.

    The function's signature is inspected to auto-generate a JSON schema
    for input validation unless ``schema`` is given.

    Args:
        name: Tool name as seen by MCP clients
        description: Human-readable description of what the tool does
        title: Short display title
        feature_flag: Only expose the tool when this flag is enabled at startup
        schema: Explicit JSON input schema

    Example:
        @tool(
            name="getLowStockReport",
            description="List products running low",
            feature_flag="low-stock-report",
        )
        async def get_low_stock_report(threshold: int = 10):
            ...
    """

    def decorator(func: Callable) -> Callable:
        metadata = ToolMetadata(
            name=name,
            handler=func,
            description=description,
            title=title,
            feature_flag=feature_flag,
            schema=schema,
        )

        tool_registry.register(metadata)

        # Return the original function unchanged
        return func

    return decorator
