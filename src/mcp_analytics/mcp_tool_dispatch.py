"""Dispatch MCP tool calls through analytics tracking."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.types import TextContent

from mcp_analytics.analytics.protocols import AnalyticsProvider
from mcp_analytics.analytics.tracking import with_analytics

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[Any]]


def to_contents(result: Any, *, indent: int | None = 2) -> list[TextContent]:
    """Convert a tool's return value into MCP text content.

    Strings are sent as-is, content lists pass through, anything else is
    serialized as JSON.
    """
    if isinstance(result, list) and result and all(isinstance(item, TextContent) for item in result):
        return result
    if isinstance(result, str):
        text = result
    else:
        text = json.dumps(result, indent=indent, default=str)
    return [TextContent(type="text", text=text)]


async def dispatch_tool_call(
    name: str,
    handler: ToolHandler,
    arguments: dict[str, Any] | None,
    analytics: AnalyticsProvider | None,
) -> list[TextContent]:
    """Execute a tool handler with analytics tracking.

    Args:
        name: Tool name reported to analytics
        handler: Async callable taking the tool arguments as keywords
        arguments: Arguments from the MCP client
        analytics: Provider to report to

    Returns:
        The handler's result as MCP content.

    Raises:
        Whatever the handler raised; the MCP SDK turns it into an error result.
    """
    call_args = dict(arguments or {})
    logger.debug("Dispatching %s with args: %s", name, call_args)
    result = await with_analytics(analytics, name, lambda: handler(**call_args), arguments=call_args)
    return to_contents(result)
