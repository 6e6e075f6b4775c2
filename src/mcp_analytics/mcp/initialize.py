"""Tool initialization for the MCP server.

Imports all tool modules to ensure they are registered with the tool registry.
"""

import logging

logger = logging.getLogger(__name__)


def initialize_tools() -> int:
    """Initialize all tools by importing their modules.

    Returns:
        The number of registered tools.
    """
    import mcp_analytics.tools  # noqa: F401
    from mcp_analytics.mcp.registry import tool_registry

    tool_count = len(tool_registry.list_tools())
    logger.info("Initialized %d MCP tools", tool_count)
    return tool_count
