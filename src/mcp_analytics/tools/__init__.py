"""MCP tools. Importing this package registers every tool."""

from mcp_analytics.tools import inventory  # noqa: F401
