#!/usr/bin/env python3
"""MCP Analytics Server - MCP Implementation.

Serves tools over stdio to MCP clients (Claude Desktop, Cursor, Gemini CLI)
and reports every tool call to PostHog. Tools marked with a feature flag are
only exposed when the flag is enabled at startup.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from dataclasses import dataclass
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from mcp_analytics.analytics.gate import select_exposed_tools
from mcp_analytics.analytics.null import NullAnalyticsProvider
from mcp_analytics.analytics.posthog_provider import PostHogAnalyticsProvider
from mcp_analytics.analytics.protocols import AnalyticsProvider
from mcp_analytics.errors import ToolNotFoundError
from mcp_analytics.mcp.initialize import initialize_tools
from mcp_analytics.mcp.registry import ToolRegistry, tool_registry
from mcp_analytics.mcp_tool_dispatch import ToolHandler, dispatch_tool_call
from mcp_analytics.settings import Settings, get_settings
from mcp_analytics.utils.logging import set_session_id, setup_logging

logger = logging.getLogger(__name__)


@dataclass
class RegisteredTool:
    """A tool exposed by the server."""

    name: str
    input_schema: dict[str, Any]
    handler: ToolHandler
    description: str = ""
    title: str | None = None

    def to_mcp(self) -> Tool:
        return Tool(
            name=self.name,
            title=self.title,
            description=self.description or f"Execute {self.name}",
            inputSchema=self.input_schema,
        )


class ToolServer:
    """MCP server exposing a fixed set of tracked tools.

    Tools are registered once at startup; only registered tools are listed
    to clients or callable.
    """

    def __init__(self, name: str, version: str, analytics: AnalyticsProvider | None = None):
        self.analytics: AnalyticsProvider = analytics if analytics is not None else NullAnalyticsProvider()
        self.server = Server(name, version=version)
        self._tools: dict[str, RegisteredTool] = {}
        self._stopped = False

        self.server.list_tools()(self.list_tools)
        self.server.call_tool()(self.call_tool)

    def register(
        self,
        name: str,
        input_schema: dict[str, Any],
        handler: ToolHandler,
        description: str = "",
        title: str | None = None,
    ) -> None:
        """Expose a tool to clients.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")
        self._tools[name] = RegisteredTool(name, input_schema, handler, description, title)
        logger.debug("Exposed tool: %s", name)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    async def list_tools(self) -> list[Tool]:
        """List exposed tools for MCP clients."""
        logger.debug("MCP list_tools called")
        return [t.to_mcp() for t in self._tools.values()]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        """Execute an exposed tool and return its result."""
        logger.info("MCP call_tool: %s", name)
        registered = self._tools.get(name)
        if registered is None:
            raise ToolNotFoundError(name)
        return await dispatch_tool_call(name, registered.handler, arguments, self.analytics)

    async def start(self) -> None:
        """Serve MCP over stdio until the client disconnects."""
        logger.info("MCP server starting on stdio...")
        async with stdio_server() as (read_stream, write_stream):
            logger.info("MCP server ready with %d tools", len(self._tools))
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
        logger.info("MCP server shutting down")

    async def stop(self) -> None:
        """Release analytics resources. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True
        try:
            await self.analytics.close()
        except Exception:
            logger.exception("Error during server shutdown")
        logger.info("Server stopped")


def create_analytics(settings: Settings) -> AnalyticsProvider:
    """Build the analytics provider described by settings."""
    if not settings.analytics_enabled:
        logger.warning("POSTHOG_API_KEY is not set, continuing without analytics")
        return NullAnalyticsProvider()
    return PostHogAnalyticsProvider(
        settings.posthog_api_key,  # type: ignore[arg-type]
        host=settings.posthog_host,
        anonymize=settings.analytics_anonymize,
        feature_flag_timeout_seconds=settings.feature_flag_timeout_seconds,
    )


async def build_server(
    analytics: AnalyticsProvider | None,
    settings: Settings,
    registry: ToolRegistry | None = None,
) -> ToolServer:
    """Resolve feature flags and register the exposed tools.

    Returns only after every flag lookup has finished or timed out, so the
    returned server never lists a tool that gating would hide.

    Args:
        analytics: Provider used for flag lookups and call tracking
        settings: Server name, version and flag timeout
        registry: Candidate tools; defaults to the global registry with all
            built-in tools loaded
    """
    if registry is None:
        initialize_tools()
        registry = tool_registry

    exposed = await select_exposed_tools(registry, analytics, settings.feature_flag_timeout_seconds)

    server = ToolServer(settings.server_name, settings.server_version, analytics)
    for meta in exposed:
        server.register(
            meta.name,
            meta.schema or {"type": "object", "properties": {}},
            meta.handler,
            description=meta.description,
            title=meta.title,
        )
    return server


async def run_server(settings: Settings) -> None:
    """Run the MCP server until stdin closes or SIGTERM arrives."""
    analytics = create_analytics(settings)
    set_session_id(analytics.session_id)

    # SIGTERM cancels the main task so shutdown below still runs
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()
    if main_task is not None:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(signal.SIGTERM, main_task.cancel)

    server: ToolServer | None = None
    try:
        server = await build_server(analytics, settings)
        await server.start()
    except asyncio.CancelledError:
        logger.info("Received shutdown signal")
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGTERM)
        if server is not None:
            await server.stop()
        else:
            await analytics.close()


def main():
    """CLI entry point for mcp-analytics-server command."""
    import argparse

    parser = argparse.ArgumentParser(description="MCP server with PostHog tool analytics")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Log output format")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, args.log_format or settings.log_format)

    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception:
        logger.exception("Error during server startup")
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
