"""Analytics package for the MCP server.

Provides:
- The analytics provider contract and a no-op default
- A PostHog-backed provider
- Tool execution tracking (timing, success and error events)
- Startup feature-flag gating of tools
"""

from mcp_analytics.analytics.anonymize import REDACTED, anonymize_arguments
from mcp_analytics.analytics.gate import FlagResolution, resolve_flag, select_exposed_tools
from mcp_analytics.analytics.models import ErrorReport, InvocationOutcome
from mcp_analytics.analytics.null import NullAnalyticsProvider
from mcp_analytics.analytics.protocols import AnalyticsProvider
from mcp_analytics.analytics.tracking import ToolExecutionContext, with_analytics

__all__ = [
    "REDACTED",
    "AnalyticsProvider",
    "ErrorReport",
    "FlagResolution",
    "InvocationOutcome",
    "NullAnalyticsProvider",
    "ToolExecutionContext",
    "anonymize_arguments",
    "resolve_flag",
    "select_exposed_tools",
    "with_analytics",
]
