"""Prometheus metrics for the MCP analytics server.

Provides process-local counters and histograms for tool execution and for
the health of the analytics pipeline itself. Tool metrics are recorded for
every invocation, whether or not an analytics backend is configured.

Usage:
    from mcp_analytics.utils.metrics import record_tool_call
    record_tool_call("checkStock", status="success", duration_seconds=0.01)
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# MCP Tool Execution Metrics
# =============================================================================

TOOL_CALLS = Counter(
    "mcp_tool_calls_total",
    "Total MCP tool calls",
    ["tool_name", "status"],
)

TOOL_LATENCY = Histogram(
    "mcp_tool_latency_seconds",
    "Tool execution latency in seconds",
    ["tool_name"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# =============================================================================
# Analytics Pipeline Metrics
# =============================================================================

ANALYTICS_DELIVERY_FAILURES = Counter(
    "mcp_analytics_delivery_failures_total",
    "Analytics calls that failed and were dropped",
    ["operation"],  # track_tool, track_error, feature_flag, close
)

FEATURE_FLAG_RESOLUTIONS = Counter(
    "mcp_feature_flag_resolutions_total",
    "Startup feature flag lookups by outcome",
    ["flag_name", "outcome"],  # enabled, disabled, unresolved
)


def record_tool_call(tool_name: str, status: str, duration_seconds: float) -> None:
    """Record an MCP tool call with status and timing.

    Args:
        tool_name: Name of the MCP tool (e.g., "checkStock")
        status: "success" or "error"
        duration_seconds: How long the tool execution took
    """
    TOOL_CALLS.labels(tool_name=tool_name, status=status).inc()
    TOOL_LATENCY.labels(tool_name=tool_name).observe(duration_seconds)


def record_delivery_failure(operation: str) -> None:
    """Record an analytics call that was dropped.

    Args:
        operation: The provider operation that failed
    """
    ANALYTICS_DELIVERY_FAILURES.labels(operation=operation).inc()


def record_flag_resolution(flag_name: str, outcome: str) -> None:
    """Record the outcome of a startup feature flag lookup."""
    FEATURE_FLAG_RESOLUTIONS.labels(flag_name=flag_name, outcome=outcome).inc()
