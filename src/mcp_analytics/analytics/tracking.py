"""Tool execution tracking context manager and helpers.

Times a tool invocation and reports exactly one outcome to the analytics
provider: an ``InvocationOutcome`` when the tool returns, an ``ErrorReport``
when it raises. The tool's own result or exception always reaches the caller
unchanged; failures inside the provider are logged and dropped.

Usage (wrapper):
    result = await with_analytics(analytics, "checkStock", lambda: check_stock("1"))

Usage (context manager):
    async with ToolExecutionContext(analytics, "checkStock", arguments={"productId": "1"}) as ctx:
        result = await check_stock("1")
        ctx.add_properties(cached=False)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from mcp_analytics.analytics.models import ErrorReport, InvocationOutcome, Scalar
from mcp_analytics.analytics.null import NullAnalyticsProvider
from mcp_analytics.analytics.protocols import AnalyticsProvider
from mcp_analytics.utils.metrics import record_delivery_failure, record_tool_call

logger = logging.getLogger(__name__)

T = TypeVar("T")


def elapsed_ms(start: float) -> int:
    """Whole milliseconds since ``start`` (a ``time.perf_counter()`` reading)."""
    return max(0, int((time.perf_counter() - start) * 1000))


class ToolExecutionContext:
    """Async context manager for tool execution tracking.

    Handles:
    - Timing with a monotonic clock
    - Prometheus metrics recording
    - One analytics report per invocation, awaited before the block exits

    Exceptions raised inside the block are never suppressed.
    """

    def __init__(
        self,
        analytics: AnalyticsProvider | None,
        tool_name: str,
        arguments: Mapping[str, Any] | None = None,
    ):
        self.analytics: AnalyticsProvider = analytics if analytics is not None else NullAnalyticsProvider()
        self.tool_name = tool_name
        self.arguments = arguments

        self._start_time: float | None = None
        self._extra: dict[str, Scalar] = {}
        self.duration_ms: int | None = None

    async def __aenter__(self) -> ToolExecutionContext:
        self._start_time = time.perf_counter()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> bool:
        self.duration_ms = elapsed_ms(self._start_time or time.perf_counter())

        if exc_val is None:
            record_tool_call(self.tool_name, "success", self.duration_ms / 1000)
            outcome = InvocationOutcome(
                tool_name=self.tool_name,
                duration_ms=self.duration_ms,
                success=True,
                extra=dict(self._extra),
            )
            await self._deliver("track_tool", self.analytics.track_tool, outcome)
        else:
            record_tool_call(self.tool_name, "error", self.duration_ms / 1000)
            await self._report_error(exc_val)

        # Don't suppress exceptions
        return False

    def add_properties(self, **properties: Scalar) -> None:
        """Attach extra scalar properties to the event for this invocation."""
        self._extra.update(properties)

    async def _report_error(self, error: BaseException) -> None:
        if not self.analytics.enabled:
            return
        # from_exception calls the error's __str__, which may itself raise
        try:
            report = ErrorReport.from_exception(
                error,
                tool_name=self.tool_name,
                duration_ms=self.duration_ms or 0,
                arguments=self.arguments,
                extra=self._extra,
            )
        except Exception:
            logger.warning("Could not build error report for %s", self.tool_name, exc_info=True)
            record_delivery_failure("track_error")
            return
        await self._deliver("track_error", self.analytics.track_error, error, report)

    async def _deliver(self, operation: str, method: Callable[..., Awaitable[None]], *args: Any) -> None:
        if not self.analytics.enabled:
            return
        try:
            await method(*args)
        except Exception:
            logger.warning("Analytics %s failed for %s", operation, self.tool_name, exc_info=True)
            record_delivery_failure(operation)


async def with_analytics(
    analytics: AnalyticsProvider | None,
    tool_name: str,
    handler: Callable[[], Awaitable[T]],
    arguments: Mapping[str, Any] | None = None,
) -> T:
    """Run ``handler`` once, reporting its timing and outcome.

    Args:
        analytics: Provider to report to; None disables reporting
        tool_name: Name reported as ``tool_name``
        handler: Zero-argument callable returning the awaitable to run
        arguments: Call arguments attached (anonymized) to error reports

    Returns:
        Whatever ``handler`` returned, unchanged.

    Raises:
        Whatever ``handler`` raised, unchanged, after the error is reported.
    """
    async with ToolExecutionContext(analytics, tool_name, arguments):
        return await handler()
