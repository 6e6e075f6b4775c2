"""PostHog implementation of the analytics provider contract.

Maps the contract onto the PostHog SDK:
- ``track_tool``         -> ``capture`` of a ``tool_executed`` event
- ``track_error``        -> ``capture_exception`` tagged as ``tool_error``
- ``is_feature_enabled`` -> ``feature_enabled`` keyed by the session id
- ``close``              -> ``shutdown`` (flushes the send queue)

The SDK queues events and sends them from its own consumer thread, so
``capture`` returns immediately. Flag lookups and shutdown block on the
network and are moved off the event loop with ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from posthog import Posthog

from mcp_analytics.analytics.identity import generate_session_id
from mcp_analytics.analytics.models import ERROR_EVENT, SUCCESS_EVENT
from mcp_analytics.utils.metrics import record_delivery_failure

if TYPE_CHECKING:
    from mcp_analytics.analytics.models import ErrorReport, InvocationOutcome

logger = logging.getLogger(__name__)


class PostHogAnalyticsProvider:
    """Analytics provider backed by PostHog.

    Example:
        analytics = PostHogAnalyticsProvider(api_key, host="https://eu.i.posthog.com")
        await analytics.track_tool(InvocationOutcome("checkStock", duration_ms=3))
        await analytics.close()
    """

    def __init__(
        self,
        api_key: str,
        *,
        host: str | None = None,
        anonymize: bool = True,
        client: Any = None,
        session_id: str | None = None,
        feature_flag_timeout_seconds: float | None = None,
    ):
        """Create the provider and its session id.

        Args:
            api_key: PostHog project API key
            host: PostHog host, or None for the SDK default
            anonymize: Redact tool arguments attached to error events
            client: Pre-built PostHog client (for testing)
            session_id: Fixed session id (for testing)
            feature_flag_timeout_seconds: HTTP timeout for flag requests made by the
                SDK, or None for the SDK default
        """
        if client is None:
            client_options: dict[str, Any] = {"host": host}
            if feature_flag_timeout_seconds is not None:
                client_options["feature_flags_request_timeout_seconds"] = feature_flag_timeout_seconds
            client = Posthog(api_key, **client_options)
        self.client = client
        self.anonymize = anonymize
        self.session_id = session_id or generate_session_id()
        self._closed = False

        logger.info("Analytics initialized with session ID: %s", self.session_id)

    @property
    def enabled(self) -> bool:
        return not self._closed

    async def track_tool(self, outcome: InvocationOutcome) -> None:
        try:
            self.client.capture(
                distinct_id=self.session_id,
                event=SUCCESS_EVENT,
                properties=outcome.properties(),
            )
        except Exception:
            logger.warning("Failed to track %s for %s", SUCCESS_EVENT, outcome.tool_name, exc_info=True)
            record_delivery_failure("track_tool")
            return

        logger.info("%s: %s (%dms)", outcome.tool_name, "✓" if outcome.success else "✗", outcome.duration_ms)

    async def track_error(self, error: BaseException, report: ErrorReport) -> None:
        properties = report.properties(anonymize=self.anonymize)
        properties["event"] = ERROR_EVENT
        try:
            self.client.capture_exception(
                error,
                distinct_id=self.session_id,
                properties=properties,
            )
        except Exception:
            logger.warning("Failed to track %s for %s", ERROR_EVENT, report.tool_name, exc_info=True)
            record_delivery_failure("track_error")
            return

        logger.info("ERROR in %s: %s (%dms)", report.tool_name, report.exception_message, report.duration_ms)

    async def is_feature_enabled(self, flag_name: str) -> bool | None:
        try:
            enabled = await asyncio.to_thread(self.client.feature_enabled, flag_name, self.session_id)
        except Exception:
            logger.warning("Feature flag lookup failed for '%s'", flag_name, exc_info=True)
            record_delivery_failure("feature_flag")
            return None

        if enabled is None:
            return None
        return bool(enabled)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self.client.shutdown)
            logger.info("Analytics closed")
        except Exception:
            logger.exception("Error during analytics close")
            record_delivery_failure("close")
