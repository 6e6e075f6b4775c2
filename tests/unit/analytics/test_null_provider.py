"""Tests for analytics/null.py."""

import pytest

from mcp_analytics.analytics.models import ErrorReport, InvocationOutcome
from mcp_analytics.analytics.null import NullAnalyticsProvider
from mcp_analytics.analytics.protocols import AnalyticsProvider


def test_satisfies_protocol():
    assert isinstance(NullAnalyticsProvider(), AnalyticsProvider)


def test_is_disabled():
    assert NullAnalyticsProvider().enabled is False


def test_keeps_given_session_id():
    assert NullAnalyticsProvider("mcp_1_1").session_id == "mcp_1_1"
    assert NullAnalyticsProvider().session_id.startswith("mcp_")


@pytest.mark.asyncio
async def test_methods_are_noops():
    analytics = NullAnalyticsProvider()
    error = RuntimeError("boom")

    assert await analytics.track_tool(InvocationOutcome("t", duration_ms=1)) is None
    assert await analytics.track_error(error, ErrorReport.from_exception(error, "t", 1)) is None
    assert await analytics.is_feature_enabled("x") is None
    assert await analytics.close() is None
