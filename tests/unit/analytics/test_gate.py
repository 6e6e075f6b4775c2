"""Tests for analytics/gate.py."""

import asyncio
import logging
import time
from unittest.mock import patch

import pytest

from mcp_analytics.analytics.gate import FlagResolution, resolve_flag, resolve_flags, select_exposed_tools
from mcp_analytics.analytics.null import NullAnalyticsProvider
from mcp_analytics.mcp.registry import ToolMetadata, ToolRegistry
from tests.fakes.fake_analytics import FakeAnalyticsProvider


async def _noop():
    return None


@pytest.fixture
def registry():
    reg = ToolRegistry()
    reg.register(ToolMetadata(name="getInventory", handler=_noop))
    reg.register(ToolMetadata(name="getLowStockReport", handler=_noop, feature_flag="low-stock-report"))
    reg.register(ToolMetadata(name="restock", handler=_noop, feature_flag="restock"))
    yield reg
    reg.clear()


class TestFlagResolution:
    def test_only_enabled_is_enabled(self):
        assert FlagResolution.ENABLED.enabled is True
        assert FlagResolution.DISABLED.enabled is False
        assert FlagResolution.UNRESOLVED.enabled is False


class TestResolveFlag:
    @pytest.mark.asyncio
    async def test_enabled(self):
        analytics = FakeAnalyticsProvider(flags={"x": True})
        assert await resolve_flag(analytics, "x") is FlagResolution.ENABLED
        assert analytics.flag_queries == ["x"]

    @pytest.mark.asyncio
    async def test_disabled(self):
        analytics = FakeAnalyticsProvider(flags={"x": False})
        assert await resolve_flag(analytics, "x") is FlagResolution.DISABLED

    @pytest.mark.asyncio
    async def test_unknown_flag_is_unresolved(self):
        analytics = FakeAnalyticsProvider()
        assert await resolve_flag(analytics, "x") is FlagResolution.UNRESOLVED

    @pytest.mark.asyncio
    async def test_no_backend_is_unresolved(self):
        assert await resolve_flag(None, "x") is FlagResolution.UNRESOLVED

    @pytest.mark.asyncio
    async def test_null_provider_is_not_queried(self):
        analytics = NullAnalyticsProvider()
        with patch.object(analytics, "is_feature_enabled") as is_enabled:
            assert await resolve_flag(analytics, "x") is FlagResolution.UNRESOLVED
        is_enabled.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_is_unresolved(self):
        analytics = FakeAnalyticsProvider(flags={"x": True}, fail_flags=True)
        assert await resolve_flag(analytics, "x") is FlagResolution.UNRESOLVED

    @pytest.mark.asyncio
    async def test_timeout_is_unresolved(self):
        analytics = FakeAnalyticsProvider(flags={"x": True}, flag_delay=5.0)
        start = time.perf_counter()
        assert await resolve_flag(analytics, "x", timeout_seconds=0.05) is FlagResolution.UNRESOLVED
        assert time.perf_counter() - start < 1.0

    @pytest.mark.asyncio
    async def test_unresolved_logged_distinctly(self, caplog):
        caplog.set_level(logging.INFO, logger="mcp_analytics.analytics.gate")
        await resolve_flag(FakeAnalyticsProvider(flags={"off": False}), "off")
        await resolve_flag(FakeAnalyticsProvider(flag_delay=5.0), "slow", timeout_seconds=0.01)

        disabled = [r for r in caplog.records if "'off'" in r.getMessage()]
        unresolved = [r for r in caplog.records if "'slow'" in r.getMessage()]
        assert disabled[0].levelno == logging.INFO
        assert "disabled" in disabled[0].getMessage()
        assert unresolved[0].levelno == logging.WARNING
        assert "timed out" in unresolved[0].getMessage()

    @pytest.mark.asyncio
    async def test_records_metric(self):
        with patch("mcp_analytics.analytics.gate.record_flag_resolution") as record:
            await resolve_flag(FakeAnalyticsProvider(flags={"x": True}), "x")
        record.assert_called_once_with("x", "enabled")


class TestResolveFlags:
    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self):
        analytics = FakeAnalyticsProvider(flags={"a": True, "b": False, "c": True}, flag_delay=0.1)
        start = time.perf_counter()
        result = await resolve_flags(analytics, {"a", "b", "c"})
        elapsed = time.perf_counter() - start

        assert result == {
            "a": FlagResolution.ENABLED,
            "b": FlagResolution.DISABLED,
            "c": FlagResolution.ENABLED,
        }
        assert elapsed < 0.25


class TestSelectExposedTools:
    @pytest.mark.asyncio
    async def test_enabled_flag_exposes_tool(self, registry):
        analytics = FakeAnalyticsProvider(flags={"low-stock-report": True, "restock": False})
        exposed = await select_exposed_tools(registry, analytics)
        assert [t.name for t in exposed] == ["getInventory", "getLowStockReport"]

    @pytest.mark.asyncio
    async def test_disabled_flag_hides_tool(self, registry):
        analytics = FakeAnalyticsProvider(flags={"low-stock-report": False, "restock": False})
        exposed = await select_exposed_tools(registry, analytics)
        assert [t.name for t in exposed] == ["getInventory"]

    @pytest.mark.asyncio
    async def test_no_backend_hides_gated_tools(self, registry):
        exposed = await select_exposed_tools(registry, None)
        assert [t.name for t in exposed] == ["getInventory"]

    @pytest.mark.asyncio
    async def test_timeout_hides_tool_without_raising(self, registry):
        analytics = FakeAnalyticsProvider(flags={"low-stock-report": True, "restock": True}, flag_delay=5.0)
        exposed = await select_exposed_tools(registry, analytics, timeout_seconds=0.05)
        assert [t.name for t in exposed] == ["getInventory"]

    @pytest.mark.asyncio
    async def test_ungated_tools_never_query_flags(self):
        reg = ToolRegistry()
        reg.register(ToolMetadata(name="getInventory", handler=_noop))
        analytics = FakeAnalyticsProvider()

        exposed = await select_exposed_tools(reg, analytics)

        assert [t.name for t in exposed] == ["getInventory"]
        assert analytics.flag_queries == []

    @pytest.mark.asyncio
    async def test_shared_flag_queried_once(self):
        reg = ToolRegistry()
        reg.register(ToolMetadata(name="a", handler=_noop, feature_flag="beta"))
        reg.register(ToolMetadata(name="b", handler=_noop, feature_flag="beta"))
        analytics = FakeAnalyticsProvider(flags={"beta": True})

        exposed = await select_exposed_tools(reg, analytics)

        assert [t.name for t in exposed] == ["a", "b"]
        assert analytics.flag_queries == ["beta"]

    @pytest.mark.asyncio
    async def test_decision_is_not_reevaluated(self, registry):
        analytics = FakeAnalyticsProvider(flags={"low-stock-report": True})
        exposed = await select_exposed_tools(registry, analytics)

        analytics.flags["low-stock-report"] = False
        await asyncio.sleep(0)

        assert "getLowStockReport" in [t.name for t in exposed]
