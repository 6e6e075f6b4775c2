"""No-op analytics provider used when no backend is configured."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp_analytics.analytics.identity import generate_session_id

if TYPE_CHECKING:
    from mcp_analytics.analytics.models import ErrorReport, InvocationOutcome


class NullAnalyticsProvider:
    """Analytics provider that records nothing.

    Satisfies ``AnalyticsProvider`` so call sites never branch on whether
    analytics is configured. Flags are never resolved.
    """

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id or generate_session_id()

    @property
    def enabled(self) -> bool:
        return False

    async def track_tool(self, outcome: InvocationOutcome) -> None:
        return None

    async def track_error(self, error: BaseException, report: ErrorReport) -> None:
        return None

    async def is_feature_enabled(self, flag_name: str) -> bool | None:
        return None

    async def close(self) -> None:
        return None
