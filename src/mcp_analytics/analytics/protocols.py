"""Protocol interface for analytics backends.

Tools and the server depend on this contract, not on a vendor SDK.
Every method is best-effort: implementations catch and log their own
delivery failures instead of raising them to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mcp_analytics.analytics.models import ErrorReport, InvocationOutcome


@runtime_checkable
class AnalyticsProvider(Protocol):
    """Analytics backend contract.

    Attributes:
        session_id: Correlation id attached to every event and flag lookup
            made by this instance. Fixed for the lifetime of the provider.
        enabled: False for providers that never deliver anything.
    """

    session_id: str

    @property
    def enabled(self) -> bool:
        """Whether this provider talks to a real backend."""
        ...

    async def track_tool(self, outcome: InvocationOutcome) -> None:
        """Report a tool invocation that completed successfully."""
        ...

    async def track_error(self, error: BaseException, report: ErrorReport) -> None:
        """Report a tool invocation that raised ``error``."""
        ...

    async def is_feature_enabled(self, flag_name: str) -> bool | None:
        """Look up a boolean feature flag for this session.

        Returns:
            True or False when the backend answered, None when the flag
            could not be evaluated (unknown flag, backend unreachable).
        """
        ...

    async def close(self) -> None:
        """Flush pending events and release resources."""
        ...
