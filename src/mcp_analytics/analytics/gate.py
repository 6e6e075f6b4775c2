"""Startup feature-flag gating for MCP tools.

Tools registered with a ``feature_flag`` are only exposed when the flag
resolves to enabled. Resolution happens once, before the server starts
accepting calls; changing the flag afterwards needs a restart.

Every lookup ends in one of three outcomes:
- ENABLED: the backend answered True
- DISABLED: the backend answered False (intentionally off)
- UNRESOLVED: no backend, lookup failed, or it timed out

Only ENABLED exposes the tool. UNRESOLVED is logged at WARNING so operators
can tell a failed check from a flag that is switched off.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from mcp_analytics.utils.metrics import record_flag_resolution

if TYPE_CHECKING:
    from mcp_analytics.analytics.protocols import AnalyticsProvider
    from mcp_analytics.mcp.registry import ToolMetadata, ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_FLAG_TIMEOUT_SECONDS = 3.0


class FlagResolution(str, Enum):
    """Outcome of a single feature flag lookup."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    UNRESOLVED = "unresolved"

    @property
    def enabled(self) -> bool:
        return self is FlagResolution.ENABLED


async def resolve_flag(
    analytics: AnalyticsProvider | None,
    flag_name: str,
    timeout_seconds: float = DEFAULT_FLAG_TIMEOUT_SECONDS,
) -> FlagResolution:
    """Resolve a feature flag, never raising and never waiting past the timeout.

    Args:
        analytics: Provider to ask; None or a disabled provider resolves to UNRESOLVED
        flag_name: Name of the boolean flag
        timeout_seconds: Upper bound on the lookup

    Returns:
        The resolution, also recorded as a metric.
    """
    if analytics is None or not analytics.enabled:
        logger.warning("Feature flag '%s' unresolved: analytics is disabled", flag_name)
        resolution = FlagResolution.UNRESOLVED
    else:
        try:
            value = await asyncio.wait_for(analytics.is_feature_enabled(flag_name), timeout=timeout_seconds)
        except TimeoutError:
            logger.warning("Feature flag '%s' unresolved: lookup timed out after %.1fs", flag_name, timeout_seconds)
            resolution = FlagResolution.UNRESOLVED
        except Exception:
            logger.warning("Feature flag '%s' unresolved: lookup failed", flag_name, exc_info=True)
            resolution = FlagResolution.UNRESOLVED
        else:
            if value is None:
                logger.warning("Feature flag '%s' unresolved: backend returned no value", flag_name)
                resolution = FlagResolution.UNRESOLVED
            elif value:
                logger.info("Feature flag '%s' is enabled", flag_name)
                resolution = FlagResolution.ENABLED
            else:
                logger.info("Feature flag '%s' is disabled", flag_name)
                resolution = FlagResolution.DISABLED

    record_flag_resolution(flag_name, resolution.value)
    return resolution


async def resolve_flags(
    analytics: AnalyticsProvider | None,
    flag_names: set[str],
    timeout_seconds: float = DEFAULT_FLAG_TIMEOUT_SECONDS,
) -> dict[str, FlagResolution]:
    """Resolve several flags concurrently, one lookup per distinct name."""
    names = sorted(flag_names)
    resolutions = await asyncio.gather(*(resolve_flag(analytics, name, timeout_seconds) for name in names))
    return dict(zip(names, resolutions, strict=True))


async def select_exposed_tools(
    registry: ToolRegistry,
    analytics: AnalyticsProvider | None,
    timeout_seconds: float = DEFAULT_FLAG_TIMEOUT_SECONDS,
) -> list[ToolMetadata]:
    """Decide which registered tools the server exposes.

    Ungated tools are always exposed. Gated tools are exposed only when
    their flag resolves to ENABLED.

    Args:
        registry: Candidate tools
        analytics: Provider used for flag lookups
        timeout_seconds: Upper bound on each flag lookup

    Returns:
        Exposed tools, in registry order.
    """
    gated = registry.gated_tools()
    flags = {t.feature_flag for t in gated if t.feature_flag}
    resolutions = await resolve_flags(analytics, flags, timeout_seconds) if flags else {}

    exposed = []
    for meta in registry.list_tools():
        if meta.feature_flag is None or resolutions[meta.feature_flag].enabled:
            exposed.append(meta)
        else:
            logger.info(
                "Hiding tool %s (flag '%s' %s)",
                meta.name,
                meta.feature_flag,
                resolutions[meta.feature_flag].value,
            )

    logger.info("Exposing %d of %d tools", len(exposed), len(registry.list_tools()))
    return exposed
