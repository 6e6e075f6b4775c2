"""Pytest fixtures for MCP analytics server tests.

Note: shared fakes live in tests/fakes/. Import from there instead of
building ad-hoc providers in each test module.
"""

import logging
import os

os.environ["ENVIRONMENT"] = "test"

import pytest
from freezegun import freeze_time
from hypothesis import Verbosity, settings

logger = logging.getLogger("tests.conftest")

# Never talk to a real PostHog project from tests
os.environ.pop("POSTHOG_API_KEY", None)
os.environ.pop("POSTHOG_HOST", None)

# =============================================================================
# Hypothesis Configuration
# =============================================================================
# Register profiles for different environments
# Usage: HYPOTHESIS_PROFILE=ci pytest ...

settings.register_profile(
    "ci",
    max_examples=500,
    deadline=None,
    suppress_health_check=[],
)

settings.register_profile(
    "dev",
    max_examples=100,
    deadline=5000,
)

settings.register_profile(
    "quick",
    max_examples=10,
    deadline=1000,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

# Load profile from environment variable, default to "dev"
_hypothesis_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_hypothesis_profile)


# =============================================================================
# Test Size Classification
# =============================================================================
def pytest_collection_modifyitems(config, items):
    """Auto-assign size markers based on test paths and enforce size tags."""
    size_markers = {"small", "medium", "large"}
    missing_size = []

    for item in items:
        path_str = str(item.fspath)
        if "/tests/integration/" in path_str:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.large)
        elif "/tests/" in path_str:
            item.add_marker(pytest.mark.small)

        if not any(item.get_closest_marker(name) for name in size_markers):
            missing_size.append(item.nodeid)

    if missing_size:
        preview = "\n".join(missing_size[:10])
        raise pytest.UsageError(
            "All tests must be marked with a size marker (small/medium/large).\n"
            f"Missing size marker for {len(missing_size)} tests. Examples:\n{preview}"
        )


# =============================================================================
# Deterministic Time Helpers
# =============================================================================
@pytest.fixture
def frozen_time():
    """Freeze time for tests that need deterministic now()."""
    with freeze_time("2026-01-01T00:00:00Z"):
        yield
