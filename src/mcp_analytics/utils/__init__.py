"""Utility functions for the MCP analytics server."""

from .logging import get_session_id, set_session_id, setup_logging

__all__ = [
    "get_session_id",
    "set_session_id",
    "setup_logging",
]
