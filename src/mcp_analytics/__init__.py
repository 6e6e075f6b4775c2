"""MCP tool server with pluggable analytics and feature-flag gating."""

__version__ = "1.0.0"
