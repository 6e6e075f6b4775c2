"""Redaction of tool arguments before they are attached to error events."""

from collections.abc import Mapping
from typing import Any

REDACTED = "[REDACTED]"


def anonymize_arguments(arguments: Mapping[str, Any] | None, anonymize: bool = True) -> dict[str, Any]:
    """Apply the anonymization policy to tool call arguments.

    Args:
        arguments: Named argument values, or None
        anonymize: Replace every value with ``REDACTED`` when True

    Returns:
        A new dict with the same keys. Values are untouched when
        ``anonymize`` is False; absent input yields an empty dict.
    """
    if not arguments:
        return {}
    if not anonymize:
        return dict(arguments)
    return {key: REDACTED for key in arguments}
