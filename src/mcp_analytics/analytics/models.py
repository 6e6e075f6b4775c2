"""Event payloads handed to analytics providers."""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mcp_analytics.analytics.anonymize import anonymize_arguments

# Values allowed in the open extension slot of an event
Scalar = str | int | float | bool

SUCCESS_EVENT = "tool_executed"
ERROR_EVENT = "tool_error"


@dataclass(frozen=True)
class InvocationOutcome:
    """A completed tool invocation.

    Attributes:
        tool_name: Name of the tool that ran
        duration_ms: Wall-clock duration in whole milliseconds
        success: Whether the tool returned normally
        extra: Additional scalar properties attached to the event
    """

    tool_name: str
    duration_ms: int
    success: bool = True
    extra: Mapping[str, Scalar] = field(default_factory=dict)

    def properties(self) -> dict[str, Any]:
        """Flatten into event properties. Core fields win over ``extra``."""
        return {
            **self.extra,
            "tool_name": self.tool_name,
            "duration_ms": self.duration_ms,
            "success": self.success,
        }


@dataclass(frozen=True)
class ErrorReport:
    """A tool invocation that raised.

    ``arguments`` holds the raw call arguments; providers apply the
    anonymization policy when building event properties.
    """

    tool_name: str
    duration_ms: int
    exception_type: str
    exception_message: str
    exception_stack: str | None = None
    arguments: Mapping[str, Any] | None = None
    extra: Mapping[str, Scalar] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        tool_name: str,
        duration_ms: int,
        arguments: Mapping[str, Any] | None = None,
        extra: Mapping[str, Scalar] | None = None,
    ) -> ErrorReport:
        """Build a report from a raised exception."""
        stack = None
        if error.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return cls(
            tool_name=tool_name,
            duration_ms=duration_ms,
            exception_type=type(error).__name__,
            exception_message=str(error),
            exception_stack=stack,
            arguments=arguments,
            extra=dict(extra or {}),
        )

    def properties(self, anonymize: bool = True) -> dict[str, Any]:
        """Flatten into event properties.

        Args:
            anonymize: Redact argument values before they leave the process

        Returns:
            Properties dict; ``exception_stack`` and ``arguments`` are only
            present when known.
        """
        props: dict[str, Any] = {
            **self.extra,
            "tool_name": self.tool_name,
            "duration_ms": self.duration_ms,
            "exception_type": self.exception_type,
            "exception_message": self.exception_message,
        }
        if self.exception_stack is not None:
            props["exception_stack"] = self.exception_stack
        if self.arguments is not None:
            props["arguments"] = anonymize_arguments(self.arguments, anonymize)
        return props
