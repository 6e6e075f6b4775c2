"""Per-process session identity for correlating analytics events."""

import os
import time


def generate_session_id() -> str:
    """Return an id unique to this process run.

    Combines the wall-clock time in milliseconds with the process id, so two
    servers started in the same millisecond on one host still differ.
    """
    return f"mcp_{time.time_ns() // 1_000_000}_{os.getpid()}"
