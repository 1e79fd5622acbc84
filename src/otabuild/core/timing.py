"""Elapsed-time measurement for build steps."""

from __future__ import annotations

import time
from typing import Any


class Timer:
    """Context manager for timing operations.

    Example:
        with Timer() as timer:
            run_build()
        print(f"Build finished in {format_duration(timer.duration_seconds)}")
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> Timer:
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        """Stop timing."""
        self.end_time = time.perf_counter()

    @property
    def duration_ms(self) -> int:
        """Duration in whole milliseconds."""
        return int((self.end_time - self.start_time) * 1000)

    @property
    def duration_seconds(self) -> float:
        """Duration in seconds."""
        return self.end_time - self.start_time


def format_duration(seconds: float) -> str:
    """Format a duration as h:m:s without zero padding.

    Args:
        seconds: Duration in seconds; fractions are truncated.

    Returns:
        String such as "1:2:5" for 3725 seconds.
    """
    total = max(int(seconds), 0)
    sec = total % 60
    minutes = total // 60
    hours = minutes // 60
    minutes = minutes % 60
    return f"{hours}:{minutes}:{sec}"
