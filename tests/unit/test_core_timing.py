"""Tests for build timing helpers."""

from unittest.mock import patch

import pytest

from otabuild.core.timing import Timer, format_duration


class TestTimer:
    """Tests for Timer context manager."""

    def test_measures_duration(self) -> None:
        """Duration is the difference between enter and exit."""
        with patch("otabuild.core.timing.time.perf_counter", side_effect=[10.0, 12.5]):
            with Timer() as timer:
                pass

        assert timer.duration_seconds == 2.5
        assert timer.duration_ms == 2500

    def test_stops_on_exception(self) -> None:
        """The end time is recorded when the block raises."""
        timer = Timer()
        with patch("otabuild.core.timing.time.perf_counter", side_effect=[1.0, 4.0]):
            with pytest.raises(RuntimeError):
                with timer:
                    raise RuntimeError("build failed")

        assert timer.duration_seconds == 3.0


class TestFormatDuration:
    """Tests for format_duration function."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0:0:0"),
            (59.9, "0:0:59"),
            (61, "0:1:1"),
            (3725, "1:2:5"),
            (90061, "25:1:1"),
        ],
    )
    def test_format(self, seconds: float, expected: str) -> None:
        """Durations print as unpadded h:m:s."""
        assert format_duration(seconds) == expected

    def test_negative_clamped(self) -> None:
        """Negative durations print as zero."""
        assert format_duration(-5) == "0:0:0"
