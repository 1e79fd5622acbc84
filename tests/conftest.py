"""Fixtures shared by unit and integration tests."""

import pytest

from otabuild.core.logging import reset_loggers


@pytest.fixture(autouse=True)
def _fresh_loggers() -> None:
    """Drop cached loggers so no test writes to another test's stream."""
    reset_loggers()
    yield
    reset_loggers()
