"""Core infrastructure for otabuild.

Provides:
- Structured logging
- Input validation
- Build timing
"""

from otabuild.core.logging import (
    LogEntry,
    LogLevel,
    StructuredLogger,
    configure_logging,
    create_logger,
    get_logger,
    reset_loggers,
)
from otabuild.core.timing import Timer, format_duration
from otabuild.core.validation import (
    VALID_VARIANTS,
    ValidationResult,
    is_valid_variant,
    validate_device,
    validate_intent,
    validate_variant,
)

__all__ = [
    # Logging
    "LogLevel",
    "LogEntry",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    "reset_loggers",
    "configure_logging",
    # Timing
    "Timer",
    "format_duration",
    # Validation
    "ValidationResult",
    "VALID_VARIANTS",
    "is_valid_variant",
    "validate_variant",
    "validate_device",
    "validate_intent",
]
