"""Structured logging for otabuild.

Provides:
- JSON-formatted log output
- Context-aware logging
- Log level management
- Plan, build, signing, rotation and manifest event logging
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


@dataclass
class LogEntry:
    """A structured log entry."""

    timestamp: str
    level: str
    message: str
    component: str
    event_type: str | None = None
    device: str | None = None
    duration_ms: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Convert to JSON string."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if "extra" in data and not data["extra"]:
            del data["extra"]
        return json.dumps(data, default=str)

    def to_human_readable(self) -> str:
        """Convert to human-readable format."""
        parts = [f"[{self.timestamp}]", f"[{self.level}]", f"[{self.component}]"]
        if self.event_type:
            parts.append(f"[{self.event_type}]")
        parts.append(self.message)
        return " ".join(parts)


class StructuredLogger:
    """Structured logger for the system.

    Logs events in JSON format with consistent structure.
    Supports:
    - Plan resolution
    - Target builds and signing
    - History rotation
    - Manifest output
    """

    def __init__(
        self,
        component: str,
        level: LogLevel = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ) -> None:
        """Initialize logger.

        Args:
            component: Component name (planner, locator, history, manifest, launcher)
            level: Minimum log level
            output: Output stream (defaults to stderr)
            json_format: Whether to use JSON format
        """
        self.component = component
        self.level = level
        self.output = output or sys.stderr
        self.json_format = json_format
        self._context: dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context for all log entries."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        """Clear persistent context."""
        self._context.clear()

    def with_context(self, **kwargs: Any) -> StructuredLogger:
        """Create a new logger with additional context.

        Args:
            **kwargs: Context key-value pairs

        Returns:
            New logger instance with merged context
        """
        new_logger = StructuredLogger(
            component=self.component,
            level=self.level,
            output=self.output,
            json_format=self.json_format,
        )
        new_logger._context = {**self._context, **kwargs}
        return new_logger

    def _log(
        self,
        level: LogLevel,
        message: str,
        event_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        if level.value < self.level.value:
            return

        duration_ms = kwargs.pop("duration_ms", None)

        extra = {**self._context, **kwargs}

        entry = LogEntry(
            timestamp=datetime.now(UTC).isoformat(),
            level=level.name,
            message=message,
            component=self.component,
            event_type=event_type,
            device=extra.pop("device", None),
            duration_ms=duration_ms,
            extra=extra,
        )

        if self.json_format:
            self.output.write(entry.to_json() + "\n")
        else:
            self.output.write(entry.to_human_readable() + "\n")
        self.output.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, **kwargs)

    # Specialized logging methods

    def log_plan_resolved(
        self,
        targets: list[str],
        incremental: bool,
        previous_target_files: str | None = None,
    ) -> None:
        """Log the resolved build plan.

        Args:
            targets: Targets in invocation order
            incremental: Whether an incremental base was found
            previous_target_files: Path of the incremental base, if any
        """
        self._log(
            LogLevel.INFO,
            f"Build plan resolved: {' -> '.join(targets)}",
            event_type="plan_resolved",
            targets=targets,
            incremental=incremental,
            previous_target_files=previous_target_files,
        )

    def log_target_build(
        self,
        target: str,
        success: bool,
        duration_ms: int,
        exit_code: int = 0,
    ) -> None:
        """Log the outcome of a single target build.

        Args:
            target: Build target name
            success: Whether the builder reported success
            duration_ms: Build duration in milliseconds
            exit_code: Exit code reported by the builder
        """
        self._log(
            LogLevel.INFO if success else LogLevel.ERROR,
            f"Target {target}: {'built' if success else 'failed'}",
            event_type="target_build",
            target=target,
            success=success,
            exit_code=exit_code,
            duration_ms=duration_ms,
        )

    def log_signing(
        self,
        target: str,
        success: bool,
        signed_ota: str | None = None,
    ) -> None:
        """Log a signing pass that followed a target build."""
        self._log(
            LogLevel.INFO if success else LogLevel.ERROR,
            f"Signing after {target}: {'done' if success else 'failed'}",
            event_type="signing",
            target=target,
            success=success,
            signed_ota=signed_ota,
        )

    def log_rotation(
        self,
        history_dir: str,
        copied_to: str | None,
        wiped: bool,
    ) -> None:
        """Log a history rotation.

        Args:
            history_dir: History directory
            copied_to: Destination path, or None if nothing was copied
            wiped: Whether the directory was wiped first
        """
        self._log(
            LogLevel.INFO if copied_to else LogLevel.WARNING,
            "Target files copied to history" if copied_to else "No new target files to copy",
            event_type="history_rotation",
            history_dir=history_dir,
            copied_to=copied_to,
            wiped=wiped,
        )

    def log_manifest_written(
        self,
        kind: str,
        path: str,
        file_name: str,
    ) -> None:
        """Log a written release manifest."""
        self._log(
            LogLevel.INFO,
            f"Wrote {kind} manifest for {file_name}",
            event_type="manifest_written",
            kind=kind,
            path=path,
            file_name=file_name,
        )

    def log_launch_start(self, device: str, variant: str) -> None:
        """Log the start of a launch."""
        self._log(
            LogLevel.INFO,
            f"Launch started: {device}-{variant}",
            event_type="launch_start",
            device=device,
            variant=variant,
        )

    def log_launch_end(
        self,
        device: str,
        success: bool,
        duration_ms: int | None = None,
    ) -> None:
        """Log launch completion.

        Args:
            device: Device codename
            success: Whether every step succeeded
            duration_ms: Total duration in milliseconds
        """
        self._log(
            LogLevel.INFO if success else LogLevel.ERROR,
            f"Launch finished: {device} -> {'success' if success else 'failure'}",
            event_type="launch_end",
            device=device,
            success=success,
            duration_ms=duration_ms,
        )


def create_logger(
    component: str,
    level: LogLevel = LogLevel.INFO,
    json_format: bool = True,
    output: TextIO | None = None,
) -> StructuredLogger:
    """Create a structured logger.

    Args:
        component: Component name
        level: Minimum log level
        json_format: Whether to use JSON format
        output: Output stream (defaults to stderr)

    Returns:
        Configured logger
    """
    return StructuredLogger(
        component=component,
        level=level,
        json_format=json_format,
        output=output,
    )


# Global loggers for each component
_loggers: dict[str, StructuredLogger] = {}

# Settings applied to loggers created after configure_logging()
_defaults: dict[str, Any] = {}


def get_logger(component: str) -> StructuredLogger:
    """Get or create a logger for a component.

    Args:
        component: Component name

    Returns:
        Logger instance
    """
    if component not in _loggers:
        _loggers[component] = create_logger(component, **_defaults)
    return _loggers[component]


def reset_loggers() -> None:
    """Reset all global loggers. Useful for testing."""
    _loggers.clear()
    _defaults.clear()


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    json_format: bool = True,
    output: TextIO | None = None,
) -> None:
    """Configure global logging settings.

    Applies to existing loggers and to loggers created afterwards.

    Args:
        level: Minimum log level for all loggers
        json_format: Whether to use JSON format
        output: Output stream
    """
    _defaults["level"] = level
    _defaults["json_format"] = json_format
    if output is not None:
        _defaults["output"] = output
    for logger in _loggers.values():
        logger.level = level
        logger.json_format = json_format
        if output is not None:
            logger.output = output
