"""
Logging setup for the profile history tools.

Every component logs through loguru. ``configure_logging`` installs the sinks
once per process and ``get_logger`` hands out the shared logger bound with the
component name, which the console format prints in place of the module path.
"""

import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_LOG_FILE = Path("logs") / "profile-history.log"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[component]}:{function}:{line} | {message} | {extra}"
)


class LoggingManager:
    """Installs the loguru sinks and hands out component loggers."""

    def __init__(self, service_name: str = "profile-history"):
        """
        Initialize logging manager.

        Args:
            service_name: Default component name for records logged without one
        """
        self.service_name = service_name
        self._configured = False

    @property
    def configured(self) -> bool:
        """Whether sinks have already been installed."""
        return self._configured

    def configure_logging(
        self,
        level: str = "INFO",
        enable_file_logging: bool = False,
        log_file_path: str | Path | None = None,
        structured_format: bool = False,
    ) -> None:
        """
        Replace loguru's default handler with the toolkit's sinks.

        Later calls are ignored so that library code cannot reconfigure a
        running CLI.

        Args:
            level: Minimum level (DEBUG, INFO, WARNING, ERROR)
            enable_file_logging: Also write to a rotating log file
            log_file_path: Log file, ``logs/profile-history.log`` by default
            structured_format: Write the log file as JSON lines
        """
        if self._configured:
            return

        logger.remove()
        logger.configure(
            extra={"component": self.service_name, "service_name": self.service_name}
        )

        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

        log_file = None
        if enable_file_logging:
            log_file = Path(log_file_path or DEFAULT_LOG_FILE)
            log_file.parent.mkdir(parents=True, exist_ok=True)

            logger.add(
                str(log_file),
                format=FILE_FORMAT,
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="gz",
                backtrace=True,
                diagnose=False,
                serialize=structured_format,
            )

        self._configured = True
        logger.debug(
            "Logging configured",
            level=level,
            log_file=str(log_file) if log_file else None,
            structured=structured_format,
        )

    def get_logger(self, name: str) -> Any:
        """Shared logger bound with ``name`` as its component."""
        return logger.bind(component=name)

    def log_operation_start(self, operation: str, **kwargs) -> None:
        """Log the start of an operation with context."""
        logger.info("Operation started: {operation}", operation=operation, **kwargs)

    def log_operation_complete(self, operation: str, duration: float, **kwargs) -> None:
        """Log the completion of an operation with its duration."""
        logger.info(
            "Operation completed: {operation}",
            operation=operation,
            duration_seconds=round(duration, 3),
            **kwargs,
        )

    def log_operation_error(self, operation: str, error: Exception, **kwargs) -> None:
        """Log an operation error with context."""
        logger.error(
            "Operation failed: {operation}",
            operation=operation,
            error_type=type(error).__name__,
            error_message=str(error),
            **kwargs,
        )

    def log_download(self, url: str, status_code: int, duration: float) -> None:
        """Log a data download; error statuses are warnings."""
        level = "WARNING" if status_code >= 400 else "DEBUG"
        logger.log(
            level,
            "Download {url} returned {status_code}",
            url=url,
            status_code=status_code,
            duration_seconds=round(duration, 3),
        )

    def log_release_summary(self, release: str, **counts: int) -> None:
        """Log the per-release profile counts once a release is folded in."""
        logger.info("Release {release} processed", release=release, **counts)


# Global logging manager instance
_logging_manager: LoggingManager | None = None


def get_logging_manager() -> LoggingManager:
    """Get or create the global logging manager instance."""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager()
    return _logging_manager


def configure_logging(
    level: str | None = None,
    structured: bool = False,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure logging from arguments, falling back to the environment.

    Args:
        level: Logging level; ``LOG_LEVEL`` or INFO when not given
        structured: Write the log file as JSON lines
        enable_file_logging: Enable the log file; ``ENABLE_FILE_LOGGING``
            (default false) when not given
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    if enable_file_logging is None:
        enable_file_logging = (
            os.getenv("ENABLE_FILE_LOGGING", "false").lower() == "true"
        )

    get_logging_manager().configure_logging(
        level=level,
        structured_format=structured,
        enable_file_logging=enable_file_logging,
        log_file_path=os.getenv("LOG_FILE") or None,
    )


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given component.

    Args:
        name: Component name (usually __name__)

    Returns:
        loguru logger bound with the component name
    """
    return get_logging_manager().get_logger(name)
