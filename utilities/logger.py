"""
Logging system using structlog.
Provides structured logging with different output formats and levels.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[Union[str, Path]] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Enable debug mode for call-site information
    """

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Configure structlog processors
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Set up file logging if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger().addHandler(file_handler)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


class CheckLogger:
    """
    Specialized logger for check runs with context management.
    """

    def __init__(self, name: str = "checker"):
        self.logger = structlog.get_logger(name)
        self.context = {}

    def bind_context(self, **kwargs) -> 'CheckLogger':
        """
        Bind context variables to the logger.

        Args:
            **kwargs: Context variables to bind

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def clear_context(self) -> 'CheckLogger':
        """Clear all context variables."""
        self.context.clear()
        return self

    def log_check_start(self, page_url: str) -> None:
        """Log check run start."""
        self.logger.info("Page check started", page_url=page_url, **self.context)

    def log_state_transition(self, state: str) -> None:
        """Log a run state transition."""
        self.logger.debug("Check state transition", state=state, **self.context)

    def log_check_complete(self, status: str, persisted: bool, duration_seconds: float) -> None:
        """Log check run completion."""
        self.logger.info(
            "Page check completed",
            status=status,
            persisted=persisted,
            duration_seconds=duration_seconds,
            **self.context
        )

    def log_error(self, error: str, error_type: Optional[str] = None, state: Optional[str] = None) -> None:
        """Log error with context."""
        self.logger.error(
            "Page check failed",
            error=error,
            error_type=error_type,
            state=state,
            **self.context
        )

    def log_store_operation(self, operation: str, key: str, success: bool) -> None:
        """Log state store operation."""
        level = "debug" if success else "warning"
        getattr(self.logger, level)(
            "State store operation",
            operation=operation,
            key=key,
            success=success,
            **self.context
        )
