"""
Logging setup for the backtester.

structlog renders through stdlib logging on stderr so that the JSON report
written to stdout stays machine readable.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level}")
    return number


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True
) -> None:
    """
    Configure structlog for a CLI run.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render one JSON object per line instead of console text
        include_timestamp: Prefix events with an ISO timestamp

    Raises:
        ValueError: If level is not a logging level name
    """
    logging.basicConfig(
        level=_level_number(level),
        stream=sys.stderr,
        format="%(message)s",
        force=True
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(structlog.processors.format_exc_info)
    processors.append(
        structlog.processors.JSONRenderer() if format_json
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_backtest_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for per-cell backtest decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for backtest decisions
    """
    return get_logger(name).bind(
        subsystem="backtest",
        audit_trail=True
    )


def log_signal_decision(
    logger: FilteringBoundLogger,
    symbol: str,
    day: str,
    outcome: str,
    roi: Optional[float] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a (symbol, day) signal outcome with standardized format.

    Args:
        logger: Structlog logger instance
        symbol: Trading pair being evaluated
        day: ISO date of the evaluated session
        outcome: Signal outcome name
        roi: Trade ROI in percent when a trade was taken
        context: Additional context data
    """
    bound_logger = logger.bind(
        symbol=symbol,
        day=day,
        outcome=outcome,
        roi=roi,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if outcome == "triggered":
        bound_logger.info("Signal triggered")
    else:
        bound_logger.debug("Signal not triggered")
