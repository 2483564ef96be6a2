"""
Centralized logging configuration for the gavcoin sync client.

All components log through structlog on top of the standard library
logging module, so host applications can route records with ordinary
handlers while keeping structured key/value context.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

from ..config.defaults import LoggingParams

# Transport libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def _build_processors(
    include_timestamp: bool,
    include_caller: bool,
    extra_processors: Optional[list[Processor]],
) -> list[Processor]:
    chain: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        chain.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    chain.extend(extra_processors or [])
    return chain


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Configure structlog for the sync client and the process it runs in.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, emit one JSON object per line; otherwise
            render for a terminal
        include_timestamp: Add a UTC ISO timestamp to every record
        include_caller: Add filename and line number to every record
        extra_processors: Processors to run before the renderer
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s")

    # Per-request transport logs drown out pass outcomes below WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors = _build_processors(include_timestamp, include_caller, extra_processors)
    processors.append(
        structlog.processors.JSONRenderer() if format_json
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_params(params: LoggingParams) -> None:
    """Apply the ``logging`` section of a loaded ``SessionConfig``."""
    configure_logging(level=params.level, format_json=params.format_json)


def get_logger(name: str) -> FilteringBoundLogger:
    """Module logger; equivalent to ``structlog.get_logger(name)``."""
    return structlog.get_logger(name)


def get_sync_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the synchronization subsystem.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger carrying ``subsystem="sync"`` on every record
    """
    return get_logger(name).bind(subsystem="sync")


def get_action_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the action request subsystem."""
    return get_logger(name).bind(
        subsystem="actions",
        audit_trail=True
    )


def log_pass_outcome(
    logger: FilteringBoundLogger,
    block_number: int,
    outcome: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the end of a synchronization pass with a standardized shape.

    Args:
        logger: Structlog logger instance
        block_number: Block that triggered the pass
        outcome: One of ``committed``, ``rejected`` or ``failed``
        context: Additional context data
    """
    bound_logger = logger.bind(
        block_number=block_number,
        outcome=outcome,
    )

    if context:
        bound_logger = bound_logger.bind(**context)

    if outcome == "committed":
        bound_logger.info("Sync pass committed")
    elif outcome == "rejected":
        bound_logger.warning("Sync pass rejected as stale")
    else:
        bound_logger.error("Sync pass aborted")


def log_action_transition(
    logger: FilteringBoundLogger,
    from_action: str,
    to_action: str,
    trigger: str
) -> None:
    """
    Log an action request change.

    Args:
        logger: Structlog logger instance
        from_action: Previously open action
        to_action: Newly open action
        trigger: ``open`` or ``close``
    """
    logger.bind(
        from_action=from_action,
        to_action=to_action,
        trigger=trigger,
    ).info("Action transition")
