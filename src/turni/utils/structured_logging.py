"""
Structured Logging
==================
structlog integration for generation-run events.

Usage:
    from turni.utils.structured_logging import get_structured_logger

    log = get_structured_logger("turni.solver.engine")
    log.info("generation_started", week_start="2025-03-03", nuclei=4)
"""
import logging
from typing import Any

import structlog
import structlog.contextvars
import structlog.stdlib


def configure_structlog(json_output: bool = False) -> None:
    """
    Configure structlog for the engine.

    Args:
        json_output: If True, output JSON logs (for services).
                    If False, use key=value console rendering (for development).

    Events are handed to the standard "turni" logging hierarchy, so they
    follow the handlers installed by setup_logging (stderr, log file).
    """
    if json_output:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="%H:%M:%S"),
                structlog.dev.ConsoleRenderer(colors=False),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )


def get_structured_logger(name: str) -> Any:
    """
    Get a structured logger.

    Args:
        name: Logger name (e.g., "turni.solver.engine")

    Returns:
        structlog bound logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """
    Bind context variables for all subsequent log calls.

    Args:
        **kwargs: Context values (e.g., azienda_id="abc123")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


def run_logger(name: str, snapshot: Any) -> Any:
    """
    Structured logger bound to one generation run.

    Every event carries the company and the week of the snapshot, so runs
    for different weeks can be told apart in aggregated logs.

    Args:
        name: Logger name
        snapshot: ContextSnapshot being processed

    Returns:
        structlog bound logger
    """
    return get_structured_logger(name).bind(
        azienda_id=snapshot.azienda_id or None,
        week_start=snapshot.week_start.isoformat(),
    )
