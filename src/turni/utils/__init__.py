"""Utilities package for the Turni engine."""
from .logging_setup import (
    TRACE,
    SolverLogger,
    get_logger,
    log_constraint,
    log_function_call,
    setup_logging,
)
from .structured_logging import (
    bind_context,
    clear_context,
    configure_structlog,
    get_structured_logger,
    run_logger,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_function_call",
    "log_constraint",
    "SolverLogger",
    "TRACE",
    "configure_structlog",
    "get_structured_logger",
    "run_logger",
    "bind_context",
    "clear_context",
]
