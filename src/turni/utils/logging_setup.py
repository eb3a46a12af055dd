"""
Turni Logging Infrastructure
============================
Logger hierarchy, rotating log file and call tracing for the engine.

All engine modules log under "turni.*":
    TRACE (5)     entry/exit of the public entry points
    DEBUG (10)    per-slot decisions, rankings, rule checks that pass
    INFO (20)     pass progress and summaries
    WARNING (30)  coverage shortfalls, failed rule checks, blocked requests
    ERROR (40)    uncovered slots, upstream failures, exceptions

Console output goes to stderr so that JSON printed by the CLI on stdout
stays parseable.
"""
import functools
import logging
import sys
from datetime import date
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

ROOT_LOGGER = "turni"

CONSOLE_FORMAT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the line by level when writing to a terminal."""

    COLORS = {
        TRACE: "\033[90m",
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_color: bool = False):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        color = self.COLORS.get(record.levelno)
        if self.use_color and color:
            return f"{color}{message}{self.RESET}"
        return message


def _level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    if name.upper() == "TRACE":
        return TRACE
    return getattr(logging, name.upper(), default)


def _console_handler(level: int) -> logging.Handler:
    stream = sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(
        CONSOLE_FORMAT,
        datefmt="%H:%M:%S",
        use_color=hasattr(stream, "isatty") and stream.isatty(),
    ))
    return handler


def _file_handler(log_file: str, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = "logs/turni.log",
    console_level: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 3,
) -> logging.Logger:
    """
    Install the console and (optional) rotating file handlers on "turni".

    Calling it again replaces the handlers instead of stacking them.

    Args:
        level: Minimum level written to the log file
        log_file: Log file path (None = console only)
        console_level: Minimum console level (defaults to level)
        max_bytes: File size that triggers rotation
        backup_count: Rotated files kept

    Returns:
        The "turni" logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(TRACE)  # Handlers filter
    logger.handlers.clear()

    file_level = _level(level)
    cons_level = _level(console_level or level)

    logger.addHandler(_console_handler(cons_level))
    if log_file:
        logger.addHandler(_file_handler(log_file, file_level, max_bytes, backup_count))

    file_desc = f"{log_file} ({logging.getLevelName(file_level)})" if log_file else "disattivato"
    logger.info(f"Logging attivo: console={logging.getLevelName(cons_level)}, file={file_desc}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name (e.g., "turni.solver.engine")

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def describe(value: Any, limit: int = 50) -> str:
    """
    Short, log-friendly rendering of an argument or return value.

    Snapshots and results are summarized instead of dumped.
    """
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if hasattr(value, "week_start") and hasattr(value, "collaboratori"):
        return (
            f"<snapshot {value.week_start}..{value.week_end}: "
            f"{len(value.collaboratori)} collaboratori, {len(value.nuclei)} nuclei>"
        )
    if hasattr(value, "summary") and callable(value.summary):
        return f"<{type(value).__name__} {value.summary()}>"
    text = repr(value)
    return text if len(text) <= limit else text[:limit] + "…"


def log_function_call(func: Callable) -> Callable:
    """
    Trace entry and exit of an engine entry point at TRACE level.

    Exceptions are logged at ERROR and re-raised unchanged.

    Usage:
        @log_function_call
        def generate_week_shifts(snapshot, config=None):
            ...
    """
    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        name = func.__name__
        if logger.isEnabledFor(TRACE):
            parts = [describe(a) for a in args[:3]]
            parts += [f"{k}={describe(v, 30)}" for k, v in list(kwargs.items())[:3]]
            logger.log(TRACE, f"→ {name}({', '.join(parts)})")

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"✖ {name} raised: {type(e).__name__}: {e}")
            raise

        if logger.isEnabledFor(TRACE):
            logger.log(TRACE, f"← {name} returned: {describe(result, 100)}")
        return result

    return wrapper


def log_constraint(
    logger: logging.Logger,
    name: str,
    satisfied: bool,
    details: str = "",
    level: int = logging.DEBUG,
):
    """
    Log a rule check: passing checks at `level`, failures at WARNING.

    Args:
        logger: Logger to use
        name: Rule name (template name or rule kind)
        satisfied: Whether the rule holds
        details: Worker, date and measured value
        level: Level for passing checks
    """
    msg = f"[{'✓' if satisfied else '✗'}] {name}"
    if details:
        msg += f": {details}"
    logger.log(level if satisfied else logging.WARNING, msg)


class SolverLogger:
    """
    Indented progress output for a generation pass.

    phase() opens a section, step() marks a date, enter()/exit() wrap one
    team slot so its details are indented under it.
    """

    def __init__(self, name: str = "turni.solver"):
        self.logger = logging.getLogger(name)
        self.indent = 0

    def _prefix(self) -> str:
        return "  " * self.indent

    def phase(self, name: str):
        self.logger.info(f"{'=' * 20} {name} {'=' * 20}")

    def step(self, description: str):
        self.logger.info(f"{self._prefix()}▸ {description}")

    def detail(self, key: str, value: Any):
        self.logger.debug(f"{self._prefix()}  {key}: {value}")

    def constraint(self, name: str, satisfied: bool, details: str = ""):
        log_constraint(self.logger, name, satisfied, details)

    def enter(self, context: str):
        self.logger.debug(f"{self._prefix()}┌─ {context}")
        self.indent += 1

    def exit(self, context: str = ""):
        self.indent = max(0, self.indent - 1)
        if context:
            self.logger.debug(f"{self._prefix()}└─ {context}")
