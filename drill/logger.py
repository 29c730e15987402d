"""Logging configuration for the Daily Word drill."""

import logging
import sys
from datetime import datetime
from pathlib import Path

import config

LOGS_DIR: Path = config.LOGS_DIR

# Module loggers under the "drill" root
SESSION_LOGGER = "drill.session"
GEMINI_LOGGER = "drill.gemini"


class GenerationFilter(logging.Filter):
    """Stamp each record with the session load generation it belongs to.

    The controller passes ``extra={"generation": n}``; records logged without
    one (startup, CLI) get "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "generation"):
            record.generation = "-"
        return True


def setup_logger(
    name: str = "drill",
    log_file: str | None = None,
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
    module_levels: dict[str, int] | None = None,
) -> logging.Logger:
    """
    Set up the "drill" logger that the session and Gemini client log through.

    Args:
        name: Logger name
        log_file: Optional specific log file name. If None, generates timestamp-based name.
        level: Logging level for the file handler
        console_level: Logging level for the console handler. Kept above INFO by
            default so API chatter does not interleave with the drill prompt.
        module_levels: Per-module overrides, e.g. {GEMINI_LOGGER: logging.DEBUG}
            to record request timings without debugging the whole session.

    Returns:
        Configured logger instance
    """
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = f"session_{timestamp}.log"

    log_path = LOGS_DIR / log_file

    logger = logging.getLogger(name)
    module_levels = module_levels or {}
    file_level = min([level, *module_levels.values()])
    logger.setLevel(min(file_level, console_level))

    # Clear existing handlers to avoid duplicates
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    generation_filter = GenerationFilter()
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | gen %(generation)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter("%(message)s")

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.addFilter(generation_filter)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.addFilter(generation_filter)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Children inherit "level" unless overridden
    for child in (SESSION_LOGGER, GEMINI_LOGGER):
        logging.getLogger(child).setLevel(min(module_levels.get(child, level), console_level))

    logger.info(f"Log file: {log_path}")

    return logger


def get_logger(name: str = "drill") -> logging.Logger:
    """
    Get an existing logger by name.

    Module loggers are children of "drill" (e.g. "drill.session") so they
    share the handlers installed by setup_logger.
    """
    return logging.getLogger(name)
