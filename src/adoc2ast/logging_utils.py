#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/logging_utils.py
"""Centralized logging utilities for adoc2ast.

Every recoverable condition the reader, parser or substitution pipeline
encounters is reported through :func:`log_at`, which prefixes the message
with a ``path: line N`` source position. Embedding applications configure
handlers with :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional

from adoc2ast.constants import DEFAULT_STDIN_PATH

if TYPE_CHECKING:
    from adoc2ast.reader import Cursor


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Configure root logging handlers for applications embedding the parser.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or string name (e.g., "INFO").
    log_file : str, optional
        Optional path to a log file for teeing log output.
    trace_mode : bool, default False
        When true, emit timestamps and logger names for debugging traces.

    Returns
    -------
    logging.Logger
        The configured root logger instance.

    """
    resolved_level = log_level if isinstance(log_level, int) else getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    format_str = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s" if trace_mode else "%(levelname)s: %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S" if trace_mode else None
    formatter = logging.Formatter(format_str, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_file)
        except OSError as exc:
            root_logger.warning("Could not create log file %s: %s", log_file, exc)

    return root_logger


def format_location(cursor: Optional["Cursor"]) -> str:
    """Render a cursor as ``path: line N``.

    Parameters
    ----------
    cursor : Cursor or None
        Source position; None yields an empty string

    Returns
    -------
    str
        The formatted position

    """
    if cursor is None:
        return ""
    path = cursor.path or DEFAULT_STDIN_PATH
    return f"{path}: line {cursor.lineno}"


def log_at(logger: logging.Logger, level: int, message: str, cursor: Optional["Cursor"] = None) -> None:
    """Emit a diagnostic, prefixed with its source position when known."""
    location = format_location(cursor)
    if location:
        logger.log(level, "%s: %s", location, message)
    else:
        logger.log(level, "%s", message)
