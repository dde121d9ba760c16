"""
Basic logging configuration for the application.

The ``setup_logging`` function configures the root logger with a
console handler and, when a log directory is given, two file handlers:
``combined.log`` receives every record and ``error.log`` only records
at ``ERROR`` and above.  This module ensures that logging is set up
exactly once.
"""

import logging
from pathlib import Path
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    target: Optional[logging.Logger] = None,
) -> None:
    """Configure the root logger (or ``target``).

    If no handlers are attached to the root logger, attach a console
    handler and optionally the file handlers.  The root logger's level
    is set based on the provided ``level``.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    log_dir : Optional[str]
        Directory for the log files.  Created if missing.  If omitted,
        no file handlers are added.  Paths are resolved relative to the
        current working directory.
    target : Optional[logging.Logger]
        Logger to configure instead of the root logger.
    """
    logger = target if target is not None else logging.getLogger()
    if logger.handlers:
        # Avoid configuring logging multiple times.  This can happen when
        # running tests or when ``create_app`` is called repeatedly.
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir).resolve()
        log_path.mkdir(parents=True, exist_ok=True)

        combined_handler = logging.FileHandler(log_path / "combined.log", encoding="utf-8")
        combined_handler.setFormatter(formatter)
        logger.addHandler(combined_handler)

        error_handler = logging.FileHandler(log_path / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        logger.addHandler(error_handler)


def redact(value: Optional[str], keep: int = 4) -> str:
    """Mask all but the last ``keep`` characters of an identifier."""
    if not value:
        return "***"
    return "***" + str(value)[-keep:]
