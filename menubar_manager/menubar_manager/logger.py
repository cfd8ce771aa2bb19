"""
Logging setup for the menu bar manager.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

_LOG_INITIALISED = False
LOG_DIR = Path(
    os.environ.get(
        "MENUBAR_MANAGER_LOG_DIR",
        str(Path.home() / ".local" / "state" / "menubar-manager"),
    )
)
DEFAULT_LOG_PATH = LOG_DIR / "manager.log"


def configure(log_path: Optional[Path] = None) -> None:
    """
    Configure loguru for the application.

    Runs once per process. The console sink logs at INFO; the rotating file
    sink logs at ``MENUBAR_MANAGER_LOG_LEVEL`` (DEBUG unless overridden).
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = log_path or DEFAULT_LOG_PATH

    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level="INFO", enqueue=True)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        _logger.warning("Log directory {} unavailable ({}); logging to stderr only.", target.parent, exc)
    else:
        _logger.add(
            target,
            level=os.environ.get("MENUBAR_MANAGER_LOG_LEVEL", "DEBUG"),
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    configure()
    return _logger
