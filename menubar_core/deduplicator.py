"""
Collapses repeated processes of the same application.
"""

from __future__ import annotations

from typing import Iterable, List

from menubar_shared.application import ManagedApplication
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()


def dedupe(candidates: Iterable[ManagedApplication]) -> List[ManagedApplication]:
    """Return candidates with unique identities; the first occurrence wins."""
    seen: set[str] = set()
    unique: List[ManagedApplication] = []
    for app in candidates:
        if app.identity in seen:
            _LOGGER.trace("Dropping duplicate process for {}", app.identity)
            continue
        seen.add(app.identity)
        unique.append(app)
    return unique
