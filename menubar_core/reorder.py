"""
Drag-to-reorder gesture handling.

A session only computes the new logical order; it never touches the host
status area.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional, Sequence

from menubar_core.orderer import reindex
from menubar_shared.application import ManagedApplication
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()

DRAG_THRESHOLD = 5.0


class SessionState(Enum):
    IDLE = "Idle"
    DRAGGING = "Dragging"
    DROPPED = "Dropped"


def splice_reorder(ordered: Sequence[ManagedApplication], source: str, target: str) -> List[ManagedApplication]:
    """
    Move ``source`` to the index ``target`` occupies, shifting the rest.

    Unknown identities and ``source == target`` leave the order unchanged.
    """
    result = list(ordered)
    if source == target:
        return result

    identities = [app.identity for app in result]
    try:
        source_index = identities.index(source)
        target_index = identities.index(target)
    except ValueError:
        _LOGGER.debug("Ignoring reorder of {} onto {}: not in the current order.", source, target)
        return result

    moved = result.pop(source_index)
    result.insert(target_index, moved)
    return reindex(result)


class ReorderSession:
    """
    One drag gesture: ``Idle`` → ``Dragging(source)`` → ``Dropped(source, target)``
    → ``Idle``. A press that never moves past the threshold is a click and
    leaves the session ``Idle``.
    """

    def __init__(self, threshold: float = DRAG_THRESHOLD) -> None:
        self.threshold = threshold
        self._state = SessionState.IDLE
        self._source: Optional[str] = None
        self._target: Optional[str] = None
        self._origin: Optional[tuple[float, float]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def target(self) -> Optional[str]:
        return self._target

    @property
    def is_dragging(self) -> bool:
        return self._state is SessionState.DRAGGING

    @property
    def is_armed(self) -> bool:
        return self._state is SessionState.IDLE and self._origin is not None

    def press(self, identity: str, x: float, y: float) -> bool:
        """Arm the gesture on ``identity``. Only accepted while idle."""
        if self._state is not SessionState.IDLE:
            return False
        self._source = identity
        self._origin = (x, y)
        return True

    def move(self, x: float, y: float) -> bool:
        """Start dragging once the pointer travels past the threshold."""
        if not self.is_armed:
            return self.is_dragging
        origin_x, origin_y = self._origin
        if math.hypot(x - origin_x, y - origin_y) > self.threshold:
            self._state = SessionState.DRAGGING
            _LOGGER.debug("Drag started for {}", self._source)
        return self.is_dragging

    def drop(self, target: Optional[str]) -> bool:
        """Finish the drag over ``target``; dropping onto the source is a no-op."""
        if self._state is not SessionState.DRAGGING:
            self.reset()
            return False
        if target is None or target == self._source:
            _LOGGER.debug("Drop of {} rejected (target={}).", self._source, target)
            self.reset()
            return False
        self._target = target
        self._state = SessionState.DROPPED
        return True

    def release(self) -> None:
        """Pointer released outside any row."""
        self.reset()

    def complete(self, ordered: Sequence[ManagedApplication]) -> List[ManagedApplication]:
        """Apply the dropped move to ``ordered`` and return to ``Idle``."""
        if self._state is not SessionState.DROPPED:
            self.reset()
            return list(ordered)
        result = splice_reorder(ordered, self._source, self._target)
        self.reset()
        return result

    def reset(self) -> None:
        self._state = SessionState.IDLE
        self._source = None
        self._target = None
        self._origin = None
