"""
Decides when a fresh ordering is worth pushing to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from menubar_shared.application import ManagedApplication


@dataclass(frozen=True, slots=True)
class TickDecision:
    should_publish: bool
    ordered: List[ManagedApplication]


class ChangeDetector:
    """
    Publishes only when the number of applications changes and nobody is
    interacting with the current list (an open menu or a drag in progress).
    A suppressed change is picked up by the first tick after the interaction.
    """

    def __init__(self) -> None:
        self._last_count = -1
        self._last_sequence: List[ManagedApplication] = []
        self._force = False

    @property
    def last_published_count(self) -> int:
        return self._last_count

    @property
    def last_published_sequence(self) -> List[ManagedApplication]:
        return list(self._last_sequence)

    def on_tick(self, new_ordered: Sequence[ManagedApplication], *, interacting: bool = False) -> TickDecision:
        if interacting:
            return TickDecision(False, self.last_published_sequence)

        count = len(new_ordered)
        if count == self._last_count and not self._force:
            return TickDecision(False, self.last_published_sequence)

        self._last_count = count
        self._last_sequence = list(new_ordered)
        self._force = False
        return TickDecision(True, list(new_ordered))

    def force_next(self) -> None:
        """Publish on the next non-interactive tick even if the count is unchanged."""
        self._force = True

    def replace_sequence(self, ordered: Sequence[ManagedApplication]) -> None:
        """Adopt a reordered sequence of the same applications."""
        self._last_sequence = list(ordered)
        self._last_count = len(self._last_sequence)
