"""
Heuristic left-to-right ordering of status-area applications.

There is no host API exposing the real status-area layout, so the order is
approximated: known utilities first (by their position in the priority
list), then older processes before newer ones.
"""

from __future__ import annotations

import sys
from functools import cmp_to_key
from typing import Iterable, List, Sequence

from menubar_shared.application import ManagedApplication

UNRANKED = sys.maxsize


def priority_rank(app: ManagedApplication, lowered_priority: Sequence[str]) -> int:
    """Index of the first priority entry contained in the app name, else ``UNRANKED``."""
    name = (app.display_name or "").lower()
    for index, entry in enumerate(lowered_priority):
        if entry in name:
            return index
    return UNRANKED


def order(unique: Iterable[ManagedApplication], priority: Sequence[str]) -> List[ManagedApplication]:
    """
    Sort applications by priority rank, then launch time, then name.

    The launch time only decides when both applications report one; otherwise
    the display names are compared. Equal keys keep their input order.
    ``order_index`` is reassigned on the result.
    """
    apps = list(unique)
    lowered = tuple(entry.lower() for entry in priority)
    ranks = {id(app): priority_rank(app, lowered) for app in apps}

    def _compare(left: ManagedApplication, right: ManagedApplication) -> int:
        left_rank, right_rank = ranks[id(left)], ranks[id(right)]
        if left_rank != right_rank:
            return -1 if left_rank < right_rank else 1
        return _tie_break(left, right)

    ordered = sorted(apps, key=cmp_to_key(_compare))
    return reindex(ordered)


def apply_manual_order(ordered: Sequence[ManagedApplication], manual: Sequence[str]) -> List[ManagedApplication]:
    """
    Re-apply a user-chosen relative order on top of a heuristic ordering.

    Slots held by identities named in ``manual`` are refilled with those
    applications in ``manual`` order; every other application keeps its slot.
    """
    if not manual:
        return list(ordered)

    by_identity = {app.identity: app for app in ordered}
    pinned = [by_identity[identity] for identity in dict.fromkeys(manual) if identity in by_identity]
    pinned_ids = {app.identity for app in pinned}

    result: List[ManagedApplication] = []
    queue = iter(pinned)
    for app in ordered:
        result.append(next(queue) if app.identity in pinned_ids else app)
    return reindex(result)


def reindex(ordered: List[ManagedApplication]) -> List[ManagedApplication]:
    for index, app in enumerate(ordered):
        app.order_index = index
    return ordered


def _tie_break(left: ManagedApplication, right: ManagedApplication) -> int:
    if left.launch_timestamp is not None and right.launch_timestamp is not None:
        if left.launch_timestamp == right.launch_timestamp:
            return 0
        return -1 if left.launch_timestamp < right.launch_timestamp else 1

    left_name = left.display_name or ""
    right_name = right.display_name or ""
    if left_name == right_name:
        return 0
    return -1 if left_name < right_name else 1
