"""
Application discovery for the menu bar manager.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import psutil

from menubar_core.classifier import Rejection, partition
from menubar_core.deduplicator import dedupe
from menubar_core.orderer import apply_manual_order, order
from menubar_core.providers import SnapshotProvider
from menubar_shared.application import ManagedApplication
from menubar_shared.rules_schema import ClassificationRules
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()


@dataclass(slots=True)
class ScanResult:
    applications: List[ManagedApplication]
    rejected: List[Tuple[str, Rejection]] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def scan_applications(
    provider: SnapshotProvider,
    rules: ClassificationRules,
    *,
    manual_order: Sequence[str] = (),
) -> ScanResult:
    """
    Pull a snapshot, then classify, deduplicate and order it.

    A provider failure yields an empty, errored result instead of raising so
    that one bad tick never takes the control thread down.
    """
    try:
        snapshot = list(provider.list_running_applications())
    except (OSError, RuntimeError, psutil.Error) as exc:
        _LOGGER.error("Failed to list running applications: {}", exc)
        return ScanResult(applications=[], errors=[exc])

    candidates, rejected = partition(snapshot, rules)
    unique = dedupe(candidates)
    ordered = apply_manual_order(order(unique, rules.priority), manual_order)
    _LOGGER.debug(
        "Snapshot of {} processes: {} candidates, {} unique status-area apps.",
        len(snapshot),
        len(candidates),
        len(ordered),
    )
    return ScanResult(applications=ordered, rejected=rejected)
