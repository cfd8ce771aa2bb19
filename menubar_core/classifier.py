"""
Decides which running processes are user-facing status-area utilities.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from menubar_core.identity import resolve_identity
from menubar_shared.application import ManagedApplication, RawProcess
from menubar_shared.rules_schema import ClassificationRules
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()


class Rejection(Enum):
    MISSING_IDENTITY = "missing identity or name"
    SYSTEM_VENDOR = "system vendor prefix"
    HARD_EXCLUSION = "hard exclusion"
    HELPER = "helper process"
    NOT_ACCESSORY = "not an accessory-policy process"
    HIDDEN = "hidden by host"
    NO_BUNDLE_LOCATION = "no bundle location"
    NO_ICON = "no icon"


def evaluate(raw: RawProcess, rules: ClassificationRules) -> Optional[Rejection]:
    """
    Return why ``raw`` is rejected, or ``None`` when it is accepted.

    Checks run in a fixed order and the first failing check decides.
    """
    identity = resolve_identity(raw)
    name = raw.name.strip() if isinstance(raw.name, str) else ""
    if not identity or not name:
        return Rejection.MISSING_IDENTITY

    if any(identity.startswith(prefix) for prefix in rules.system_prefixes):
        return Rejection.SYSTEM_VENDOR

    if identity in rules.hard_exclusions or name in rules.hard_exclusions:
        return Rejection.HARD_EXCLUSION

    haystacks = (name.lower(), identity.lower())
    is_helper = _matches_any(haystacks, rules.lowered_helper_patterns)
    is_important = _matches_any(haystacks, rules.lowered_important_overrides)
    if is_helper and not is_important:
        return Rejection.HELPER

    if not raw.is_accessory_policy:
        return Rejection.NOT_ACCESSORY
    if raw.is_hidden:
        return Rejection.HIDDEN
    if not raw.has_bundle_location:
        return Rejection.NO_BUNDLE_LOCATION
    if rules.require_icon and raw.icon is None:
        return Rejection.NO_ICON

    return None


def classify(snapshot: Iterable[RawProcess], rules: ClassificationRules) -> List[ManagedApplication]:
    """Keep the processes that pass every rule, in snapshot order."""
    accepted, _ = partition(snapshot, rules)
    return accepted


def partition(
    snapshot: Iterable[RawProcess], rules: ClassificationRules
) -> Tuple[List[ManagedApplication], List[Tuple[str, Rejection]]]:
    """Split a snapshot into accepted applications and ``(label, reason)`` rejections."""
    accepted: List[ManagedApplication] = []
    rejected: List[Tuple[str, Rejection]] = []
    for raw in snapshot:
        reason = evaluate(raw, rules)
        identity = resolve_identity(raw)
        if reason is not None:
            label = identity or "<anonymous>"
            rejected.append((label, reason))
            _LOGGER.trace("Skipping {}: {}", label, reason.value)
            continue
        accepted.append(ManagedApplication.from_raw(raw, identity))
    return accepted, rejected


def _matches_any(haystacks: Iterable[str], needles: Iterable[str]) -> bool:
    return any(needle in haystack for needle in needles for haystack in haystacks)
