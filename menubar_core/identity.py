"""
Application identity utilities.

Derives the stable key used for deduplication, lookup and reordering.
"""

from __future__ import annotations

from typing import Optional

from menubar_shared.application import RawProcess


def resolve_identity(raw: RawProcess) -> Optional[str]:
    """
    Return the identity for ``raw``, or ``None`` when it has none.

    The bundle identifier is preferred. Processes without one fall back to
    their display name; blank values count as missing.
    """
    bundle_id = _clean(raw.bundle_identifier)
    if bundle_id:
        return bundle_id
    return _clean(raw.name)


def _clean(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None
