"""
Read-only helpers that explain the current list to the user.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from menubar_shared.application import ManagedApplication


def suggest_apps_to_hide(apps: Iterable[ManagedApplication], keywords: Sequence[str]) -> List[ManagedApplication]:
    """Applications whose name or identity mentions a low-priority keyword."""
    lowered = [keyword.lower() for keyword in keywords]
    suggestions: List[ManagedApplication] = []
    for app in apps:
        name = (app.display_name or "").lower()
        identity = app.identity.lower()
        if any(keyword in name or keyword in identity for keyword in lowered):
            suggestions.append(app)
    return suggestions


def describe_status(app: ManagedApplication) -> str:
    parts = ["Running"]
    if app.is_accessory_policy:
        parts.append("Menu bar app")
    if app.is_hidden:
        parts.append("Hidden")
    return " • ".join(parts)
