"""
Core engine for the menu bar manager shared across the tray app and tooling.
"""

from .classifier import Rejection, classify  # noqa: F401
from .identity import resolve_identity  # noqa: F401
from .reorder import ReorderSession, splice_reorder  # noqa: F401
