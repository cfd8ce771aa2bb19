"""
Shared representation of running processes and the status-area applications
derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

UNKNOWN_NAME = "Unknown"


@dataclass(frozen=True, slots=True)
class RawProcess:
    """
    One entry of a host snapshot, exactly as reported by a provider.

    Any field may be missing; classification decides what to keep.
    """

    bundle_identifier: Optional[str] = None
    name: Optional[str] = None
    icon: Any = None
    is_accessory_policy: bool = False
    is_hidden: bool = False
    location: Optional[str] = None
    launch_timestamp: Optional[datetime] = None
    process_id: Optional[int] = None

    @property
    def has_bundle_location(self) -> bool:
        return self.location is not None


@dataclass(slots=True)
class ManagedApplication:
    """
    A classified status-area utility. Rebuilt every snapshot cycle; only
    ``order_index`` changes after construction.
    """

    identity: str
    display_name: Optional[str] = None
    icon: Any = None
    is_accessory_policy: bool = True
    is_hidden: bool = False
    has_bundle_location: bool = True
    launch_timestamp: Optional[datetime] = None
    location: Optional[str] = None
    process_id: Optional[int] = None
    order_index: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("ManagedApplication requires a non-empty identity.")

    @property
    def title(self) -> str:
        return self.display_name or UNKNOWN_NAME

    @classmethod
    def from_raw(cls, raw: RawProcess, identity: str) -> "ManagedApplication":
        return cls(
            identity=identity,
            display_name=raw.name,
            icon=raw.icon,
            is_accessory_policy=raw.is_accessory_policy,
            is_hidden=raw.is_hidden,
            has_bundle_location=raw.has_bundle_location,
            launch_timestamp=raw.launch_timestamp,
            location=raw.location,
            process_id=raw.process_id,
        )
