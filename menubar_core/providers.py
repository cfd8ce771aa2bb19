"""
Host collaborator interfaces and the platform default.
"""

from __future__ import annotations

import sys
from typing import Optional, Protocol, Sequence, runtime_checkable

from menubar_shared.application import RawProcess


@runtime_checkable
class SnapshotProvider(Protocol):
    def list_running_applications(self) -> Sequence[RawProcess]:
        ...


@runtime_checkable
class ActivationProvider(Protocol):
    """Best-effort process control. No call guarantees completion."""

    def activate(self, identity: str) -> bool:
        ...

    def launch(self, identity: str) -> bool:
        ...

    def terminate(self, process_id: Optional[int]) -> None:
        ...

    def open_by_location(self, location: str) -> None:
        ...

    def is_running(self, process_id: Optional[int]) -> Optional[bool]:
        """``None`` when the host cannot tell."""
        ...


class HostRefreshHint(Protocol):
    def attempt_host_refresh_hint(self) -> None:
        ...


class NullRefreshHint:
    """Default hint: the engine never relies on nudging the host."""

    def attempt_host_refresh_hint(self) -> None:
        return None


class HostProvider(SnapshotProvider, ActivationProvider, Protocol):
    """A single object serving both snapshots and process control."""


def default_provider() -> HostProvider:
    """Pick the provider matching the running platform."""
    if sys.platform == "darwin":
        from menubar_core.macos_workspace import MacWorkspaceProvider

        return MacWorkspaceProvider()

    from menubar_core.process_table import ProcessTableProvider

    return ProcessTableProvider()
