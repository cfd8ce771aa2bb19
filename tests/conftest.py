"""
Shared fixtures: fake host providers, raw-process factory and an offscreen Qt app.
"""

from __future__ import annotations

import os
import tempfile

os.environ.setdefault("MENUBAR_MANAGER_LOG_DIR", tempfile.mkdtemp(prefix="menubar-manager-logs-"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

import pytest
from PySide6.QtWidgets import QApplication

from menubar_shared.application import ManagedApplication, RawProcess

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_raw(
    bundle_identifier: Optional[str] = None,
    name: Optional[str] = None,
    *,
    accessory: bool = True,
    hidden: bool = False,
    location: Optional[str] = "/Applications/Tool.app",
    icon: object = "icon",
    launched_minutes: Optional[int] = None,
    process_id: Optional[int] = None,
) -> RawProcess:
    launched = BASE_TIME + timedelta(minutes=launched_minutes) if launched_minutes is not None else None
    return RawProcess(
        bundle_identifier=bundle_identifier,
        name=name,
        icon=icon,
        is_accessory_policy=accessory,
        is_hidden=hidden,
        location=location,
        launch_timestamp=launched,
        process_id=process_id,
    )


def make_app(identity: str, name: Optional[str] = None, *, launched_minutes: Optional[int] = None, **kwargs) -> ManagedApplication:
    launched = BASE_TIME + timedelta(minutes=launched_minutes) if launched_minutes is not None else None
    return ManagedApplication(
        identity=identity,
        display_name=name if name is not None else identity,
        launch_timestamp=launched,
        **kwargs,
    )


def identities(apps: Sequence[ManagedApplication]) -> List[str]:
    return [app.identity for app in apps]


class FakeHost:
    """Scriptable snapshot + activation provider recording every call."""

    def __init__(self, snapshot: Sequence[RawProcess] = ()) -> None:
        self.snapshot: List[RawProcess] = list(snapshot)
        self.error: Optional[Exception] = None
        self.activate_result = True
        self.launch_result = True
        self.open_error: Optional[Exception] = None
        self.running: Dict[Optional[int], Optional[bool]] = {}
        self.exit_on_terminate = True
        self.calls: List[tuple] = []

    def list_running_applications(self) -> Sequence[RawProcess]:
        self.calls.append(("list",))
        if self.error is not None:
            raise self.error
        return list(self.snapshot)

    def activate(self, identity: str) -> bool:
        self.calls.append(("activate", identity))
        return self.activate_result

    def launch(self, identity: str) -> bool:
        self.calls.append(("launch", identity))
        return self.launch_result

    def terminate(self, process_id: Optional[int]) -> None:
        self.calls.append(("terminate", process_id))
        if self.exit_on_terminate:
            self.running[process_id] = False

    def open_by_location(self, location: str) -> None:
        self.calls.append(("open", location))
        if self.open_error is not None:
            raise self.open_error

    def is_running(self, process_id: Optional[int]) -> Optional[bool]:
        self.calls.append(("is_running", process_id))
        return self.running.get(process_id, True)

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls if call[0] != "is_running"]


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
