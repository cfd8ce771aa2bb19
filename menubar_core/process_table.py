"""
Cross-platform host provider built on the psutil process table.

Status-area detection is approximate outside macOS: on Windows a process
counts as accessory when it owns no visible top-level window, elsewhere every
process of the current user does and the helper rules do the filtering.
"""

from __future__ import annotations

import ctypes
import os
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import psutil
from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices

from menubar_shared.application import RawProcess
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()

_ATTRS = ["pid", "name", "exe", "create_time", "status", "username"]
_SW_SHOW = 5


class ProcessTableProvider:
    """Snapshot and activation provider for hosts without a workspace API."""

    def __init__(
        self,
        *,
        windowed_pids: Optional[Callable[[], set[int]]] = None,
        process_iter: Callable = psutil.process_iter,
    ) -> None:
        self._windowed_pids = windowed_pids or _visible_window_pids
        self._process_iter = process_iter
        self._own_pid = os.getpid()
        self._user = _current_username()
        self._known: Dict[str, RawProcess] = {}

    def list_running_applications(self) -> Sequence[RawProcess]:
        windowed = self._windowed_pids()
        snapshot: List[RawProcess] = []
        for proc in self._process_iter(_ATTRS, ad_value=None):
            info = proc.info
            if info.get("pid") == self._own_pid:
                continue
            if self._user and info.get("username") and info["username"] != self._user:
                continue
            raw = _raw_from_info(info, windowed)
            snapshot.append(raw)

        self._known = {}
        for raw in snapshot:
            if raw.name and raw.name not in self._known:
                self._known[raw.name] = raw
        return snapshot

    def activate(self, identity: str) -> bool:
        raw = self._known.get(identity)
        if raw is None or raw.process_id is None or sys.platform != "win32":
            return False
        return _bring_to_front(raw.process_id)

    def launch(self, identity: str) -> bool:
        raw = self._known.get(identity)
        if raw is None or not raw.location:
            return False
        if self.is_running(raw.process_id):
            _LOGGER.debug("{} is already running as pid {}; not spawning another.", identity, raw.process_id)
            return True
        kwargs = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            kwargs["start_new_session"] = True
        try:
            subprocess.Popen(
                [raw.location],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                **kwargs,
            )
        except OSError as exc:
            _LOGGER.warning("Failed to launch {} from {}: {}", identity, raw.location, exc)
            return False
        return True

    def terminate(self, process_id: Optional[int]) -> None:
        if process_id is None:
            return
        try:
            psutil.Process(process_id).terminate()
        except psutil.NoSuchProcess:
            _LOGGER.debug("Process {} already exited.", process_id)
        except psutil.AccessDenied as exc:
            _LOGGER.warning("Not allowed to terminate process {}: {}", process_id, exc)

    def open_by_location(self, location: str) -> None:
        QDesktopServices.openUrl(QUrl.fromLocalFile(location))

    def is_running(self, process_id: Optional[int]) -> Optional[bool]:
        if process_id is None:
            return None
        try:
            return psutil.Process(process_id).status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            return None


def _raw_from_info(info: dict, windowed: set[int]) -> RawProcess:
    exe = info.get("exe")
    location = exe if exe and Path(exe).exists() else None
    name = info.get("name")
    if name and name.lower().endswith(".exe"):
        name = name[:-4]

    created = info.get("create_time")
    launched = datetime.fromtimestamp(created, tz=timezone.utc) if created else None

    return RawProcess(
        bundle_identifier=None,
        name=name,
        icon=location,
        is_accessory_policy=info.get("pid") not in windowed,
        is_hidden=info.get("status") == psutil.STATUS_STOPPED,
        location=location,
        launch_timestamp=launched,
        process_id=info.get("pid"),
    )


def _current_username() -> Optional[str]:
    try:
        return psutil.Process().username()
    except (psutil.Error, KeyError):
        return None


def _top_level_windows() -> Dict[int, List[tuple[int, bool]]]:
    """Map pid to its top-level windows as ``(hwnd, visible)`` pairs."""
    if sys.platform != "win32":
        return {}

    user32 = ctypes.windll.user32  # type: ignore[attr-defined]
    windows: Dict[int, List[tuple[int, bool]]] = {}
    enum_proc = ctypes.WINFUNCTYPE(ctypes.c_bool, ctypes.c_void_p, ctypes.c_void_p)  # type: ignore[attr-defined]

    def _collect(hwnd, _lparam):
        pid = ctypes.c_ulong()
        user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        windows.setdefault(pid.value, []).append((hwnd, bool(user32.IsWindowVisible(hwnd))))
        return True

    user32.EnumWindows(enum_proc(_collect), 0)
    return windows


def _visible_window_pids() -> set[int]:
    return {pid for pid, handles in _top_level_windows().items() if any(visible for _, visible in handles)}


def _bring_to_front(process_id: int) -> bool:
    user32 = ctypes.windll.user32  # type: ignore[attr-defined]
    for hwnd, _visible in _top_level_windows().get(process_id, []):
        if user32.GetWindowTextLengthW(hwnd) == 0:
            continue
        user32.ShowWindow(hwnd, _SW_SHOW)
        if user32.SetForegroundWindow(hwnd):
            return True
    return False
