"""
macOS host provider backed by NSWorkspace (pyobjc).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from menubar_shared.application import RawProcess
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()

# NSApplicationActivationPolicyAccessory
_ACCESSORY_POLICY = 1
_LAUNCH_ASYNC = 0x00010000


class MacWorkspaceProvider:
    """Maps ``NSRunningApplication`` instances onto ``RawProcess`` entries."""

    def __init__(self) -> None:
        import AppKit

        self._appkit = AppKit
        self._workspace = AppKit.NSWorkspace.sharedWorkspace()

    def list_running_applications(self) -> Sequence[RawProcess]:
        snapshot: List[RawProcess] = []
        for app in self._workspace.runningApplications():
            bundle_url = app.bundleURL()
            launch_date = app.launchDate()
            snapshot.append(
                RawProcess(
                    bundle_identifier=_text(app.bundleIdentifier()),
                    name=_text(app.localizedName()),
                    icon=app.icon(),
                    is_accessory_policy=app.activationPolicy() == _ACCESSORY_POLICY,
                    is_hidden=bool(app.isHidden()),
                    location=_text(bundle_url.path()) if bundle_url is not None else None,
                    launch_timestamp=_to_datetime(launch_date),
                    process_id=int(app.processIdentifier()),
                )
            )
        return snapshot

    def activate(self, identity: str) -> bool:
        running = self._appkit.NSRunningApplication.runningApplicationsWithBundleIdentifier_(identity)
        for app in running or []:
            if app.activateWithOptions_(0):
                return True
        return False

    def launch(self, identity: str) -> bool:
        result = self._workspace.launchAppWithBundleIdentifier_options_additionalEventParamDescriptor_launchIdentifier_(
            identity, _LAUNCH_ASYNC, None, None
        )
        if isinstance(result, tuple):
            result = result[0]
        return bool(result)

    def terminate(self, process_id: Optional[int]) -> None:
        app = self._running_by_pid(process_id)
        if app is None:
            _LOGGER.debug("Process {} not running; nothing to terminate.", process_id)
            return
        app.terminate()

    def open_by_location(self, location: str) -> None:
        url = self._appkit.NSURL.fileURLWithPath_(location)
        configuration = self._appkit.NSWorkspaceOpenConfiguration.configuration()
        self._workspace.openApplicationAtURL_configuration_completionHandler_(url, configuration, None)

    def is_running(self, process_id: Optional[int]) -> Optional[bool]:
        if process_id is None:
            return None
        app = self._running_by_pid(process_id)
        return app is not None and not app.isTerminated()

    def _running_by_pid(self, process_id: Optional[int]):
        if process_id is None:
            return None
        return self._appkit.NSRunningApplication.runningApplicationWithProcessIdentifier_(process_id)


def _text(value) -> Optional[str]:
    return str(value) if value is not None else None


def _to_datetime(value) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value.timeIntervalSince1970(), tz=timezone.utc)
