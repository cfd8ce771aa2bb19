"""
Persisted runtime configuration for the menu bar manager.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from PySide6.QtCore import QSettings

from menubar_core.activation import DEFAULT_RESTART_WAIT_SECONDS
from menubar_core.restart_queue import DEFAULT_RESTART_GAP_SECONDS
from menubar_core.scheduler import DEFAULT_POLL_INTERVAL_SECONDS
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()

ORGANIZATION_NAME = "MenuBarManager"
APPLICATION_NAME = "Core"

_MIN_POLL_INTERVAL = 1
_MAX_POLL_INTERVAL = 300
_MIN_RESTART_WAIT = 0.5
_MAX_RESTART_WAIT = 30.0
_MIN_RESTART_GAP = 0.0
_MAX_RESTART_GAP = 10.0


@dataclass(eq=True)
class CoreSettings:
    enabled: bool = True
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    show_tray_icon: bool = True
    require_icon: bool = False
    restart_wait_seconds: float = DEFAULT_RESTART_WAIT_SECONDS
    restart_gap_seconds: float = DEFAULT_RESTART_GAP_SECONDS
    rules_path: Optional[Path] = None


class CoreSettingsManager:
    """Loads settings through QSettings and clamps invalid data."""

    def __init__(self, *, settings: Optional[QSettings] = None) -> None:
        self._settings = settings or QSettings(ORGANIZATION_NAME, APPLICATION_NAME)

    def read_settings(self) -> CoreSettings:
        self._settings.sync()
        return CoreSettings(
            enabled=self._read_bool("IsEnabled", True),
            poll_interval_seconds=int(
                self._read_number(
                    "PollingIntervalSeconds",
                    DEFAULT_POLL_INTERVAL_SECONDS,
                    _MIN_POLL_INTERVAL,
                    _MAX_POLL_INTERVAL,
                )
            ),
            show_tray_icon=self._read_bool("ShowTrayIcon", True),
            require_icon=self._read_bool("RequireIcon", False),
            restart_wait_seconds=self._read_number(
                "RestartWaitSeconds",
                DEFAULT_RESTART_WAIT_SECONDS,
                _MIN_RESTART_WAIT,
                _MAX_RESTART_WAIT,
            ),
            restart_gap_seconds=self._read_number(
                "RestartGapSeconds",
                DEFAULT_RESTART_GAP_SECONDS,
                _MIN_RESTART_GAP,
                _MAX_RESTART_GAP,
            ),
            rules_path=self._read_path("RulesPath"),
        )

    def _read_bool(self, name: str, default: bool) -> bool:
        raw = self._settings.value(name)
        if raw is None:
            return default
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, int):
            return bool(raw)
        if isinstance(raw, str) and raw.strip().lower() in {"true", "1", "yes", "on"}:
            return True
        if isinstance(raw, str) and raw.strip().lower() in {"false", "0", "no", "off"}:
            return False
        _LOGGER.warning("Setting {} has unexpected value {!r}; using default.", name, raw)
        return default

    def _read_number(self, name: str, default: float, minimum: float, maximum: float) -> float:
        raw = self._settings.value(name)
        if raw is None:
            return default
        value = _coerce_number(raw)
        if value is None:
            _LOGGER.warning("Setting {} has unexpected value {!r}; using default.", name, raw)
            return default
        if value < minimum or value > maximum:
            _LOGGER.warning(
                "Invalid {} value {} found in settings. Clamping to safe bounds.",
                name,
                value,
            )
        return max(minimum, min(maximum, value))

    def _read_path(self, name: str) -> Optional[Path]:
        raw = self._settings.value(name)
        if not isinstance(raw, str) or not raw.strip():
            return None
        return Path(raw.strip()).expanduser()


def _coerce_number(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None
