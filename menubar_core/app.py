"""
Application coordinator presenting status-area applications in the tray.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QFileInfo, QObject, QTimer
from PySide6.QtGui import QAction, QIcon
from PySide6.QtWidgets import QApplication, QFileIconProvider, QMenu, QStyle, QSystemTrayIcon

from menubar_core.activation import ActivationOutcome
from menubar_core.advisor import describe_status
from menubar_core.app_list_window import AppListWindow
from menubar_core.engine import StatusAreaEngine
from menubar_core.providers import HostProvider, default_provider
from menubar_core.settings import CoreSettings, CoreSettingsManager
from menubar_shared.application import ManagedApplication
from menubar_shared.rules_schema import ClassificationRules, RulesValidationError, load_and_validate_rules
from menubar_manager.menubar_manager import logger as app_logger

APP_NAME = "Menu Bar Manager"
APP_VERSION = "1.0.0"
SETTINGS_REFRESH_INTERVAL_MS = 15000
TRAY_MESSAGE_TIMEOUT_MS = 4000
RESTART_SHUTDOWN_TIMEOUT_MS = 10000
RULES_ENV_VAR = "MENUBAR_MANAGER_RULES"


def resolve_rules_path(settings: CoreSettings) -> Optional[Path]:
    """The environment wins over the stored setting."""
    env_value = os.environ.get(RULES_ENV_VAR, "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return settings.rules_path


def load_rules(path: Optional[Path]) -> ClassificationRules:
    """Load rules from ``path``, falling back to the defaults when invalid."""
    logger = app_logger.get_logger()
    try:
        rules = load_and_validate_rules(path)
    except RulesValidationError as exc:
        logger.error("Ignoring rules file {}: {}", path, exc)
        return ClassificationRules()
    if path is not None:
        logger.info("Loaded classification rules from {}", path)
    return rules


@dataclass
class AppCoordinator(QObject):
    provider: HostProvider = field(default_factory=default_provider)
    settings_manager: CoreSettingsManager = field(default_factory=CoreSettingsManager)

    def __post_init__(self) -> None:
        super().__init__()
        self._logger = app_logger.get_logger()
        self._manual_shutdown_requested = False
        self._icon_provider = QFileIconProvider()
        self._fallback_icon = QApplication.style().standardIcon(QStyle.SP_DesktopIcon)

        self._settings: CoreSettings = CoreSettings()
        self._initial_settings = self.settings_manager.read_settings()
        self._rules_path = resolve_rules_path(self._initial_settings)

        self.engine = StatusAreaEngine(
            self.provider,
            load_rules(self._rules_path),
            poll_interval_seconds=self._initial_settings.poll_interval_seconds,
            parent=self,
        )
        self.engine.published.connect(self._on_published)
        self.engine.activationFinished.connect(self._on_activation_finished)
        self.engine.reorderCompleted.connect(self._on_reorder_completed)
        self.engine.restartProgress.connect(self._on_restart_progress)
        self.engine.restartFinished.connect(self._on_restart_finished)

        self._tray = QSystemTrayIcon(self)
        self._tray.setIcon(QApplication.style().standardIcon(QStyle.SP_ComputerIcon))
        self._tray.setToolTip(f"{APP_NAME} v{APP_VERSION}")

        self._menu = QMenu()
        self._menu.aboutToShow.connect(partial(self.engine.set_menu_open, True))
        self._menu.aboutToHide.connect(partial(self.engine.set_menu_open, False))
        self._tray.setContextMenu(self._menu)
        self._restart_menu = QMenu("Restart", self._menu)
        self._restart_all: Optional[QAction] = None
        self._arrange_window: Optional[AppListWindow] = None
        self._rebuild_menu([])

        self._settings_timer = QTimer(self)
        self._settings_timer.setInterval(SETTINGS_REFRESH_INTERVAL_MS)
        self._settings_timer.timeout.connect(self._reload_settings)

    def start(self) -> None:
        self._logger.info("Starting application coordinator.")
        self._apply_settings(self._initial_settings, initial=True)
        self._settings_timer.start()

    def shutdown(self) -> None:
        self._logger.info("Shutting down application on user request.")
        self._manual_shutdown_requested = True
        self.engine.stop()
        if self.engine.restart_queue.busy:
            self._logger.info("Waiting for the running restart batch to finish.")
            self.engine.restart_queue.wait_for_done(RESTART_SHUTDOWN_TIMEOUT_MS)
        self._settings_timer.stop()
        if self._arrange_window is not None:
            self._arrange_window.close()
        self._tray.hide()
        QApplication.instance().quit()

    @property
    def manual_shutdown_requested(self) -> bool:
        return self._manual_shutdown_requested

    def icon_for(self, app: ManagedApplication) -> QIcon:
        if isinstance(app.icon, QIcon) and not app.icon.isNull():
            return app.icon
        for candidate in (app.icon, app.location):
            if isinstance(candidate, str) and candidate and Path(candidate).exists():
                return self._icon_provider.icon(QFileInfo(candidate))
        return self._fallback_icon

    # --- settings ------------------------------------------------------

    def _reload_settings(self) -> None:
        new_settings = self.settings_manager.read_settings()
        if new_settings != self._settings:
            self._logger.info("Detected settings change. Applying updates.")
            self._apply_settings(new_settings)

    def _apply_settings(self, settings: CoreSettings, *, initial: bool = False) -> None:
        self._settings = settings

        rules_path = resolve_rules_path(settings)
        if rules_path != self._rules_path:
            self._rules_path = rules_path
            self.engine.set_rules(load_rules(rules_path))

        if not settings.enabled:
            if self.engine.scheduler.active or initial:
                self._logger.info("Core disabled via settings; pausing background work.")
            self.engine.stop()
            if self._tray.isVisible():
                self._tray.hide()
            return

        if settings.show_tray_icon:
            if not self._tray.isVisible():
                self._tray.show()
        elif self._tray.isVisible():
            self._tray.hide()

        self.engine.apply_settings(settings)

        if not self.engine.scheduler.active:
            self.engine.start()

    # --- menu ----------------------------------------------------------

    def _manual_refresh(self) -> None:
        if not self._settings.enabled:
            self._logger.debug("Manual refresh ignored because core is disabled.")
            return
        self._logger.info("Manual refresh triggered from tray menu.")
        self.engine.refresh(force=True)

    def _rebuild_menu(self, apps: list) -> None:
        menu = self._menu
        menu.clear()

        if apps:
            for app in apps:
                action = QAction(self.icon_for(app), app.title, menu)
                action.setToolTip(describe_status(app))
                action.triggered.connect(lambda _checked=False, identity=app.identity: self.engine.activate(identity))
                menu.addAction(action)
        else:
            empty = QAction("No menu bar apps found", menu)
            empty.setEnabled(False)
            menu.addAction(empty)
        menu.addSeparator()

        self._restart_menu.clear()
        for app in apps:
            action = QAction(app.title, self._restart_menu)
            action.triggered.connect(lambda _checked=False, identity=app.identity: self._restart([identity]))
            self._restart_menu.addAction(action)
        menu.addMenu(self._restart_menu)

        self._restart_all = QAction("Restart All", menu)
        self._restart_all.triggered.connect(lambda _checked=False: self._restart_all_apps())
        menu.addAction(self._restart_all)
        self._sync_restart_actions()

        arrange = QAction("Arrange…", menu)
        arrange.triggered.connect(self._show_arrange_window)
        menu.addAction(arrange)

        suggestions = QAction("Cleanup Suggestions", menu)
        suggestions.triggered.connect(self._show_suggestions)
        menu.addAction(suggestions)

        menu.addSeparator()
        refresh_action = QAction("Refresh Now", menu)
        refresh_action.triggered.connect(self._manual_refresh)
        menu.addAction(refresh_action)
        exit_action = QAction("Exit", menu)
        exit_action.triggered.connect(self.shutdown)
        menu.addAction(exit_action)

    def _restart(self, identities: list) -> None:
        self.engine.restart(identities)
        self._sync_restart_actions()

    def _restart_all_apps(self) -> None:
        self.engine.restart_all()
        self._sync_restart_actions()

    def _sync_restart_actions(self) -> None:
        # One batch at a time from the menu; the queue would serialise extras anyway.
        enabled = bool(self.engine.applications) and not self.engine.restart_queue.busy
        self._restart_menu.setEnabled(enabled)
        if self._restart_all is not None:
            self._restart_all.setEnabled(enabled)

    def _show_arrange_window(self) -> None:
        if self._arrange_window is None:
            self._arrange_window = AppListWindow(self.engine, self.icon_for)
        self._arrange_window.populate(self.engine.applications)
        self._arrange_window.show()
        self._arrange_window.raise_()
        self._arrange_window.activateWindow()

    def _show_suggestions(self) -> None:
        candidates = self.engine.suggestions()
        if not candidates:
            message = "Nothing to clean up. Every running utility looks useful."
        else:
            names = ", ".join(app.title for app in candidates)
            message = f"Consider hiding or quitting: {names}"
        self._logger.info("Cleanup suggestions: {}", [app.identity for app in candidates])
        self._notify("Cleanup Suggestions", message)

    def _notify(self, title: str, message: str, icon=QSystemTrayIcon.Information) -> None:
        if self._tray.isVisible():
            self._tray.showMessage(title, message, icon, TRAY_MESSAGE_TIMEOUT_MS)

    # --- engine signals ------------------------------------------------

    def _on_published(self, apps: list, count_changed: bool) -> None:
        if count_changed:
            self._logger.debug("Application count is now {}", len(apps))
        self._tray.setToolTip(f"{APP_NAME}: {len(apps)} menu bar apps")
        self._rebuild_menu(apps)

    def _on_activation_finished(self, app: ManagedApplication, outcome: ActivationOutcome) -> None:
        if outcome.succeeded:
            self._logger.debug("Activated {} via {}", app.identity, outcome.via.name)
            return
        self._logger.warning("Could not activate {}", app.identity)
        self._notify(APP_NAME, f"Could not open {app.title}.", QSystemTrayIcon.Warning)

    def _on_reorder_completed(self, apps: list, source: str, target: str) -> None:
        self._rebuild_menu(apps)
        self._notify(
            "Order updated",
            "Hold Cmd and drag icons in the menu bar to match this order.",
        )

    def _on_restart_progress(self, index: int, total: int, title: str) -> None:
        self._tray.setToolTip(f"{APP_NAME}: restarting {title} ({index}/{total})")

    def _on_restart_finished(self, outcomes: list) -> None:
        relaunched = sum(1 for outcome in outcomes if outcome.relaunched)
        self._notify("Restart complete", f"Relaunched {relaunched} of {len(outcomes)} applications.")
        self._sync_restart_actions()
