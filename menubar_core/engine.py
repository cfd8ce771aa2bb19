"""
Control-thread coordinator for discovery, publication, reordering and
activation of status-area applications.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from menubar_core.activation import ActivationOutcome, ActivationStrategy
from menubar_core.advisor import suggest_apps_to_hide
from menubar_core.change_detector import ChangeDetector
from menubar_core.discovery import ScanResult, scan_applications
from menubar_core.providers import ActivationProvider, HostRefreshHint, NullRefreshHint, SnapshotProvider
from menubar_core.reorder import DRAG_THRESHOLD, ReorderSession
from menubar_core.restart_queue import RestartQueue
from menubar_core.scheduler import DEFAULT_POLL_INTERVAL_SECONDS, PollScheduler
from menubar_core.settings import CoreSettings
from menubar_shared.application import ManagedApplication
from menubar_shared.rules_schema import ClassificationRules
from menubar_manager.menubar_manager import logger as app_logger


class StatusAreaEngine(QObject):
    """
    Owns the published ordering and every piece of state derived from it.

    All methods must be called on the thread that owns the engine; restart
    results arrive from the worker through queued signals.
    """

    published = Signal(object, bool)
    activationFinished = Signal(object, object)
    reorderCompleted = Signal(object, str, str)
    restartProgress = Signal(int, int, str)
    restartFinished = Signal(object)

    def __init__(
        self,
        provider: SnapshotProvider,
        rules: Optional[ClassificationRules] = None,
        *,
        activation_provider: Optional[ActivationProvider] = None,
        refresh_hint: Optional[HostRefreshHint] = None,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        drag_threshold: float = DRAG_THRESHOLD,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        self._provider = provider
        self._base_rules = rules or ClassificationRules()
        self._rules = self._base_rules
        self._require_icon_setting = False
        self._refresh_hint = refresh_hint or NullRefreshHint()
        self._drag_threshold = drag_threshold

        self._activation = ActivationStrategy(activation_provider or provider)
        self._restart_queue = RestartQueue(self._activation, self)
        self._restart_queue.progress.connect(self.restartProgress)
        self._restart_queue.finished.connect(self._on_restart_finished)

        self._detector = ChangeDetector()
        self._session: Optional[ReorderSession] = None
        self._menu_open = False
        self._manual_order: List[str] = []
        self._published: List[ManagedApplication] = []
        self._last_result: Optional[ScanResult] = None

        self.scheduler = PollScheduler(poll_interval_seconds, self)
        self.scheduler.tick.connect(self._on_tick)

    @property
    def rules(self) -> ClassificationRules:
        return self._rules

    @property
    def applications(self) -> List[ManagedApplication]:
        return list(self._published)

    @property
    def last_result(self) -> Optional[ScanResult]:
        return self._last_result

    @property
    def restart_queue(self) -> RestartQueue:
        return self._restart_queue

    @property
    def is_dragging(self) -> bool:
        return self._session is not None and self._session.is_dragging

    @property
    def is_interacting(self) -> bool:
        return self._menu_open or self.is_dragging

    def start(self) -> None:
        self.scheduler.start()
        self.refresh(force=True)

    def stop(self) -> None:
        self.scheduler.stop()

    def apply_settings(self, settings: CoreSettings) -> None:
        if settings.require_icon != self._require_icon_setting:
            self._require_icon_setting = settings.require_icon
            self._rebuild_rules()
        self._restart_queue.wait_seconds = settings.restart_wait_seconds
        self._restart_queue.gap_seconds = settings.restart_gap_seconds
        if self.scheduler.set_interval(settings.poll_interval_seconds):
            self._logger.info("Polling interval updated to {} ms.", self.scheduler.interval_ms)

    def set_rules(self, rules: ClassificationRules) -> None:
        self._base_rules = rules
        self._rebuild_rules()

    def _rebuild_rules(self) -> None:
        # The setting can only tighten a rules file, never relax it.
        require_icon = self._base_rules.require_icon or self._require_icon_setting
        self._rules = self._base_rules.with_require_icon(require_icon)
        self._detector.force_next()

    def set_menu_open(self, is_open: bool) -> None:
        """Opening the menu publishes a fresh snapshot before ticks are suppressed."""
        if is_open and not self._menu_open:
            self.refresh(force=True)
        self._menu_open = is_open

    def find(self, identity: str) -> Optional[ManagedApplication]:
        for app in self._published:
            if app.identity == identity:
                return app
        return None

    # --- discovery -----------------------------------------------------

    def refresh(self, *, force: bool = False) -> bool:
        """Run the pipeline once; returns whether a new ordering was published."""
        result = scan_applications(self._provider, self._rules, manual_order=self._manual_order)
        self._last_result = result
        if not result.ok:
            self._logger.warning("Keeping previous list after a failed snapshot.")
            return False

        if force:
            self._detector.force_next()
        decision = self._detector.on_tick(result.applications, interacting=self.is_interacting)
        if not decision.should_publish:
            return False

        count_changed = len(decision.ordered) != len(self._published)
        self._published = decision.ordered
        self._logger.info("Publishing {} status-area applications.", len(self._published))
        self.published.emit(list(self._published), count_changed)
        return True

    def _on_tick(self) -> None:
        self.refresh()

    def _schedule_refresh(self, *, force: bool = False) -> None:
        QTimer.singleShot(0, lambda: self.refresh(force=force))

    # --- reordering ----------------------------------------------------

    def press(self, identity: str, x: float, y: float) -> bool:
        """Arm a drag gesture on ``identity``; rejected while another gesture is active."""
        if self._session is not None or self.find(identity) is None:
            return False
        session = ReorderSession(self._drag_threshold)
        session.press(identity, x, y)
        self._session = session
        return True

    def move(self, x: float, y: float) -> bool:
        if self._session is None:
            return False
        return self._session.move(x, y)

    def drop(self, target: Optional[str]) -> bool:
        """Finish the gesture over ``target``; returns whether the order changed."""
        session, self._session = self._session, None
        if session is None or not session.drop(target):
            return False

        source, target_id = session.source, session.target
        reordered = session.complete(self._published)
        if [app.identity for app in reordered] == [app.identity for app in self._published]:
            return False

        self._published = reordered
        self._manual_order = [app.identity for app in reordered]
        self._detector.replace_sequence(reordered)
        self._logger.info("Moved {} onto {}.", source, target_id)
        self.reorderCompleted.emit(list(reordered), source, target_id)
        return True

    def release(self) -> None:
        """Pointer released without a drop target; a click or an abandoned drag."""
        if self._session is not None:
            self._session.release()
        self._session = None

    # --- activation ----------------------------------------------------

    def activate(self, identity: str) -> Optional[ActivationOutcome]:
        app = self.find(identity)
        if app is None:
            self._logger.warning("Activation requested for unknown application {}", identity)
            return None
        outcome = self._activation.activate(app)
        self.activationFinished.emit(app, outcome)
        self._schedule_refresh()
        return outcome

    def restart(self, identities: Sequence[str]) -> bool:
        apps = [app for app in (self.find(identity) for identity in identities) if app is not None]
        if not apps:
            self._logger.warning("Nothing to restart for {}", list(identities))
            return False
        self._logger.info("Queueing restart of {} application(s).", len(apps))
        return self._restart_queue.enqueue(apps)

    def restart_all(self) -> bool:
        return self.restart([app.identity for app in self._published])

    def suggestions(self) -> List[ManagedApplication]:
        return suggest_apps_to_hide(self._published, self._rules.low_priority_keywords)

    def _on_restart_finished(self, outcomes: list) -> None:
        relaunched = sum(1 for outcome in outcomes if outcome.relaunched)
        self._logger.info("Restart batch finished: {}/{} relaunched.", relaunched, len(outcomes))
        self.restartFinished.emit(outcomes)
        self._refresh_hint.attempt_host_refresh_hint()
        self.refresh(force=True)
