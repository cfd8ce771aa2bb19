"""
Background restart execution, one application at a time.
"""

from __future__ import annotations

import time
from typing import Callable, List, Sequence

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from menubar_core.activation import DEFAULT_RESTART_WAIT_SECONDS, ActivationStrategy, RestartOutcome
from menubar_shared.application import ManagedApplication
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()

DEFAULT_RESTART_GAP_SECONDS = 0.5


class RestartSignals(QObject):
    """Delivered on the control thread through queued connections."""

    progress = Signal(int, int, str)
    finished = Signal(object)


class RestartWorker(QRunnable):
    """Restarts a batch strictly sequentially: each app finishes before the next starts."""

    def __init__(
        self,
        apps: Sequence[ManagedApplication],
        strategy: ActivationStrategy,
        *,
        wait_seconds: float = DEFAULT_RESTART_WAIT_SECONDS,
        gap_seconds: float = DEFAULT_RESTART_GAP_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__()
        self.signals = RestartSignals()
        self._apps = list(apps)
        self._strategy = strategy
        self._wait_seconds = wait_seconds
        self._gap_seconds = gap_seconds
        self._sleep = sleep

    def run(self) -> None:
        outcomes: List[RestartOutcome] = []
        total = len(self._apps)
        for index, app in enumerate(self._apps, start=1):
            _LOGGER.info("[restart {}/{}] {}", index, total, app.title)
            self.signals.progress.emit(index, total, app.title)
            outcomes.append(self._strategy.restart(app, wait_seconds=self._wait_seconds))
            if index < total and self._gap_seconds > 0:
                self._sleep(self._gap_seconds)
        self.signals.finished.emit(outcomes)


class RestartQueue(QObject):
    """
    Owns a single-thread pool so that at most one restart is ever in flight;
    batches submitted while another runs wait their turn.
    """

    progress = Signal(int, int, str)
    finished = Signal(object)

    def __init__(self, strategy: ActivationStrategy, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._strategy = strategy
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(1)
        self._pending = 0
        self.wait_seconds = DEFAULT_RESTART_WAIT_SECONDS
        self.gap_seconds = DEFAULT_RESTART_GAP_SECONDS

    @property
    def busy(self) -> bool:
        return self._pending > 0

    def enqueue(self, apps: Sequence[ManagedApplication]) -> bool:
        if not apps:
            return False
        worker = self.create_worker(apps)
        self._pending += 1
        self._pool.start(worker)
        return True

    def create_worker(self, apps: Sequence[ManagedApplication]) -> RestartWorker:
        worker = RestartWorker(
            apps,
            self._strategy,
            wait_seconds=self.wait_seconds,
            gap_seconds=self.gap_seconds,
        )
        worker.signals.progress.connect(self.progress)
        worker.signals.finished.connect(self._on_worker_finished)
        return worker

    def wait_for_done(self, timeout_ms: int = -1) -> bool:
        return self._pool.waitForDone(timeout_ms)

    def _on_worker_finished(self, outcomes: list) -> None:
        self._pending = max(0, self._pending - 1)
        self.finished.emit(outcomes)
