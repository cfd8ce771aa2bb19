"""
Fixed-interval tick source driving the discovery pipeline.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, QTimer, Signal

DEFAULT_POLL_INTERVAL_SECONDS = 5


class PollScheduler(QObject):
    """
    Emits ``tick`` on the owning (control) thread every interval while started.
    Ticks are never queued up: a slow pipeline run simply delays the next one.
    """

    tick = Signal()

    def __init__(self, interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setInterval(_to_ms(interval_seconds))
        self._timer.timeout.connect(self._on_timeout)  # type: ignore[arg-type]
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def start(self) -> None:
        """Begin periodic ticks."""
        if self._active:
            return
        self._active = True
        self._timer.start()

    def stop(self) -> None:
        """Stop ticking."""
        if not self._active:
            return
        self._timer.stop()
        self._active = False

    def set_interval(self, interval_seconds: float) -> bool:
        """Change the period; returns whether it actually changed."""
        interval_ms = _to_ms(interval_seconds)
        if self._timer.interval() == interval_ms:
            return False
        self._timer.setInterval(interval_ms)
        return True

    def _on_timeout(self) -> None:
        if not self._active:
            return
        self.tick.emit()


def _to_ms(seconds: float) -> int:
    return max(1, int(round(seconds * 1000)))
