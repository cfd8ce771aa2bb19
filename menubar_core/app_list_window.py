"""
Drag-to-arrange list of the published applications.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtGui import QIcon, QMouseEvent
from PySide6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem

from menubar_core.advisor import describe_status
from menubar_core.engine import StatusAreaEngine
from menubar_shared.application import ManagedApplication

_IDENTITY_ROLE = Qt.UserRole + 1


class AppListWindow(QListWidget):
    """
    Mirrors the engine ordering. Pointer gestures are forwarded to the
    engine's reorder session; the widget never reorders rows itself.
    """

    def __init__(
        self,
        engine: StatusAreaEngine,
        icon_for: Callable[[ManagedApplication], QIcon],
    ) -> None:
        super().__init__()
        self._engine = engine
        self._icon_for = icon_for
        self.setWindowTitle("Arrange Menu Bar Apps")
        self.setDragDropMode(QAbstractItemView.NoDragDrop)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setMinimumSize(320, 360)

        engine.published.connect(self._on_published)
        engine.reorderCompleted.connect(self._on_reordered)
        self.populate(engine.applications)

    def populate(self, apps: Sequence[ManagedApplication]) -> None:
        self.clear()
        for app in apps:
            item = QListWidgetItem(self._icon_for(app), app.title)
            item.setData(_IDENTITY_ROLE, app.identity)
            item.setToolTip(f"{app.identity}\n{describe_status(app)}")
            self.addItem(item)

    def _identity_at(self, event: QMouseEvent) -> Optional[str]:
        item = self.itemAt(event.position().toPoint())
        if item is None:
            return None
        return item.data(_IDENTITY_ROLE)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.LeftButton:
            identity = self._identity_at(event)
            if identity is not None:
                position = event.position()
                self._engine.press(identity, position.x(), position.y())
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        position = event.position()
        if self._engine.move(position.x(), position.y()):
            self.viewport().setCursor(Qt.ClosedHandCursor)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        self.viewport().unsetCursor()
        if self._engine.is_dragging:
            self._engine.drop(self._identity_at(event))
        else:
            self._engine.release()
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        identity = self._identity_at(event)
        if identity is not None:
            self._engine.activate(identity)
        super().mouseDoubleClickEvent(event)

    def _on_published(self, apps: list, _count_changed: bool) -> None:
        if not self._engine.is_dragging:
            self.populate(apps)

    def _on_reordered(self, apps: list, _source: str, _target: str) -> None:
        self.populate(apps)
