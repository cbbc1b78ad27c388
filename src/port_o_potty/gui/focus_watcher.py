"""Translate Qt application/window state into a single focus signal."""
from __future__ import annotations

from PySide6.QtCore import QEvent, QObject, Qt, Signal
from PySide6.QtGui import QGuiApplication


class FocusWatcher(QObject):
    """Emits ``focus_changed`` when the window becomes usable or goes away.

    The window counts as focused while the application is active and the
    window itself is visible and not minimized.
    """

    focus_changed = Signal(bool)

    def __init__(self, window, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._window = window
        # Launch counts as focused; the window is shown right after construction.
        self._focused = True
        app = QGuiApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self._on_state_changed)
        window.installEventFilter(self)

    def is_focused(self) -> bool:
        return self._focused

    def eventFilter(self, watched, event):  # type: ignore[override]
        if watched is self._window and event.type() in (
            QEvent.Show,
            QEvent.Hide,
            QEvent.WindowStateChange,
        ):
            self._update()
        return super().eventFilter(watched, event)

    def _on_state_changed(self, _state) -> None:
        self._update()

    def _compute(self) -> bool:
        state = QGuiApplication.applicationState()
        if state != Qt.ApplicationState.ApplicationActive:
            return False
        return self._window.isVisible() and not self._window.isMinimized()

    def _update(self) -> None:
        focused = self._compute()
        if focused == self._focused:
            return
        self._focused = focused
        self.focus_changed.emit(focused)
