"""System tray entry with Show/Quit actions."""
from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

Translator = Callable[[str], str]


class AppTray(QObject):
    """Owns the tray icon; clicking it or choosing Show brings the window back."""

    show_requested = Signal()
    quit_requested = Signal()

    def __init__(self, translator: Translator, icon: QIcon, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._menu = QMenu()
        self.show_action = self._menu.addAction(translator("tray_show"))
        self.quit_action = self._menu.addAction(translator("tray_quit"))
        self.show_action.triggered.connect(lambda _checked=False: self.show_requested.emit())
        self.quit_action.triggered.connect(lambda _checked=False: self.quit_requested.emit())
        self._icon = QSystemTrayIcon(icon, self)
        self._icon.setToolTip(translator("window_title"))
        self._icon.setContextMenu(self._menu)
        self._icon.activated.connect(self._on_activated)

    @staticmethod
    def is_available() -> bool:
        return QSystemTrayIcon.isSystemTrayAvailable()

    def show(self) -> None:
        if self.is_available():
            self._icon.show()

    def hide(self) -> None:
        self._icon.hide()

    def _on_activated(self, reason) -> None:
        if reason in (QSystemTrayIcon.ActivationReason.Trigger, QSystemTrayIcon.ActivationReason.DoubleClick):
            self.show_requested.emit()
