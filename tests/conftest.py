import os
from types import SimpleNamespace

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakeTimer:
    """Stands in for QTimer so cadence tests do not need an event loop."""

    def __init__(self):
        self.interval = None
        self.active = False
        self.start_count = 0
        self._callbacks = []
        self.timeout = SimpleNamespace(connect=self._callbacks.append)

    def setInterval(self, interval):
        self.interval = interval

    def start(self):
        self.active = True
        self.start_count += 1

    def stop(self):
        self.active = False

    def isActive(self):
        return self.active

    def fire(self):
        for callback in list(self._callbacks):
            callback()


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
