"""Regression tests for the CLI entrypoint helpers."""
from __future__ import annotations

import argparse
import importlib
import sys
import types

from port_o_potty import gui
from port_o_potty import main as entry


def test_build_arg_parser_includes_debug_flag():
    parser = entry.build_arg_parser()
    assert isinstance(parser, argparse.ArgumentParser)
    args = parser.parse_args(["--debug"])
    assert args.debug is True


def test_main_exits_when_configuration_fails(monkeypatch):
    class FakeWindow:
        def __init__(self, *args, **kwargs):
            pass

        def show(self):
            pass

    class FakeApplication:
        def __init__(self, *_):
            pass

        def setQuitOnLastWindowClosed(self, value):
            pass

        def exec(self):
            return 0

    class FakeMessageBox:
        def critical(self, *args, **kwargs):
            self.args = args

    fake_message_box = FakeMessageBox()
    monkeypatch.setattr(entry, "QApplication", FakeApplication)
    monkeypatch.setattr(entry, "MainWindow", FakeWindow)
    monkeypatch.setattr(entry, "QMessageBox", fake_message_box)
    monkeypatch.setattr(entry.logging, "exception", lambda *_: None)

    def fake_get_settings():
        raise entry.ConfigurationError("boom")

    monkeypatch.setattr(entry, "get_settings", fake_get_settings)

    assert entry.main([]) == 1
    assert "boom" in fake_message_box.args[2]


def test_main_runs_success_path(monkeypatch):
    events: dict[str, object] = {}
    expected_exit_code = 7

    class FakeApplication:
        def __init__(self, argv):
            events["argv"] = list(argv)

        def setQuitOnLastWindowClosed(self, value):
            events["quit_on_last_window"] = value

        def exec(self):
            return expected_exit_code

    class FakeWindow:
        def __init__(self, settings):
            events["window_settings"] = settings

        def show(self):
            events["window_shown"] = True

    class FakeSettings:
        pass

    settings = FakeSettings()
    monkeypatch.setattr(entry, "QApplication", FakeApplication)
    monkeypatch.setattr(entry, "MainWindow", FakeWindow)
    monkeypatch.setattr(entry, "get_settings", lambda: settings)
    monkeypatch.setattr(entry, "QMessageBox", types.SimpleNamespace(critical=lambda *args, **kwargs: None))

    result = entry.main(["--debug"])

    assert result == expected_exit_code
    assert events["window_shown"] is True
    assert events["window_settings"] is settings
    assert events["quit_on_last_window"] is False


def test_importing_entrypoint_leaves_sys_path_alone(monkeypatch):
    original = list(sys.path)
    monkeypatch.setattr(sys, "path", list(original))

    importlib.reload(entry)

    assert sys.path == original
    assert entry.MainWindow is gui.MainWindow
