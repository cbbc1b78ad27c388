"""Application entry point."""
from __future__ import annotations

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication
from PySide6.QtWidgets import QMessageBox

from .config import ConfigurationError, get_settings
from .gui import MainWindow
from .i18n import translate


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Watch TCP listeners in port ranges")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logging.exception("Failed to load configuration")
        QMessageBox.critical(
            None,
            translate("config_error_title"),
            translate("config_error_body").format(detail=exc),
        )
        return 1
    window = MainWindow(settings)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
