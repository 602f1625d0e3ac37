"""Application entry point."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from formbuilder import config
from formbuilder.ui.main_window import MainWindow


def main() -> int:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
