# maxq/__main__.py
import sys

from PySide6.QtWidgets import QApplication

from .main_window import MainWindow
from .utils.log import setup_logging


def main() -> int:
    setup_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("3ds Max Render Queue")
    win = MainWindow()
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
