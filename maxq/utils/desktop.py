# maxq/utils/desktop.py
import logging
from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices

log = logging.getLogger(__name__)


def open_folder(path: str | Path | None) -> bool:
    """Open a folder (or file) with the desktop's default handler."""
    if not path or not Path(path).exists():
        log.warning("Nothing to open at %s", path)
        return False
    ok = QDesktopServices.openUrl(QUrl.fromLocalFile(str(path)))
    if not ok:
        log.warning("Desktop refused to open %s", path)
    return ok
