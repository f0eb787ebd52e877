# maxq/utils/log.py
import logging
import sys
from pathlib import Path

from .settings import APP_SETTINGS_FILE

LOG_FILE = APP_SETTINGS_FILE.with_name("maxq.log")


def setup_logging(level=logging.INFO, log_path: Path | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    path = log_path or LOG_FILE
    try:
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    except OSError as e:
        print(f"Cannot write log file {path}: {e}", file=sys.stderr)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
