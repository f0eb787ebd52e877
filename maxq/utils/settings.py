# maxq/utils/settings.py
import copy
import json
import logging
from pathlib import Path

from .errors import StorageError

log = logging.getLogger(__name__)

# Top directory = folder that contains the `maxq/` package
def _top_dir() -> Path:
    # This file is maxq/utils/settings.py → parents[2] is the folder above maxq/
    return Path(__file__).resolve().parents[2]

APP_SETTINGS_FILE = _top_dir() / "maxq_settings.json"

DEFAULT_SETTINGS = {
    "output_root": str(Path.home() / "Documents" / "Renders"),
    "max_path": "",                    # empty => auto-detect 3dsmaxcmd.exe
    "extra_args": "",
    "extra_env": {},                   # environment overrides for the renderer
    "verbosity": 5,                    # -v:N, high enough for progress lines
    "project_name": "",
    # layout persistence:
    # "col_widths": [...],
    # "center_split_sizes": [...],
    # "v_split_sizes": [...],
}


def load_settings(path: Path | None = None) -> dict:
    p = path or APP_SETTINGS_FILE
    if not p.exists():
        return copy.deepcopy(DEFAULT_SETTINGS)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise StorageError(f"Cannot read settings from {p}: {e}") from e
    except ValueError as e:
        raise StorageError(f"Settings file {p} is corrupt: {e}") from e
    if not isinstance(data, dict):
        raise StorageError(f"Settings file {p} does not hold an object")
    return {**copy.deepcopy(DEFAULT_SETTINGS), **data}


def save_settings(data: dict, path: Path | None = None) -> None:
    p = path or APP_SETTINGS_FILE
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot write settings to {p}: {e}") from e


class SettingsStore:
    """Key-value settings persisted as one JSON record.

    A failed read leaves the store on defaults; a failed write keeps the
    merged values in memory. Both raise ``StorageError`` so callers can
    report the problem and carry on.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or APP_SETTINGS_FILE
        self._data = copy.deepcopy(DEFAULT_SETTINGS)
        self.load_error: StorageError | None = None
        try:
            self._data = load_settings(self.path)
        except StorageError as e:
            log.warning("%s; using defaults", e)
            self.load_error = e

    def get(self) -> dict:
        return copy.deepcopy(self._data)

    def set(self, partial: dict) -> dict:
        self._data.update({k: v for k, v in partial.items() if v is not None})
        save_settings(self._data, self.path)
        return self.get()
