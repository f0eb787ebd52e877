# maxq/utils/resolver.py
import logging
import os
from pathlib import Path

from .errors import StorageError

log = logging.getLogger(__name__)

VENDOR_DIR = "Autodesk"
INSTALL_DIR_MARKER = "3ds Max"
RENDERER_EXE = "3dsmaxcmd.exe"


def default_base_dirs() -> list[Path]:
    """Program Files locations to search, skipping the unset ones."""
    bases = [os.environ.get("ProgramFiles"), os.environ.get("ProgramFiles(x86)")]
    return [Path(b) / VENDOR_DIR for b in bases if b]


class RendererResolver:
    def __init__(self, store, base_dirs: list[Path] | None = None):
        self.store = store
        self.base_dirs = base_dirs

    def resolve(self) -> Path | None:
        if cached := self.store.get().get("max_path", ""):
            return Path(cached)

        for base in self.base_dirs if self.base_dirs is not None else default_base_dirs():
            if found := self._scan(base):
                log.info("Detected 3ds Max at %s", found)
                try:
                    self.store.set({"max_path": str(found)})
                except StorageError as e:
                    log.warning("Could not cache renderer path: %s", e)
                return found

        log.info("3ds Max installation not found")
        return None

    def _scan(self, base: Path) -> Path | None:
        if not base.is_dir():
            return None
        try:
            # Newest release first, "3ds Max 2025" sorts above "3ds Max 2024"
            candidates = sorted(
                (d for d in base.iterdir() if d.is_dir() and INSTALL_DIR_MARKER in d.name),
                key=lambda d: d.name,
                reverse=True,
            )
        except OSError as e:
            log.warning("Error scanning %s: %s", base, e)
            return None
        for install_dir in candidates:
            if (exe := install_dir / RENDERER_EXE).is_file():
                return exe
        return None
