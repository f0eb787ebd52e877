# maxq/utils/paths.py
import re
from pathlib import Path

MAX_EXTENSIONS = {".max"}
OUTPUT_EXTENSION = ".jpg"


def safe_name(s: str) -> str:
    s = re.sub(r'[\\/:*?"<>|]+', " ", s).strip()
    s = re.sub(r"\s+", " ", s)
    return s or "Unnamed"


def is_max_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in MAX_EXTENSIONS


def output_dir_for(output_root: str | Path, project_name: str | None) -> Path:
    root = Path(output_root).expanduser()
    if project_name and project_name.strip():
        return root / safe_name(project_name)
    return root


def output_file_name(source_path: str | Path, override: str | None = None) -> str:
    if override and override.strip():
        return override.strip()
    return f"{Path(source_path).stem}{OUTPUT_EXTENSION}"


def render_log_path(output_path: Path) -> Path:
    return output_path.with_name(f"{output_path.stem}_render.log")
