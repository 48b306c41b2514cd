from __future__ import annotations

import os
from pathlib import Path

__all__ = [
    "ensure_working_dir_structure",
    "get_catalog_db_path",
    "get_data_dir",
    "get_default_settings_paths",
    "get_logs_dir",
    "resolve_working_dir",
    "to_long_path",
]

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_IS_WINDOWS = os.name == "nt"
_WINDOWS_MAX_PATH = 260
_LONG_PATH_PREFIX = "\\\\?\\"
_UNC_PREFIX = "\\\\"
_LONG_UNC_PREFIX = "\\\\?\\UNC\\"


def _needs_long_prefix(path: str) -> bool:
    return len(path) >= (_WINDOWS_MAX_PATH - 12)


def to_long_path(path: str | os.PathLike[str]) -> str:
    """Return a version of *path* that is safe for Windows long-path APIs."""

    text = str(path)
    if not _IS_WINDOWS:
        return text
    normalized = text.replace("/", "\\")
    if normalized.startswith(_LONG_PATH_PREFIX):
        return normalized
    if normalized.startswith(_UNC_PREFIX):
        trimmed = normalized.lstrip("\\")
        return f"{_LONG_UNC_PREFIX}{trimmed}"
    if _needs_long_prefix(normalized):
        return f"{_LONG_PATH_PREFIX}{normalized}"
    return normalized


def _expand_path(value: str) -> Path:
    expanded = os.path.expandvars(os.path.expanduser(value))
    return Path(expanded).resolve()


def _prepare_working_dir(candidate: Path) -> Path | None:
    try:
        (candidate / "data").mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    return candidate


def resolve_working_dir() -> Path:
    """Resolve the content catalog working directory, creating it if required."""

    env_home = os.environ.get("CONTENTCATALOG_HOME")
    if env_home:
        try:
            env_path = _expand_path(env_home)
        except (OSError, RuntimeError):
            env_path = None
        if env_path:
            prepared = _prepare_working_dir(env_path)
            if prepared is not None:
                return prepared

    prepared = _prepare_working_dir(Path.home() / ".contentcatalog")
    if prepared is not None:
        return prepared

    fallback = _PROJECT_ROOT / ".contentcatalog"
    (fallback / "data").mkdir(parents=True, exist_ok=True)
    return fallback


def get_data_dir(working_dir: Path) -> Path:
    return working_dir / "data"


def get_catalog_db_path(working_dir: Path) -> Path:
    return get_data_dir(working_dir) / "catalog.db"


def get_logs_dir(working_dir: Path) -> Path:
    return working_dir / "logs"


def ensure_working_dir_structure(working_dir: Path) -> None:
    for directory in (
        working_dir,
        get_data_dir(working_dir),
        get_logs_dir(working_dir),
    ):
        directory.mkdir(parents=True, exist_ok=True)


def get_default_settings_paths(working_dir: Path) -> list[Path]:
    """Return the search order for settings.json files."""

    return [working_dir / "settings.json", _PROJECT_ROOT / "settings.json"]
