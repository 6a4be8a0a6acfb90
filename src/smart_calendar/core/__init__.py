"""Application paths and on-disk defaults."""

from .config import APP_NAME, DATA_DIR, DATABASE_FILE, DEFAULT_DATABASE_CONTENT, ensure_data_dir

__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "DATABASE_FILE",
    "DEFAULT_DATABASE_CONTENT",
    "ensure_data_dir",
]
