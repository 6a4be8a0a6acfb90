from __future__ import annotations

import os
from pathlib import Path

import orjson
from platformdirs import user_data_dir

APP_NAME = "Smart Calendar"
APP_AUTHOR = "SmartCalendar"
DATA_DIR = Path(os.getenv("SMART_CALENDAR_DATA_DIR") or user_data_dir(APP_NAME, APP_AUTHOR))
DATABASE_FILE = DATA_DIR / "calendar.json"
DEFAULT_DATABASE_CONTENT = {
    "tasks": [],
    "events": [],
    "categories": [],
    "sync_state": [],
    "sessions": [],
    "metadata": {"schema_version": 1},
}


def ensure_data_dir(path: Path | None = None) -> Path:
    database_file = path or DATABASE_FILE
    database_file.parent.mkdir(parents=True, exist_ok=True)
    if not database_file.exists():
        database_file.write_bytes(orjson.dumps(DEFAULT_DATABASE_CONTENT, option=orjson.OPT_INDENT_2) + b"\n")
    return database_file
