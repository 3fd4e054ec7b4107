from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "Lightning Calendar"
APP_AUTHOR = "LightningCalendar"
LOG_DIR = Path(os.getenv("LIGHTNING_LOG_DIR") or user_log_dir(APP_NAME, APP_AUTHOR))
LOG_FILE = LOG_DIR / "lightning_calendar.log"


def ensure_log_dir() -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR
