# spareparts_pos/config.py
import os
from pathlib import Path

from .constants import (
    BACKUP_DIR_NAME,
    DATA_DIR,
    DB_FILE_NAME,
    HOME_ENV_VAR,
    LOG_DIR_NAME,
    SETTINGS_FILE_NAME,
)

BASE_DIR = Path(__file__).resolve().parent
HOME_DIR = Path(os.environ.get(HOME_ENV_VAR, Path.home() / ".spareparts_pos")).expanduser()
DATA_PATH = HOME_DIR / DATA_DIR
DB_PATH = DATA_PATH / DB_FILE_NAME
SETTINGS_PATH = HOME_DIR / SETTINGS_FILE_NAME
BACKUP_DIR = HOME_DIR / BACKUP_DIR_NAME
LOG_DIR = HOME_DIR / LOG_DIR_NAME


def ensure_dirs() -> None:
    """Create the data/backup/log directories if missing."""
    for p in (DATA_PATH, BACKUP_DIR, LOG_DIR):
        p.mkdir(parents=True, exist_ok=True)
