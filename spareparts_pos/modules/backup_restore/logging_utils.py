"""
Audit trail for backup, restore and delete operations.

Every event becomes one JSON object per line in ``<LOG_DIR>/backup_restore.log``:

    {"ts": "...Z", "level": "INFO", "op": "restore", "phase": "swap", "msg": "...", ...}

The logger is a child of the application logger, so warnings and errors also
reach the console handler installed by ``utils.loggers.get_logger``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

__all__ = ["get_logger", "log_event"]

AUDIT_LOGGER = "spareparts_pos.backup_restore"
AUDIT_FILE = "backup_restore.log"


class AuditLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        stamp = datetime.fromtimestamp(record.created, timezone.utc)
        line = {
            "ts": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
        }
        line.update(getattr(record, "audit", {}))
        line["msg"] = record.getMessage()
        return json.dumps(line, ensure_ascii=False, default=str)


def get_logger(file_path: Optional[str | Path] = None) -> logging.Logger:
    """Audit logger; the file handler is attached once per process."""
    logger = logging.getLogger(AUDIT_LOGGER)
    if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        return logger

    if file_path is None:
        from ...config import LOG_DIR

        file_path = LOG_DIR / AUDIT_FILE
    target = Path(file_path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # Console output still works through the parent logger
        logging.getLogger("spareparts_pos").warning("backup audit log disabled: %s", e)
        return logger

    handler = logging.FileHandler(target, encoding="utf-8", delay=True)
    handler.setFormatter(AuditLineFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


def log_event(
    logger: logging.Logger,
    op: str,
    phase: str,
    message: str,
    extra: Dict[str, object] | None = None,
    level: int = logging.INFO,
) -> None:
    """
    op is "backup", "restore" or "delete"; phase names the step
    ("preflight", "snapshot", "verify", "safety_copy", "swap", "rollback", "done").
    """
    audit = dict(extra or {})
    audit.update(op=op, phase=phase)
    logger.log(level, message, extra={"audit": audit})
