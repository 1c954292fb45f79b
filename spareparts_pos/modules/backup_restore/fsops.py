"""
modules/backup_restore/fsops.py

Purpose
-------
File-system utilities for the backup folder, with attention to atomicity.

Public interface
----------------
- ensure_writable_dir(path) -> None
- get_free_space_bytes(path) -> int
- make_temp_file(suffix="", dir=None) -> str
- atomic_move(src, dest) -> None
- human_size(num) -> str
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

__all__ = [
    "ensure_writable_dir",
    "get_free_space_bytes",
    "make_temp_file",
    "atomic_move",
    "human_size",
]


def _fsync_file(path: Path) -> None:
    fd = os.open(str(path), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def human_size(num: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(max(0, int(num)))
    for u in units:
        if size < 1024.0 or u == units[-1]:
            return f"{size:.1f} {u}"
        size /= 1024.0
    return f"{size:.1f} TB"


def ensure_writable_dir(path: str | Path) -> None:
    """
    Create `path` if needed and check it is a writable directory.
    Raise RuntimeError with a helpful message if not.
    """
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    if not p.is_dir():
        raise RuntimeError(f"Backup path is not a folder: {p}")
    if not os.access(str(p), os.W_OK | os.X_OK):
        raise RuntimeError(f"Backup folder is not writable: {p}")


def get_free_space_bytes(path: str | Path) -> int:
    """Available free space in bytes on the filesystem containing `path`."""
    probe = Path(path)
    if not probe.exists():
        probe = probe.parent if probe.parent.exists() else Path.home()
    return int(shutil.disk_usage(str(probe)).free)


def make_temp_file(suffix: str = "", dir: Optional[str | Path] = None) -> str:
    """
    Create a file on disk that persists after close and return its absolute
    path. Caller is responsible for cleanup or moving.
    """
    d = Path(dir) if dir else Path(tempfile.gettempdir())
    d.mkdir(parents=True, exist_ok=True)
    f = tempfile.NamedTemporaryFile(prefix="spareparts_", suffix=suffix, dir=str(d), delete=False)
    f_path = Path(f.name).resolve()
    f.close()
    return str(f_path)


def atomic_move(src: str | Path, dest: str | Path) -> None:
    """
    Move `src` to `dest` so `dest` is either absent or complete. Same-volume
    moves use os.replace; across volumes the bytes are copied next to `dest`
    first, then replaced into place.
    """
    src_p = Path(src).resolve()
    dest_p = Path(dest).resolve()
    dest_p.parent.mkdir(parents=True, exist_ok=True)
    if src_p.parent == dest_p.parent:
        _fsync_file(src_p)
        os.replace(str(src_p), str(dest_p))
        return
    tmp_dest = dest_p.with_suffix(dest_p.suffix + ".part")
    shutil.copy2(str(src_p), str(tmp_dest))
    _fsync_file(tmp_dest)
    os.replace(str(tmp_dest), str(dest_p))
    src_p.unlink(missing_ok=True)
