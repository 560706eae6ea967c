"""
File I/O helpers: exact-content reads and atomic writes.
"""

from __future__ import annotations

import os


def read_text(path: str) -> str:
    """Read *path* as UTF-8 without newline translation."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def safe_write(path: str, content: str) -> None:
    """Write *content* to *path* atomically via temp file + rename.

    Parent directories are created. Either the old or the new content is
    observable at *path*, never a partial write.
    """
    abs_path = os.path.abspath(path)
    os.makedirs(os.path.dirname(abs_path), exist_ok=True)
    tmp_path = abs_path + ".editgate_tmp"

    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, abs_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
