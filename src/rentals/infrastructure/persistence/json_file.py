"""Shared file helpers for the JSON-backed repositories."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path


def atomic_write(path: Path, text: str) -> None:
    """Replace *path* with *text* so readers see the old or the new file, never a partial one."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


class JsonFile:
    """A JSON array stored in one file, read and written as a whole."""

    def __init__(self, file_path: Path) -> None:
        self.path = file_path
        self._ensure_file()

    def load(self) -> list[dict]:
        return json.loads(self.path.read_text(encoding="utf-8"))

    def persist(self, rows: list[dict]) -> None:
        atomic_write(self.path, json.dumps(rows, indent=2) + "\n")

    def upsert(self, row: dict, key: str = "id") -> None:
        rows = self.load()
        for i, existing in enumerate(rows):
            if existing[key] == row[key]:
                rows[i] = row
                break
        else:
            rows.append(row)
        self.persist(rows)

    def next_id(self) -> int:
        rows = self.load()
        if not rows:
            return 1
        return max(r["id"] for r in rows) + 1

    def _ensure_file(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self.path, "[]")
