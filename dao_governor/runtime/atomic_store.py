# dao_governor/runtime/atomic_store.py
from __future__ import annotations

"""
Crash-safe JSON snapshots of governor state.

- Temp file + fsync + os.replace, then fsync of the directory
- Rolling backups (.bak1, .bak2, ...) rotated before each save
- Journal marker (.journal) written before a save and removed after it,
  so a leftover journal means the last save did not complete
- Load walks primary -> bak1 -> bak2 ... and returns the first snapshot
  that parses and carries the expected schema tag
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

log = logging.getLogger(__name__)

JsonDict = Dict[str, Any]
PathLike = Union[str, Path]

SCHEMA = "dao_governor/state@1"


def _fsync_dir(dir_path: Path) -> None:
    try:
        fd = os.open(str(dir_path), os.O_DIRECTORY)
    except (AttributeError, OSError):
        # O_DIRECTORY is unavailable on some platforms
        return
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def canonical_json(obj: JsonDict) -> bytes:
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(str(tmp_path), str(path))
        _fsync_dir(path.parent)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def _read_snapshot(path: Path) -> Optional[JsonDict]:
    if not path.exists():
        return None
    try:
        obj = json.loads(path.read_bytes().decode("utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        log.warning("Unreadable snapshot %s", path, exc_info=True)
        return None
    if not isinstance(obj, dict) or obj.get("schema") != SCHEMA:
        log.warning("Snapshot %s has unexpected schema; skipping", path)
        return None
    state = obj.get("state")
    return state if isinstance(state, dict) else None


class AtomicStateStore:
    def __init__(self, path: PathLike, *, keep_backups: int = 2) -> None:
        self.path = Path(path)
        self.keep_backups = max(0, int(keep_backups))

    @property
    def journal_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".journal")

    def backup_path(self, n: int) -> Path:
        return self.path.with_suffix(self.path.suffix + f".bak{n}")

    def exists(self) -> bool:
        return self.path.exists()

    def interrupted(self) -> bool:
        """True when a previous save left its journal behind."""
        return self.journal_path.exists()

    def _rotate_backups(self) -> None:
        if self.keep_backups <= 0:
            return
        for i in range(self.keep_backups, 1, -1):
            src = self.backup_path(i - 1)
            if src.exists():
                os.replace(str(src), str(self.backup_path(i)))
        if self.path.exists():
            os.replace(str(self.path), str(self.backup_path(1)))

    def load(self) -> Optional[JsonDict]:
        if self.interrupted():
            log.warning("Journal found at %s; last save may be incomplete", self.journal_path)

        candidates = [self.path] + [self.backup_path(i) for i in range(1, self.keep_backups + 1)]
        for p in candidates:
            state = _read_snapshot(p)
            if state is not None:
                if p != self.path:
                    log.warning("Recovered governor state from backup %s", p)
                return state
        return None

    def save(self, state: JsonDict) -> None:
        data = canonical_json({"schema": SCHEMA, "state": state})

        atomic_write_bytes(self.journal_path, b"1")
        self._rotate_backups()
        atomic_write_bytes(self.path, data)
        self.journal_path.unlink()
