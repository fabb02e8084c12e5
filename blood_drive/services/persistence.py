"""Snapshot file: the whole event stored as one JSON document.

Writes go to a temporary sibling first and are moved into place with
``os.replace``, so a reader never sees a half-written snapshot.
"""

import asyncio
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from blood_drive.models import DriveSnapshot
from blood_drive.utils.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


class SnapshotFile:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._write_lock = asyncio.Lock()
        self.writes = 0

    def read_snapshot(self) -> Optional[DriveSnapshot]:
        """Return the stored snapshot, or ``None`` when there is no file yet."""
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            return DriveSnapshot.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, PydanticValidationError) as e:
            raise PersistenceFailure(f"Cannot read snapshot {self.path}: {e}") from e

    def _write_sync(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)

    async def write_snapshot(self, snapshot: DriveSnapshot) -> None:
        payload = snapshot.model_dump_json(indent=2)
        # Serialized so an older snapshot never lands after a newer one
        async with self._write_lock:
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self._write_sync, payload)
            except OSError as e:
                raise PersistenceFailure(f"Cannot write snapshot {self.path}: {e}") from e
            self.writes += 1
        logger.debug("Snapshot written: %d donor(s)", len(snapshot.donors))

    def backup_corrupt(self) -> Optional[Path]:
        """Move an unreadable snapshot aside so a fresh one can be started."""
        if not self.path.exists():
            return None
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        backup_path = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        shutil.copy(self.path, backup_path)
        return backup_path


def load_snapshot(snapshot_file: SnapshotFile) -> DriveSnapshot:
    """Bootstrap read: an unreadable file is backed up and replaced by an empty store."""
    try:
        snapshot = snapshot_file.read_snapshot()
    except PersistenceFailure as e:
        backup_path = snapshot_file.backup_corrupt()
        logger.warning(
            "%s. Starting with an empty store, old file kept at %s", e, backup_path
        )
        return DriveSnapshot()

    if snapshot is None:
        logger.info("No snapshot at %s, starting with an empty store", snapshot_file.path)
        return DriveSnapshot()

    logger.info(
        "Loaded %d donor(s) from %s", len(snapshot.donors), snapshot_file.path
    )
    return snapshot
