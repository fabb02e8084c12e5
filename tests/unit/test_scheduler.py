"""Unit tests for the daily snapshot backup job."""

import pytest

from blood_drive.services.scheduler import daily_backup


class TestDailyBackup:
    @pytest.mark.asyncio
    async def test_copies_snapshot(self, tmp_path) -> None:
        db_path = tmp_path / "db.json"
        db_path.write_text('{"donors": []}', encoding="utf-8")

        backup_path = await daily_backup(db_path, tmp_path / "backups")

        assert backup_path is not None
        assert backup_path.parent == tmp_path / "backups"
        assert backup_path.name.startswith("db.json_")
        assert backup_path.read_text(encoding="utf-8") == '{"donors": []}'

    @pytest.mark.asyncio
    async def test_missing_snapshot_is_skipped(self, tmp_path) -> None:
        assert await daily_backup(tmp_path / "db.json", tmp_path / "backups") is None
        assert not (tmp_path / "backups").exists()
