"""Integration tests for the BloodDrive facade.

Tests cover:
- Coalesced persistence: a burst of mutations yields one snapshot write
- Coalesced broadcast to subscribed displays
- Mutual exclusion of concurrent capacity checks
- Reset semantics and recovery after a failed flush
"""

import asyncio
import json

import pytest

from blood_drive.models import DonorStatus
from blood_drive.services.broadcasts import BroadcastHub
from blood_drive.services.drive import BloodDrive
from blood_drive.services.persistence import SnapshotFile, load_snapshot
from blood_drive.utils.exceptions import CapacityExceeded, NotFound, QuotaUnmet
from tests.fakes import FakeSubscriber

SETTLE = 0.15  # comfortably longer than FLUSH_DELAY_MS=20


async def _screened(drive, name: str, pre_registered: bool = False):
    donor = await drive.register(name, pre_registered=pre_registered)
    return await drive.send_to_screening(donor.id)


async def _queued(drive, name: str, pre_registered: bool = False):
    donor = await _screened(drive, name, pre_registered)
    return await drive.approve(donor.id)


class TestPersistenceCoalescing:
    @pytest.mark.asyncio
    async def test_burst_produces_one_write_with_final_state(self, drive) -> None:
        for i in range(5):
            await drive.register(f"Donor {i}")
        assert drive.snapshot_file.writes == 0

        await asyncio.sleep(SETTLE)

        assert drive.snapshot_file.writes == 1
        stored = drive.snapshot_file.read_snapshot()
        assert len(stored.donors) == 5
        assert stored.meta.next_donor_no == 6

    @pytest.mark.asyncio
    async def test_failed_operation_schedules_nothing(self, drive) -> None:
        with pytest.raises(NotFound):
            await drive.approve("missing")

        await asyncio.sleep(SETTLE)

        assert drive.snapshot_file.writes == 0
        assert not drive.snapshot_file.path.exists()

    @pytest.mark.asyncio
    async def test_write_failure_does_not_block_next_flush(self, drive, monkeypatch) -> None:
        original = SnapshotFile._write_sync
        calls = {"n": 0}

        def flaky(self, payload):
            calls["n"] += 1
            if calls["n"] == 1:
                raise OSError("disk full")
            original(self, payload)

        monkeypatch.setattr(SnapshotFile, "_write_sync", flaky)

        await drive.register("Ann")
        await asyncio.sleep(SETTLE)
        assert not drive.snapshot_file.path.exists()

        await drive.register("Bob")
        await asyncio.sleep(SETTLE)

        stored = drive.snapshot_file.read_snapshot()
        assert [d.full_name for d in stored.donors] == ["Ann", "Bob"]

    @pytest.mark.asyncio
    async def test_flush_writes_pending_state_now(self, drive) -> None:
        await drive.register("Ann")

        await drive.flush()

        assert drive.snapshot_file.writes == 1


class TestBroadcastCoalescing:
    @pytest.mark.asyncio
    async def test_subscriber_gets_state_then_one_push_per_burst(self, drive) -> None:
        display = FakeSubscriber()
        await drive.subscribe(display)
        assert len(display.messages) == 1

        donor = await drive.register("Ann")
        await drive.send_to_screening(donor.id)
        await drive.approve(donor.id)
        await asyncio.sleep(SETTLE)

        assert len(display.messages) == 2
        pushed = json.loads(display.messages[-1])["data"]
        assert pushed["donors"][0]["status"] == "Donation-Queue"
        assert "phone" not in pushed["donors"][0]
        assert pushed["meta"]["queue_length"] == 1


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_parallel_approvals_respect_chair_limit(self, drive) -> None:
        donors = [await _screened(drive, f"Donor {i}") for i in range(8)]

        results = await asyncio.gather(
            *(drive.approve(d.id) for d in donors), return_exceptions=True
        )

        refused = [r for r in results if isinstance(r, CapacityExceeded)]
        assert len(refused) == 2
        assert drive.store.queue_length() == 6

    @pytest.mark.asyncio
    async def test_parallel_fills_respect_bed_limit(self, drive) -> None:
        for i in range(6):
            await _queued(drive, f"Donor {i}")
        drive.store.max_beds = 4

        moved = await asyncio.gather(drive.fill_beds_fifo(), drive.fill_beds_fifo())

        assert sorted(moved) == [0, 4]
        assert drive.store.beds_in_use() == 4


class TestBulkAndReset:
    @pytest.mark.asyncio
    async def test_quota_defaults_come_from_settings(self, drive) -> None:
        for i in range(3):
            await _queued(drive, f"Pre {i}", pre_registered=True)
        for i in range(3):
            await _queued(drive, f"Walk {i}")

        with pytest.raises(QuotaUnmet):
            await drive.fill_beds_quota()

        assert await drive.fill_beds_quota(3, 3) == 6

    @pytest.mark.asyncio
    async def test_reset_then_register_restarts_numbering(self, drive) -> None:
        await drive.register("Ann")
        await drive.register("Bob")

        await drive.reset()

        assert drive.get_state().donors == []
        donor = await drive.register("Cid")
        assert donor.donor_no == 1

    @pytest.mark.asyncio
    async def test_state_survives_restart(self, drive, test_settings, clock) -> None:
        donor = await _queued(drive, "Ann")
        await drive.flush()

        snapshot_file = SnapshotFile(test_settings.DB_PATH)
        restarted = BloodDrive(
            test_settings, snapshot_file, BroadcastHub(), load_snapshot(snapshot_file), clock=clock
        )

        assert restarted.store.get(donor.id).status == DonorStatus.QUEUED
        assert (await restarted.register("Bob")).donor_no == 2
