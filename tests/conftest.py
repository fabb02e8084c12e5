"""
Shared pytest configuration and fixtures.

Timestamps come from a FakeClock that moves one second per reading, so
"approved earlier" is always strictly ordered.
"""

from pathlib import Path
from typing import Callable

import pytest

from blood_drive.config import Settings
from blood_drive.models import Donor
from blood_drive.services import flow
from blood_drive.services.broadcasts import BroadcastHub
from blood_drive.services.drive import BloodDrive
from blood_drive.services.persistence import SnapshotFile
from blood_drive.store import DonorStore
from tests.fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> DonorStore:
    return DonorStore(max_beds=6, max_queue=6)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        DB_PATH=tmp_path / "db.json",
        PUBLIC_DIR=tmp_path / "public",
        LOG_DIR=tmp_path / "logs",
        FLUSH_DELAY_MS=20,
    )


@pytest.fixture
def drive(test_settings: Settings, clock: FakeClock) -> BloodDrive:
    return BloodDrive(
        test_settings,
        SnapshotFile(test_settings.DB_PATH),
        BroadcastHub(),
        clock=clock,
    )


@pytest.fixture
def screened(store: DonorStore, clock: FakeClock) -> Callable[..., Donor]:
    """Factory: register a donor and send them to screening."""

    def _make(name: str = "Donor", pre_registered: bool = False) -> Donor:
        donor = flow.register(store, name, pre_registered=pre_registered, clock=clock)
        return flow.send_to_screening(store, donor.id, clock=clock)

    return _make


@pytest.fixture
def queued(store: DonorStore, clock: FakeClock, screened) -> Callable[..., Donor]:
    """Factory: a donor approved into the chairs queue."""

    def _make(name: str = "Donor", pre_registered: bool = False) -> Donor:
        donor = screened(name, pre_registered)
        return flow.approve(store, donor.id, clock=clock)

    return _make
