"""The blood drive core: every staff action goes through :class:`BloodDrive`.

Each operation runs under one lock covering its check-then-mutate sequence,
then asks for a coalesced save. The caller gets its result as soon as the
in-memory mutation is done; the snapshot write and the push to displays
follow shortly after.
"""

import asyncio
import logging
from typing import Optional

from blood_drive.config import Settings
from blood_drive.models import Donor, DriveSnapshot, DriveView
from blood_drive.services import beds, flow
from blood_drive.services.broadcasts import BroadcastHub, Subscriber
from blood_drive.services.coalescer import Coalescer
from blood_drive.services.flow import Clock
from blood_drive.services.persistence import SnapshotFile
from blood_drive.store import DonorStore
from blood_drive.utils.exceptions import BloodDriveError, InternalError
from blood_drive.utils.time import utc_now

logger = logging.getLogger(__name__)


class BloodDrive:
    def __init__(
        self,
        settings: Settings,
        snapshot_file: SnapshotFile,
        hub: BroadcastHub,
        snapshot: Optional[DriveSnapshot] = None,
        clock: Clock = utc_now,
    ):
        self.settings = settings
        self.store = DonorStore(settings.MAX_BEDS, settings.MAX_QUEUE, snapshot)
        self.snapshot_file = snapshot_file
        self.hub = hub
        self.clock = clock
        self._lock = asyncio.Lock()
        self.persistence = Coalescer("persistence", self._write, settings.flush_delay)
        self.broadcast = Coalescer("broadcast", self._push, settings.flush_delay)

    # ---------- coalesced side effects ----------

    async def _write(self) -> None:
        await self.snapshot_file.write_snapshot(self.store.snapshot())

    async def _push(self) -> None:
        await self.hub.publish(self.store.light_view())

    def save(self) -> None:
        self.persistence.request()
        self.broadcast.request()

    async def flush(self) -> None:
        """Write and push anything pending, e.g. before shutdown."""
        await self.persistence.flush()
        await self.broadcast.flush()

    async def _mutate(self, op, *args, **kwargs):
        async with self._lock:
            try:
                result = op(self.store, *args, clock=self.clock, **kwargs)
            except BloodDriveError:
                raise
            except Exception as e:
                logger.exception("Unexpected fault in %s", op.__name__)
                raise InternalError(f"{op.__name__} failed") from e
            self.save()
            return result

    # ---------- donor actions ----------

    async def register(
        self,
        full_name: str,
        phone: str = "",
        pre_registered: bool = False,
        photo_consent: bool = True,
        has_photo: bool = False,
    ) -> Donor:
        donor = await self._mutate(
            flow.register,
            full_name,
            phone=phone,
            pre_registered=pre_registered,
            photo_consent=photo_consent,
            has_photo=has_photo,
        )
        logger.info("Registered donor %d (%s)", donor.donor_no, donor.bed_type)
        return donor

    async def send_to_screening(self, donor_id: str) -> Donor:
        return await self._mutate(flow.send_to_screening, donor_id)

    async def approve(self, donor_id: str) -> Donor:
        return await self._mutate(flow.approve, donor_id)

    async def reject(self, donor_id: str, reason: str = "") -> Donor:
        return await self._mutate(flow.reject, donor_id, reason=reason)

    async def move_to_bed(self, donor_id: str) -> Donor:
        return await self._mutate(flow.move_to_bed, donor_id)

    async def to_recovery(self, donor_id: str) -> Donor:
        return await self._mutate(flow.to_recovery, donor_id)

    async def recovered(self, donor_id: str) -> Donor:
        return await self._mutate(flow.recovered, donor_id)

    async def complete(self, donor_id: str) -> Donor:
        return await self._mutate(flow.complete, donor_id)

    # ---------- bulk ----------

    async def fill_beds_fifo(self) -> int:
        return await self._mutate(beds.fill_fifo)

    async def fill_beds_quota(
        self, pre: Optional[int] = None, walk: Optional[int] = None
    ) -> int:
        pre = self.settings.PRE_QUOTA if pre is None else pre
        walk = self.settings.WALK_QUOTA if walk is None else walk
        return await self._mutate(beds.fill_quota, pre, walk)

    # ---------- whole store ----------

    def get_state(self) -> DriveView:
        return self.store.light_view()

    def donors(self) -> list[Donor]:
        return list(self.store)

    async def reset(self) -> None:
        async with self._lock:
            self.store.clear()
            self.save()
        logger.warning("Store reset: all donors discarded")

    async def subscribe(self, subscriber: Subscriber) -> None:
        self.hub.subscribe(subscriber)
        await self.hub.send_to(subscriber, self.store.light_view())
