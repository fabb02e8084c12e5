"""In-memory donor store: the single source of truth for one event."""

from typing import Callable, List, Optional

from blood_drive.models import (
    Donor,
    DonorStatus,
    DonorView,
    DriveSnapshot,
    DriveView,
    EventMeta,
    MetaView,
)
from blood_drive.utils.exceptions import NotFound


class DonorStore:
    def __init__(
        self,
        max_beds: int,
        max_queue: int,
        snapshot: Optional[DriveSnapshot] = None,
    ):
        self.max_beds = max_beds
        self.max_queue = max_queue
        self._donors: dict[str, Donor] = {}
        self.meta = EventMeta()
        if snapshot is not None:
            self.replace(snapshot)

    def __len__(self) -> int:
        return len(self._donors)

    def __iter__(self):
        return iter(self._donors.values())

    def __contains__(self, donor_id: object) -> bool:
        return donor_id in self._donors

    # ---------- queries ----------

    def get(self, donor_id: str) -> Donor:
        donor = self._donors.get(donor_id)
        if donor is None:
            raise NotFound(f"Donor {donor_id!r} not found")
        return donor

    def filter(self, predicate: Callable[[Donor], bool]) -> List[Donor]:
        """Donors matching *predicate*, in registration order."""
        return [d for d in self._donors.values() if predicate(d)]

    def count(self, status: DonorStatus) -> int:
        return sum(1 for d in self._donors.values() if d.status == status)

    def beds_in_use(self) -> int:
        return self.count(DonorStatus.IN_BED)

    def beds_available(self) -> int:
        return max(0, self.max_beds - self.beds_in_use())

    def queue_length(self) -> int:
        return self.count(DonorStatus.QUEUED)

    def free_bed_numbers(self) -> List[int]:
        taken = {
            d.bed_number
            for d in self._donors.values()
            if d.status == DonorStatus.IN_BED and d.bed_number is not None
        }
        return [n for n in range(1, self.max_beds + 1) if n not in taken]

    # ---------- mutations ----------

    def add(self, donor: Donor) -> Donor:
        if donor.id in self._donors:
            raise ValueError(f"Duplicate donor id {donor.id!r}")
        self._donors[donor.id] = donor
        return donor

    def take_donor_no(self) -> int:
        number = self.meta.next_donor_no
        self.meta.next_donor_no += 1
        return number

    def replace(self, snapshot: DriveSnapshot) -> None:
        """Swap the whole content, as on reset or bootstrap."""
        self._donors = {d.id: d for d in snapshot.donors}
        self.meta = snapshot.meta

    def clear(self) -> None:
        self.replace(DriveSnapshot())

    # ---------- projections ----------

    def snapshot(self) -> DriveSnapshot:
        # Deep copy: the write happens later, off the mutation path
        return DriveSnapshot(
            donors=[d.model_copy(deep=True) for d in self._donors.values()],
            meta=self.meta.model_copy(deep=True),
        )

    def light_view(self) -> DriveView:
        return DriveView(
            donors=[DonorView.of(d) for d in self._donors.values()],
            meta=MetaView(
                next_donor_no=self.meta.next_donor_no,
                last_batch=self.meta.last_batch,
                beds_in_use=self.beds_in_use(),
                beds_total=self.max_beds,
                queue_length=self.queue_length(),
                queue_total=self.max_queue,
            ),
        )
