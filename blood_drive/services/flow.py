"""Donor state machine.

Each function applies exactly one transition to one donor held by a
:class:`~blood_drive.store.DonorStore` and returns the updated record. All
checks run before the first field is touched, so a failed call leaves the
donor as it was.

    Waiting -> Screening -> Donation-Queue -> Donation-In-Progress
            -> Recovery -> Recovered -> Completed & Left
    Screening -> Rejected
    Recovery -> Completed & Left
"""

import secrets
from datetime import datetime
from typing import Callable, Iterable

from blood_drive.models import Donor, DonorStatus, ScreeningStatus
from blood_drive.models.donor import PRE_REGISTERED, WALK_IN
from blood_drive.store import DonorStore
from blood_drive.utils.exceptions import (
    CapacityExceeded,
    IllegalTransition,
    ValidationError,
)
from blood_drive.utils.time import utc_now

Clock = Callable[[], datetime]

# Op name -> statuses it may start from
PREDECESSORS: dict[str, tuple[DonorStatus, ...]] = {
    "send_to_screening": (DonorStatus.WAITING,),
    "approve": (DonorStatus.SCREENING,),
    "reject": (DonorStatus.SCREENING,),
    "move_to_bed": (DonorStatus.QUEUED,),
    "to_recovery": (DonorStatus.IN_BED,),
    "recovered": (DonorStatus.RECOVERY,),
    "complete": (DonorStatus.RECOVERY, DonorStatus.RECOVERED),
}

_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_-"


def new_donor_id(size: int = 10) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(size))


def _require(donor: Donor, op: str) -> None:
    allowed: Iterable[DonorStatus] = PREDECESSORS[op]
    if donor.status not in allowed:
        expected = " or ".join(s.value for s in allowed)
        raise IllegalTransition(
            f"Donor {donor.donor_no} is {donor.status.value}, {op} needs {expected}"
        )


def register(
    store: DonorStore,
    full_name: str,
    phone: str = "",
    pre_registered: bool = False,
    photo_consent: bool = True,
    has_photo: bool = False,
    clock: Clock = utc_now,
) -> Donor:
    full_name = (full_name or "").strip()
    if not full_name:
        raise ValidationError("Full Name required")

    donor_id = new_donor_id()
    while donor_id in store:
        donor_id = new_donor_id()

    donor = Donor(
        id=donor_id,
        donor_no=store.take_donor_no(),
        full_name=full_name,
        phone=phone or "",
        pre_registered=bool(pre_registered),
        photo_consent=bool(photo_consent),
        has_photo=bool(has_photo),
        bed_type=PRE_REGISTERED if pre_registered else WALK_IN,
        registered_at=clock(),
    )
    return store.add(donor)


def send_to_screening(store: DonorStore, donor_id: str, clock: Clock = utc_now) -> Donor:
    donor = store.get(donor_id)
    _require(donor, "send_to_screening")
    donor.status = DonorStatus.SCREENING
    donor.screening_status = ScreeningStatus.IN_PROGRESS
    donor.screening_start_at = clock()
    return donor


def approve(store: DonorStore, donor_id: str, clock: Clock = utc_now) -> Donor:
    donor = store.get(donor_id)
    _require(donor, "approve")
    if store.queue_length() >= store.max_queue:
        raise CapacityExceeded(
            f"Chairs full ({store.max_queue}). Move some to beds first."
        )
    donor.status = DonorStatus.QUEUED
    donor.screening_status = ScreeningStatus.ELIGIBLE
    donor.approved_at = clock()
    return donor


def reject(
    store: DonorStore, donor_id: str, reason: str = "", clock: Clock = utc_now
) -> Donor:
    donor = store.get(donor_id)
    _require(donor, "reject")
    donor.status = DonorStatus.REJECTED
    donor.screening_status = ScreeningStatus.REJECTED
    donor.rejection_reason = reason or ""
    donor.rejected_at = clock()
    donor.photo_printed = False
    return donor


def seat(store: DonorStore, donor: Donor, clock: Clock = utc_now) -> Donor:
    """Put a queued donor in the lowest free bed. Caller checks capacity."""
    donor.status = DonorStatus.IN_BED
    donor.bed_number = store.free_bed_numbers()[0]
    donor.donation_start_at = clock()
    return donor


def move_to_bed(store: DonorStore, donor_id: str, clock: Clock = utc_now) -> Donor:
    donor = store.get(donor_id)
    _require(donor, "move_to_bed")
    if store.beds_available() <= 0:
        raise CapacityExceeded("No bed available")
    return seat(store, donor, clock)


def to_recovery(store: DonorStore, donor_id: str, clock: Clock = utc_now) -> Donor:
    donor = store.get(donor_id)
    _require(donor, "to_recovery")
    donor.status = DonorStatus.RECOVERY
    donor.bed_number = None
    donor.recovery_start_at = clock()
    return donor


def recovered(store: DonorStore, donor_id: str, clock: Clock = utc_now) -> Donor:
    donor = store.get(donor_id)
    _require(donor, "recovered")
    donor.status = DonorStatus.RECOVERED
    donor.recovery_end_at = clock()
    return donor


def complete(store: DonorStore, donor_id: str, clock: Clock = utc_now) -> Donor:
    # Recovered is optional: staff may send a donor home straight from Recovery
    donor = store.get(donor_id)
    _require(donor, "complete")
    donor.status = DonorStatus.COMPLETED
    donor.rice_bag_given = True
    donor.photo_given = True
    donor.photo_printed = True
    donor.completed_at = clock()
    return donor
