"""Bulk bed filling from the chairs queue.

Two policies are available: plain FIFO by approval time, and the strict
"N pre-registered + M walk-in" quota. Both seat donors exactly like a
single ``move_to_bed`` and never exceed ``MAX_BEDS``.
"""

import logging
from datetime import datetime, timezone
from typing import List

from blood_drive.models import BedBatch, Donor, DonorStatus
from blood_drive.services.flow import Clock, seat
from blood_drive.store import DonorStore
from blood_drive.utils.exceptions import QuotaUnmet
from blood_drive.utils.time import utc_now

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def by_approval(donors: List[Donor]) -> List[Donor]:
    """Earliest approved first; donors without a stamp go to the front."""
    return sorted(donors, key=lambda d: (d.approved_at or _EPOCH, d.donor_no))


def queued(store: DonorStore, pre_registered: bool | None = None) -> List[Donor]:
    donors = store.filter(
        lambda d: d.status == DonorStatus.QUEUED
        and (pre_registered is None or d.pre_registered == pre_registered)
    )
    return by_approval(donors)


def _record_batch(
    store: DonorStore, policy: str, seated: List[Donor], clock: Clock
) -> None:
    if not seated:
        return
    store.meta.last_batch += 1
    number = store.meta.last_batch
    for donor in seated:
        donor.queue_batch = number
    store.meta.batches.append(
        BedBatch(
            number=number,
            policy=policy,
            created_at=clock(),
            donor_ids=[d.id for d in seated],
        )
    )


def fill_fifo(store: DonorStore, clock: Clock = utc_now) -> int:
    avail = store.beds_available()
    if avail <= 0:
        return 0

    seated: List[Donor] = []
    for donor in queued(store)[:avail]:
        seated.append(seat(store, donor, clock))

    _record_batch(store, "fifo", seated, clock)
    logger.info("FIFO fill seated %d donor(s)", len(seated))
    return len(seated)


def fill_quota(
    store: DonorStore, pre: int, walk: int, clock: Clock = utc_now
) -> int:
    """Seat *pre* pre-registered then *walk* walk-in donors.

    Nothing moves unless both sub-queues hold at least their quota. When
    fewer beds are free than ``pre + walk``, pre-registered donors go first.
    """
    avail = store.beds_available()
    if avail <= 0:
        return 0

    pre_q = queued(store, pre_registered=True)
    walk_q = queued(store, pre_registered=False)
    if len(pre_q) < pre or len(walk_q) < walk:
        raise QuotaUnmet(
            f"Need at least {pre} pre-reg and {walk} walk-in in chairs "
            f"(have {len(pre_q)} and {len(walk_q)})"
        )

    picked = pre_q[:pre] + walk_q[:walk]
    seated = [seat(store, donor, clock) for donor in picked[:avail]]

    _record_batch(store, "quota", seated, clock)
    logger.info(
        "Quota fill %d+%d seated %d donor(s)", pre, walk, len(seated)
    )
    return len(seated)
