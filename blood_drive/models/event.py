from datetime import datetime
from typing import List

from sqlmodel import Field, SQLModel

from .donor import Donor, DonorView


class BedBatch(SQLModel):
    number: int
    policy: str  # fifo | quota
    created_at: datetime
    donor_ids: List[str] = Field(default_factory=list)


class EventMeta(SQLModel):
    next_donor_no: int = Field(default=1, ge=1)
    last_batch: int = Field(default=0, ge=0)
    batches: List[BedBatch] = Field(default_factory=list)


class DriveSnapshot(SQLModel):
    """Everything persisted for one event."""

    donors: List[Donor] = Field(default_factory=list)
    meta: EventMeta = Field(default_factory=EventMeta)


class MetaView(SQLModel):
    next_donor_no: int
    last_batch: int
    beds_in_use: int
    beds_total: int
    queue_length: int
    queue_total: int


class DriveView(SQLModel):
    donors: List[DonorView] = Field(default_factory=list)
    meta: MetaView
