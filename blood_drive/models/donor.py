from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class DonorStatus(str, Enum):
    WAITING = "Waiting"
    SCREENING = "Screening"
    QUEUED = "Donation-Queue"  # sitting in a chair
    IN_BED = "Donation-In-Progress"
    RECOVERY = "Recovery"
    RECOVERED = "Recovered"
    REJECTED = "Rejected"
    COMPLETED = "Completed & Left"


class ScreeningStatus(str, Enum):
    NOT_STARTED = "Not-Started"
    IN_PROGRESS = "In-Progress"
    ELIGIBLE = "Eligible"
    REJECTED = "Rejected"


PRE_REGISTERED = "Pre-Registered"
WALK_IN = "Walk-In"


class Donor(SQLModel):
    id: str = Field(min_length=1)
    donor_no: int = Field(ge=1)
    full_name: str
    phone: str = ""
    pre_registered: bool = False
    photo_consent: bool = True
    has_photo: bool = False

    status: DonorStatus = DonorStatus.WAITING
    screening_status: ScreeningStatus = ScreeningStatus.NOT_STARTED
    rejection_reason: Optional[str] = None

    bed_type: str = WALK_IN  # Pre-Registered | Walk-In
    bed_number: Optional[int] = None  # only while in bed
    queue_batch: Optional[int] = None  # bulk fill that seated the donor

    photo_printed: bool = False
    rice_bag_given: bool = False
    photo_given: bool = False

    # Each stamp is written by exactly one transition
    registered_at: datetime
    screening_start_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    donation_start_at: Optional[datetime] = None
    recovery_start_at: Optional[datetime] = None
    recovery_end_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None


class DonorView(SQLModel):
    """Reduced projection pushed to displays."""

    id: str
    donor_no: int
    full_name: str
    pre_registered: bool
    status: DonorStatus
    screening_status: ScreeningStatus
    approved_at: Optional[datetime] = None
    donation_start_at: Optional[datetime] = None
    recovery_start_at: Optional[datetime] = None

    @classmethod
    def of(cls, donor: Donor) -> "DonorView":
        return cls(
            id=donor.id,
            donor_no=donor.donor_no,
            full_name=donor.full_name,
            pre_registered=donor.pre_registered,
            status=donor.status,
            screening_status=donor.screening_status,
            approved_at=donor.approved_at,
            donation_start_at=donor.donation_start_at,
            recovery_start_at=donor.recovery_start_at,
        )
