from typing import Iterable

import pandas as pd

from blood_drive.models import Donor

# Column header -> Donor attribute
EXPORT_COLUMNS: dict[str, str] = {
    "DonorID": "donor_no",
    "FullName": "full_name",
    "Phone": "phone",
    "PreRegistered": "pre_registered",
    "HasPhoto": "has_photo",
    "Status": "status",
    "ScreeningStatus": "screening_status",
    "QueueBatch": "queue_batch",
    "BedType": "bed_type",
    "BedNumber": "bed_number",
    "PhotoPrinted": "photo_printed",
    "RiceBagGiven": "rice_bag_given",
    "PhotoGiven": "photo_given",
    "RegisteredAt": "registered_at",
    "ScreeningStartAt": "screening_start_at",
    "ApprovedAt": "approved_at",
    "DonationStartAt": "donation_start_at",
    "RecoveryStartAt": "recovery_start_at",
    "RecoveryEndAt": "recovery_end_at",
    "CompletedAt": "completed_at",
    "RejectedAt": "rejected_at",
    "RejectionReason": "rejection_reason",
}


def donors_frame(donors: Iterable[Donor]) -> pd.DataFrame:
    """One row per donor, in registration order."""
    rows = []
    for d in donors:
        data = d.model_dump(mode="json")
        rows.append({col: data[attr] for col, attr in EXPORT_COLUMNS.items()})
    return pd.DataFrame(rows, columns=list(EXPORT_COLUMNS), dtype=object)


def export_donors_csv(donors: Iterable[Donor]) -> str:
    """Raw dump of every donor record as CSV text; empty cells for missing values."""
    df = donors_frame(donors)
    df = df.where(df.notna(), "")
    return df.to_csv(index=False)
