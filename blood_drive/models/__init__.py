from .donor import Donor, DonorStatus, DonorView, ScreeningStatus
from .event import BedBatch, DriveSnapshot, DriveView, EventMeta, MetaView

__all__ = [
    "Donor",
    "DonorStatus",
    "DonorView",
    "ScreeningStatus",
    "BedBatch",
    "DriveSnapshot",
    "DriveView",
    "EventMeta",
    "MetaView",
]
