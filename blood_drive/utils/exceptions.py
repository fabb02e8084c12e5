"""Exception classes raised by the blood drive core.

All exceptions inherit from BloodDriveError so request handlers can catch
every classified failure in one place. ``status`` is the HTTP status the
web layer answers with.
"""


class BloodDriveError(Exception):
    """Base exception for all classified blood drive failures."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(BloodDriveError):
    """Raised when no donor has the requested id."""

    status = 404


class IllegalTransition(BloodDriveError):
    """Raised when the donor's current status is not the required predecessor.

    Examples:
        - Approving a donor still in Waiting
        - Completing a donor who is still in bed
    """

    status = 409


class CapacityExceeded(BloodDriveError):
    """Raised when the chairs or the beds are full.

    Examples:
        - Approving a donor while MAX_QUEUE donors sit in chairs
        - Moving a single donor to bed while every bed is taken
    """

    status = 409


class QuotaUnmet(BloodDriveError):
    """Raised when a quota fill finds too few donors in one of its sub-queues."""

    status = 409


class ValidationError(BloodDriveError):
    """Raised when a registration misses a required field."""

    status = 400


class PersistenceFailure(BloodDriveError):
    """Raised when the snapshot file cannot be read or written."""


class InternalError(BloodDriveError):
    """Raised for unexpected faults inside a core operation."""
