# billtracker/services/errors.py
"""Domain errors raised by the services layer.

Routers convert these to HTTP responses, the notification sweeps log them
per bill and move on.
"""
from typing import List, Any


class BillTrackerError(Exception):
    """Base class for all domain errors."""


class InvalidRange(BillTrackerError):
    """Recurrence start date is after its end date."""


class PartialCreation(BillTrackerError):
    """A recurring series stopped half way; `created` holds what was inserted."""

    def __init__(self, created: List[Any], cause: BaseException):
        self.created = created
        self.cause = cause
        super().__init__(f"created {len(created)} bill(s) before failing: {cause}")


class NoDestination(BillTrackerError):
    """User has neither a notification e-mail nor a login e-mail."""


class DeliveryFailure(BillTrackerError):
    """The mailer could not deliver a reminder."""


class AttachmentMissing(BillTrackerError):
    """A referenced attachment is not present in the file store."""


class RenderFailure(BillTrackerError):
    """A report renderer failed; no partial file is returned."""
