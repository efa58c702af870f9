"""Check-in errors raised by services and mapped to HTTP responses."""


class CheckinError(Exception):
    """Base error for rejected check-in operations."""


class CheckinNotAllowedError(CheckinError):
    """The eligibility window for this check-in kind is already used."""


class DraftIncompleteError(CheckinError):
    """A daily check-in draft is missing photos or goals."""


class NotRecordOwnerError(CheckinError):
    """Only the author of a check-in may change it."""


class RecordNotFoundError(CheckinError):
    """The referenced record does not exist."""
