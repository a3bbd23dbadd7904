"""Domain errors raised by the service layer.

Routers translate these into HTTP responses; none of them leave partial
state behind because they are raised before commit.
"""


class PartnershipServiceError(Exception):
    """Base exception for partnership engine errors."""

    pass


class NotInstructorError(PartnershipServiceError):
    """Privileged action attempted without an instructor session."""

    pass


class NotFoundError(PartnershipServiceError):
    """Unknown partnership, enrollment, card, tracker entry, or user."""

    pass


class NoActiveEnrollmentError(NotFoundError):
    """User has no active enrollment to act on."""

    pass


class CapacityExceededError(PartnershipServiceError):
    """Target partnership has no free slots."""

    pass


class AlreadyActiveError(PartnershipServiceError):
    """User already has an active enrollment."""

    pass


class AlreadyCompletedError(PartnershipServiceError):
    """User already completed this partnership."""

    pass


class PartnershipInactiveError(PartnershipServiceError):
    """Partnership is no longer accepting enrollments."""

    pass


class InvalidStatusError(PartnershipServiceError):
    """Status value outside the allowed set."""

    pass


class InvalidSelectionError(PartnershipServiceError):
    """Multiple-choice selection does not match the partnership's choices."""

    pass
