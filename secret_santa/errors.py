"""Error taxonomy for the Secret Santa service.

Every error carries the HTTP status it maps to; ``secret_santa.main``
registers a single handler that renders any :class:`SantaError` as
``{"error": "<message>"}``.
"""


class SantaError(Exception):
    """Base class for all domain errors."""

    status_code = 400


class ValidationError(SantaError):
    """Invalid participant data or a roster that cannot be drawn."""


class RosterTooSmallError(ValidationError):
    """Fewer than two participants; nobody to give a gift to."""


class DuplicateContactError(ValidationError):
    """Another live participant already uses this email address."""

    status_code = 409


class ParticipantNotFoundError(SantaError):
    status_code = 404


class RosterChangedError(SantaError):
    """The roster changed between reading it and persisting a draw over it."""

    status_code = 409


class GenerationExhaustedError(SantaError):
    """No derangement was found within the retry ceiling.

    The caller may simply resubmit; the next attempt uses fresh randomness.
    """

    status_code = 409


class DeliveryError(SantaError):
    """A single email could not be delivered."""

    status_code = 502


class NotifierNotConfiguredError(SantaError):
    status_code = 503


class AuthorizationError(SantaError):
    """Missing, invalid or expired admin capability."""

    status_code = 401
