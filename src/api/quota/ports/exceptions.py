"""Exceptions for the quota bounded context.

A refused conditional write is not an error; it is reported through
``WriteOutcome.REJECTED``. These exceptions cover the cases where the
question could not be answered at all.
"""


class TenantNotFoundError(Exception):
    """Raised when no quota record exists for a tenant."""

    pass


class TenantAlreadyExistsError(Exception):
    """Raised when onboarding a tenant whose quota record already exists."""

    pass


class StoreUnavailableError(Exception):
    """Raised when the quota store timed out or its transport failed.

    The outcome of the attempted write is unknown. Callers on the consume
    path treat it as a refusal.
    """

    pass
