"""Exceptions for the identity bounded context.

Both are terminal for the request and are never retried.
"""


class AuthenticationRequiredError(Exception):
    """Raised when a request carries no usable credentials."""

    pass


class AuthenticationInvalidError(Exception):
    """Raised when presented credentials fail verification or lack required claims.

    Never falls back to another scheme or to the development identity.
    """

    pass
