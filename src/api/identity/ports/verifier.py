"""Token verifier port."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared_kernel.auth import TokenClaims


@runtime_checkable
class TokenVerifier(Protocol):
    """Verifies a credential's signature and standard claims.

    Claims are only ever read from a verifier's result, never from an
    unverified payload.
    """

    async def validate_token(self, token: str) -> TokenClaims:
        """Verify a token and return its claims.

        Raises:
            InvalidTokenError: If the token does not verify
        """
        ...
