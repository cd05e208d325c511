"""JWT verification against an OIDC issuer's published keys.

Both bearer credential schemes are RS256 JWTs from different issuers, so
one validator class serves both; each scheme gets its own instance, with
its own issuer, audience and signing key cache.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe

DISCOVERY_PATH = "/.well-known/openid-configuration"


@dataclass(frozen=True)
class TokenClaims:
    """Claims of a token whose signature, issuer, audience and expiry were verified.

    Attributes:
        sub: Subject identifier taken from the configured user ID claim.
        preferred_username: Display username, when the issuer provides one.
        raw_claims: Every verified claim, for scheme-specific mapping.
    """

    sub: str
    preferred_username: str | None
    raw_claims: dict[str, Any] = field(default_factory=dict)


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified."""


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _key_ids(jwks: dict[str, Any]) -> set[str]:
    return {key["kid"] for key in jwks.get("keys", []) if "kid" in key}


class JWTValidator:
    """Verifies RS256 bearer tokens issued by one OIDC provider.

    Signing keys are discovered through the issuer's OpenID configuration
    and cached for ``jwks_cache_ttl``. A token naming a key id the cache
    does not hold triggers one early refetch, at most once per
    ``min_key_refresh_interval``, so issuer key rotation is picked up
    without waiting for the cache to expire.

    Claims are only read from ``jwt.decode`` output. The unverified header
    is used to reject malformed input and to pick up the key id.
    """

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        probe: JWTValidatorProbe,
        user_id_claim: str = "sub",
        username_claim: str = "preferred_username",
        jwks_cache_ttl: timedelta = timedelta(hours=24),
        min_key_refresh_interval: timedelta = timedelta(minutes=5),
        algorithms: tuple[str, ...] = ("RS256",),
        http_timeout: float = 10.0,
    ):
        """Create a validator for one issuer.

        Args:
            issuer_url: The OIDC issuer URL. A trailing slash is ignored.
            audience: Expected ``aud`` claim. Empty disables the check.
            probe: Observability probe.
            user_id_claim: Claim carrying the user ID.
            username_claim: Claim carrying the display username.
            jwks_cache_ttl: How long fetched signing keys stay fresh.
            min_key_refresh_interval: Minimum gap between refetches caused
                by an unknown key id.
            algorithms: Accepted signing algorithms.
            http_timeout: Timeout in seconds for discovery and JWKS requests.
        """
        self._issuer_url = issuer_url.rstrip("/")
        self._audience = audience
        self._probe = probe
        self._user_id_claim = user_id_claim
        self._username_claim = username_claim
        self._jwks_cache_ttl = jwks_cache_ttl
        self._min_key_refresh_interval = min_key_refresh_interval
        self._algorithms = list(algorithms)
        self._http_timeout = http_timeout

        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: datetime | None = None
        self._jwks_lock = asyncio.Lock()

    @property
    def issuer_url(self) -> str:
        """Issuer this validator trusts."""
        return self._issuer_url

    async def validate_token(self, token: str) -> TokenClaims:
        """Verify ``token`` and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed, expired, signed by
                an unknown key, issued for another audience or issuer, or if
                the issuer's signing keys cannot be fetched.
        """
        header = self._read_header(token)
        jwks = await self._signing_keys_for(header.get("kid"))
        claims = self._decode(token, jwks)

        user_id = claims.get(self._user_id_claim)
        if user_id is None or not str(user_id).strip():
            raise self._reject(
                f"Missing {self._user_id_claim} claim",
                f"Missing required claim: {self._user_id_claim}",
            )

        username = claims.get(self._username_claim)
        self._probe.token_verified(user_id=str(user_id))
        return TokenClaims(
            sub=str(user_id),
            preferred_username=None if username is None else str(username),
            raw_claims=dict(claims),
        )

    def _reject(self, reason: str, message: str) -> InvalidTokenError:
        self._probe.token_rejected(reason=reason)
        return InvalidTokenError(message)

    def _read_header(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise self._reject(
                f"Malformed token: {e}", f"Invalid token format: {e}"
            ) from e
        if not header:
            raise self._reject("Missing token header", "Invalid token: missing header")
        return header

    def _decode(self, token: str, jwks: dict[str, Any]) -> dict[str, Any]:
        try:
            return jwt.decode(
                token=token,
                key=jwks,
                algorithms=self._algorithms,
                audience=self._audience or None,
                issuer=self._issuer_url,
                options={
                    "verify_aud": bool(self._audience),
                    "verify_iss": True,
                    "verify_exp": True,
                    "verify_iat": True,
                },
            )
        except ExpiredSignatureError as e:
            raise self._reject("Token expired", "Token has expired") from e
        except JWTClaimsError as e:
            detail = str(e).lower()
            if "audience" in detail:
                raise self._reject("Invalid audience", "Invalid audience claim") from e
            if "issuer" in detail:
                raise self._reject("Invalid issuer", "Invalid issuer claim") from e
            raise self._reject(
                f"Claims error: {e}", f"Invalid token claims: {e}"
            ) from e
        except JWTError as e:
            if "signature" in str(e).lower():
                raise self._reject(
                    "Invalid signature", "Invalid token signature"
                ) from e
            raise self._reject(f"JWT error: {e}", f"Invalid token: {e}") from e

    async def _signing_keys_for(self, kid: str | None) -> dict[str, Any]:
        jwks = await self._cached_or_fetched()
        if kid is None or kid in _key_ids(jwks):
            return jwks

        if not self._may_refresh_early():
            self._probe.unknown_signing_key(kid=kid, refreshed=False)
            return jwks

        self._probe.unknown_signing_key(kid=kid, refreshed=True)
        return await self._refresh(seen_fetch=self._jwks_fetched_at)

    async def _cached_or_fetched(self) -> dict[str, Any]:
        if self._is_fresh():
            self._probe.signing_keys_cached()
            return self._jwks  # type: ignore[return-value]

        async with self._jwks_lock:
            if self._is_fresh():
                self._probe.signing_keys_cached()
                return self._jwks  # type: ignore[return-value]
            return await self._fetch()

    async def _refresh(self, seen_fetch: datetime | None) -> dict[str, Any]:
        async with self._jwks_lock:
            # Another request already refetched while this one waited
            if self._jwks is not None and self._jwks_fetched_at != seen_fetch:
                return self._jwks
            return await self._fetch()

    def _is_fresh(self) -> bool:
        if self._jwks is None or self._jwks_fetched_at is None:
            return False
        return _utcnow() - self._jwks_fetched_at < self._jwks_cache_ttl

    def _may_refresh_early(self) -> bool:
        if self._jwks_fetched_at is None:
            return True
        return _utcnow() - self._jwks_fetched_at >= self._min_key_refresh_interval

    async def _fetch(self) -> dict[str, Any]:
        """Fetch signing keys through the issuer's discovery document.

        Caller holds ``_jwks_lock``.
        """
        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                discovery = await client.get(f"{self._issuer_url}{DISCOVERY_PATH}")
                discovery.raise_for_status()
                jwks_uri = discovery.json().get("jwks_uri")
                if not jwks_uri:
                    self._probe.signing_keys_unavailable(
                        error="Missing jwks_uri in OpenID configuration"
                    )
                    raise InvalidTokenError(
                        "OIDC provider missing jwks_uri in configuration"
                    )

                response = await client.get(jwks_uri)
                response.raise_for_status()
                jwks = response.json()
        except httpx.HTTPError as e:
            self._probe.signing_keys_unavailable(error=str(e))
            raise InvalidTokenError(
                f"Failed to fetch JWKS from OIDC provider: {e}"
            ) from e
        except ValueError as e:
            # body was not JSON
            self._probe.signing_keys_unavailable(error=str(e))
            raise InvalidTokenError(f"Unreadable JWKS response: {e}") from e

        self._jwks = jwks
        self._jwks_fetched_at = _utcnow()
        self._probe.signing_keys_fetched(key_count=len(jwks.get("keys", [])))
        return jwks
