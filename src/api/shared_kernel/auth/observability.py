"""Domain probe for bearer token verification.

Each credential scheme owns a validator, so events are usually bound to an
``issuer`` through the observation context by whoever builds the validator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    """Domain probe for token verification and signing key discovery."""

    def token_verified(self, user_id: str) -> None: ...

    def token_rejected(self, reason: str) -> None: ...

    def signing_keys_fetched(self, key_count: int) -> None: ...

    def signing_keys_cached(self) -> None: ...

    def signing_keys_unavailable(self, error: str) -> None: ...

    def unknown_signing_key(self, kid: str, refreshed: bool) -> None:
        """Record a token naming a key id missing from the cached key set."""
        ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe: ...


class DefaultJWTValidatorProbe:
    """structlog-backed JWTValidatorProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultJWTValidatorProbe:
        return DefaultJWTValidatorProbe(logger=self._logger, context=context)

    def token_verified(self, user_id: str) -> None:
        self._logger.debug(
            "bearer_token_verified", user_id=user_id, **self._get_context_kwargs()
        )

    def token_rejected(self, reason: str) -> None:
        self._logger.warning(
            "bearer_token_rejected", reason=reason, **self._get_context_kwargs()
        )

    def signing_keys_fetched(self, key_count: int) -> None:
        self._logger.info(
            "signing_keys_fetched", key_count=key_count, **self._get_context_kwargs()
        )

    def signing_keys_cached(self) -> None:
        self._logger.debug("signing_keys_cached", **self._get_context_kwargs())

    def signing_keys_unavailable(self, error: str) -> None:
        self._logger.error(
            "signing_keys_unavailable", error=error, **self._get_context_kwargs()
        )

    def unknown_signing_key(self, kid: str, refreshed: bool) -> None:
        self._logger.warning(
            "unknown_signing_key",
            kid=kid,
            refreshed=refreshed,
            **self._get_context_kwargs(),
        )
