"""Probe for how each request's auth context was resolved."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthenticationProbe(Protocol):
    """Domain probe for auth context resolution.

    Security-relevant outcomes are also reported to the security event
    sink; this probe carries the operational log line only.
    """

    def user_authenticated(
        self, tenant_id: str, user_id: str, auth_method: str
    ) -> None:
        """A credential was verified and mapped to an identity."""
        ...

    def authentication_failed(self, auth_method: str, reason: str) -> None:
        """A presented credential was rejected."""
        ...

    def authentication_required(self, production: bool) -> None:
        """The request carried no usable credentials."""
        ...

    def development_identity_used(self) -> None:
        """The fixed development identity was handed out."""
        ...

    def with_context(self, context: ObservationContext) -> AuthenticationProbe: ...


class DefaultAuthenticationProbe:
    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthenticationProbe:
        return DefaultAuthenticationProbe(logger=self._logger, context=context)

    def user_authenticated(
        self, tenant_id: str, user_id: str, auth_method: str
    ) -> None:
        self._logger.info(
            "user_authenticated",
            tenant_id=tenant_id,
            user_id=user_id,
            auth_method=auth_method,
            **self._get_context_kwargs(),
        )

    def authentication_failed(self, auth_method: str, reason: str) -> None:
        self._logger.warning(
            "authentication_failed",
            auth_method=auth_method,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def authentication_required(self, production: bool) -> None:
        # production misses are also reported as AUTH_BYPASS_ATTEMPT
        self._logger.warning(
            "authentication_required",
            production=production,
            **self._get_context_kwargs(),
        )

    def development_identity_used(self) -> None:
        self._logger.warning("development_identity_used", **self._get_context_kwargs())
