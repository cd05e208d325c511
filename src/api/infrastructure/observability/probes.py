"""Probe for the quota database engine lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Engine lifecycle events."""

    def engine_created(self, connection_string: str, pool_size: int) -> None: ...

    def engine_disposed(self) -> None: ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe: ...


class DefaultConnectionProbe:
    """structlog-backed ConnectionProbe.

    ``connection_string`` is expected to be the password-free form from
    ``DatabaseSettings.connection_string``.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def engine_created(self, connection_string: str, pool_size: int) -> None:
        self._logger.info(
            "database_engine_created",
            connection_string=connection_string,
            pool_size=pool_size,
            **self._get_context_kwargs(),
        )

    def engine_disposed(self) -> None:
        self._logger.info("database_engine_disposed", **self._get_context_kwargs())
