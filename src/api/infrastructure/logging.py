"""structlog setup shared by application logs and security events.

Security events are emitted through structlog as well, so in production the
JSON renderer output is what the external log collector ingests.
"""

import logging
import os
import sys

import structlog

_TRUTHY = ("1", "true", "yes")


def _wants_console_output() -> bool:
    # FORCE_COLOR lets containers without a TTY keep the console renderer
    if os.environ.get("FORCE_COLOR", "").lower() in _TRUTHY:
        return True
    return sys.stdout.isatty()


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for the process.

    Renders colored key/value lines on an interactive terminal and one JSON
    object per line everywhere else.

    Args:
        debug: Emit debug-level events. Info and above otherwise.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="logged_at"),
        structlog.processors.StackInfoRenderer(),
    ]
    if _wants_console_output():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
