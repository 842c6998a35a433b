"""Structured logging for klaw-functional, and resolution hooks.

Combinators report two events:

* ``resolved`` - a combinator computed its verdict for a new argument-type
  signature (once per signature and configuration).
* ``rejected`` - a rejection is about to be raised.

Both are logged at DEBUG through structlog under the ``klaw_functional``
logger namespace, which stays silent until `configure_logging()` (or
`init(log_level=...)`) is called. Independently of logging, every event is
delivered as a `ResolutionEvent` to the hooks registered with
`add_resolution_hook()`.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any

import msgspec
import structlog

from klaw_functional.errors import RejectionKind

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = [
    'ResolutionEvent',
    'ResolutionEventKind',
    'add_resolution_hook',
    'clear_resolution_hooks',
    'configure_logging',
    'emit',
    'get_logger',
    'remove_resolution_hook',
]

_NAMESPACE = 'klaw_functional'


class ResolutionEventKind(Enum):
    RESOLVED = 'resolved'
    REJECTED = 'rejected'


class ResolutionEvent(msgspec.Struct, frozen=True, gc=False):
    """One resolution or rejection reported by a combinator.

    Attributes:
        kind: Whether a verdict was computed or a rejection raised.
        callable_name: The combinator or callable concerned.
        signature: Rendered argument-type signature, e.g. ``(int, str)``.
        accepted: False for rejections.
        rejection: Category of the rejection, if any.
        reason: Explanation of the rejection, if any.
    """

    kind: ResolutionEventKind
    callable_name: str
    signature: str
    accepted: bool
    rejection: RejectionKind | None = None
    reason: str = ''


# --- Logging ---


def _timestamped() -> list[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
    ]


def configure_logging(level: str = 'INFO', *, json_output: bool = True) -> None:
    """Send klaw-functional's structured logs to stderr.

    Only the ``klaw_functional`` logger namespace is configured; the root
    logger and the application's handlers are left alone. Resolutions and
    rejections are logged at DEBUG, so `configure_logging('DEBUG')` shows
    how combinators resolve.

    Args:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
        json_output: If True, emit JSON lines. If False, use console output.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_timestamped(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_timestamped(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    ))

    library_logger = logging.getLogger(_NAMESPACE)
    library_logger.handlers.clear()
    library_logger.addHandler(handler)
    library_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    library_logger.propagate = False


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger backed by the stdlib logger `name`.

    The stdlib logger decides whether anything is emitted, so library
    loggers stay silent until logging is configured.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


# --- Resolution hooks ---

_hooks: list[Callable[[ResolutionEvent], None]] = []


def add_resolution_hook(hook: Callable[[ResolutionEvent], None]) -> None:
    """Call `hook` with every ResolutionEvent, whether or not logging is configured."""
    _hooks.append(hook)


def remove_resolution_hook(hook: Callable[[ResolutionEvent], None]) -> None:
    if hook in _hooks:
        _hooks.remove(hook)


def clear_resolution_hooks() -> None:
    _hooks.clear()


def emit(logger: Any, event: ResolutionEvent) -> None:
    """Log a resolution event and hand it to the registered hooks.

    A failing hook is logged at WARNING and does not affect the call being
    resolved or the remaining hooks.
    """
    logger.debug(
        event.kind.value,
        callable=event.callable_name,
        signature=event.signature,
        accepted=event.accepted,
        rejection=event.rejection.value if event.rejection is not None else None,
        reason=event.reason,
    )
    for hook in tuple(_hooks):
        try:
            hook(event)
        except Exception:
            logger.warning('resolution hook failed', hook=repr(hook), exc_info=True)
