"""Shared machinery for combinators: capture and per-signature resolution."""

from __future__ import annotations

import copy
from typing import Any

from klaw_functional._config import get_config
from klaw_functional._logging import ResolutionEvent, ResolutionEventKind, emit, get_logger
from klaw_functional.errors import Rejection, RejectionKind
from klaw_functional.invoke import Ref, _raise, as_accessor
from klaw_functional.shapes import CallShape, call_shape, describe

__all__ = ['Combinator', 'capture', 'require_callable']

log = get_logger(__name__)


def capture(value: Any, *, builder: str) -> Any:
    """Capture a value into a combinator: a shallow copy, or the handle itself for `ref()`.

    Raises:
        CaptureError: If the value cannot be copied.
    """
    if isinstance(value, Ref) or not get_config().copy_captures:
        return value
    try:
        return copy.copy(value)
    except (TypeError, NotImplementedError, copy.Error) as exc:
        _raise(Rejection(
            kind=RejectionKind.CAPTURE,
            callable_name=builder,
            reason=f'cannot copy {type(value).__qualname__} ({exc}); wrap it with ref() to alias it',
        ))


def require_callable(value: Any, *, builder: str) -> None:
    """Reject a constituent that is neither callable nor a bound accessor."""
    if isinstance(value, Ref):
        value = value.__wrapped__
    if callable(value) or as_accessor(value) is not None:
        return
    _raise(Rejection(
        kind=RejectionKind.INCOMPATIBLE_ARGUMENTS,
        callable_name=builder,
        reason=f'{type(value).__qualname__} object is not callable',
    ))


class Combinator:
    """Base class for callables produced by builders.

    Subclasses implement `_verdict(call)`, returning a Rejection or any other
    value describing how to run a call of that argument-type signature. The
    verdict is computed once per signature and configuration, before any
    constituent runs.
    """

    __slots__ = ('_verdicts',)

    def __init__(self) -> None:
        self._verdicts: dict[tuple[CallShape, Any], Any] = {}

    def _verdict(self, call: CallShape) -> Any:
        raise NotImplementedError

    def verdict(self, call: CallShape) -> Any:
        key = (call, get_config())
        try:
            return self._verdicts[key]
        except KeyError:
            pass
        verdict = self._verdict(call)
        self._verdicts[key] = verdict
        rejected = isinstance(verdict, Rejection)
        emit(log, ResolutionEvent(
            kind=ResolutionEventKind.RESOLVED,
            callable_name=self.name,
            signature=repr(call),
            accepted=not rejected,
            rejection=verdict.kind if rejected else None,
            reason=verdict.reason if rejected else '',
        ))
        return verdict

    def __resolve__(self, call: CallShape) -> Rejection | None:
        verdict = self.verdict(call)
        return verdict if isinstance(verdict, Rejection) else None

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        """Can a call starting with these arguments still be accepted?

        The base answer is yes; subclasses reject prefixes they can prove
        incompletable.
        """
        return None

    def _checked(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Resolve a concrete call, raising its rejection."""
        verdict = self.verdict(call_shape(args, kwargs))
        if isinstance(verdict, Rejection):
            _raise(verdict)
        return verdict

    def _reject(self, kind: RejectionKind, reason: str, call: CallShape) -> Rejection:
        return Rejection(kind=kind, callable_name=self.name, reason=reason, signature=repr(call))

    @property
    def name(self) -> str:
        return type(self).__name__

    def __copy__(self) -> Combinator:
        # Combinators are immutable once built
        return self


def name_of(f: Any) -> str:
    accessor = as_accessor(f.__wrapped__ if isinstance(f, Ref) else f)
    if accessor is not None:
        return repr(accessor)
    return describe(f)
