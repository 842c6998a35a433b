"""curry(): incremental partial application.

A curried function accumulates arguments over any number of calls and
applies its target as soon as the accumulated arguments bind to the target's
parameters:

    sum3 = curry(lambda x, y, z: x + y + z)
    sum3(1, 2, 3) == sum3(1)(2, 3) == sum3(1, 2)(3) == sum3(1)(2)(3) == 6

Intermediate curried functions are immutable and can be reused for any
number of independent calls. Arguments that can never lead to a valid call
are rejected when they are supplied, not when the target would run.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from klaw_functional._combinator import Combinator, capture, name_of, require_callable
from klaw_functional.errors import Rejection, RejectionKind
from klaw_functional.invoke import Ref, _raise, contract_signature, dispatch, resolve, resolve_prefix
from klaw_functional.shapes import CallShape, call_shape, never_parameters

__all__ = ['Curried', 'curry']


class _Step(Enum):
    APPLY = 'apply'
    EXTEND = 'extend'


class Curried(Combinator):
    """A target function together with the arguments bound so far.

    Curried functions derived from the same `curry()` call share their
    resolution cache, which is keyed by the accumulated argument-type
    signature.
    """

    __slots__ = ('_args', '_f', '_kwargs')

    def __init__(
        self,
        f: Callable[..., Any],
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        verdicts: dict[Any, Any] | None = None,
    ) -> None:
        super().__init__()
        if verdicts is not None:
            self._verdicts = verdicts
        self._f = f
        self._args = args
        self._kwargs = kwargs or {}

    @property
    def name(self) -> str:
        return f'curry({name_of(self._f)})'

    @property
    def bound_args(self) -> tuple[Any, ...]:
        """Positional arguments accumulated so far."""
        return self._args

    @property
    def bound_kwargs(self) -> dict[str, Any]:
        """Keyword arguments accumulated so far."""
        return dict(self._kwargs)

    def _verdict(self, call: CallShape) -> Rejection | _Step:
        if resolve(self._f, call) is None:
            return _Step.APPLY
        prefix = resolve_prefix(self._f, call)
        if prefix is not None:
            return self._reject(
                RejectionKind.UNSATISFIABLE_CURRY,
                f'no further arguments can satisfy {prefix.callable_name}: {prefix.reason}',
                call,
            )
        return _Step.EXTEND

    def _combine(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
        duplicated = sorted(set(kwargs) & set(self._kwargs))
        if duplicated:
            _raise(self._reject(
                RejectionKind.UNSATISFIABLE_CURRY,
                f'keyword arguments already bound: {", ".join(duplicated)}',
                call_shape((*self._args, *args), {**self._kwargs, **kwargs}),
            ))
        return (*self._args, *args), {**self._kwargs, **kwargs}

    def __resolve__(self, call: CallShape) -> Rejection | None:
        duplicated = {name for name, _ in call.kwargs} & set(self._kwargs)
        bound = call_shape(self._args, self._kwargs)
        if duplicated:
            return self._reject(
                RejectionKind.UNSATISFIABLE_CURRY,
                f'keyword arguments already bound: {", ".join(sorted(duplicated))}',
                call,
            )
        combined = CallShape(
            (*bound.args, *call.args),
            tuple(sorted((*bound.kwargs, *call.kwargs))),
        )
        verdict = self.verdict(combined)
        return verdict if isinstance(verdict, Rejection) else None

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        # A curried function accepts every completable prefix as it is
        return self.__resolve__(call)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        combined_args, combined_kwargs = self._combine(args, kwargs)
        step = self._checked(combined_args, combined_kwargs)
        if step is _Step.APPLY:
            return dispatch(self._f, combined_args, combined_kwargs)
        return Curried(self._f, combined_args, combined_kwargs, self._verdicts)

    def __repr__(self) -> str:
        bound = [repr(a) for a in self._args]
        bound.extend(f'{k}={v!r}' for k, v in self._kwargs.items())
        suffix = f'({", ".join(bound)})' if bound else ''
        return f'{self.name}{suffix}'


def curry(f: Callable[..., Any], /) -> Curried:
    """Curry a callable.

    Each call appends its arguments to those already bound. When the combined
    arguments bind to `f`'s parameters, `f` is applied and its result returned;
    otherwise a new curried function holding the combined arguments is
    returned. New arguments are stored as given, bound arguments are reused
    by every later call.

    Args:
        f: A callable with an introspectable signature, a bound accessor,
            or a combinator.

    Returns:
        The curried function with no arguments bound.

    Raises:
        UnsatisfiableCurryError: If `f`'s parameters cannot be introspected or
            can never be satisfied, or (on a later call) if the accumulated
            arguments can no longer lead to a valid call.

    Example:
        ```python
        fmt = curry(lambda prefix, n: f'{prefix}{n}')('~')
        [fmt(n) for n in (1, 2, 3)]  # ['~1', '~2', '~3']
        ```
    """
    require_callable(f, builder='curry')
    target = capture(f, builder='curry')
    unwrapped = target.__wrapped__ if isinstance(target, Ref) else target
    sig = contract_signature(unwrapped)
    if sig is None and getattr(type(unwrapped), '__resolve__', None) is None:
        _raise(Rejection(
            kind=RejectionKind.UNSATISFIABLE_CURRY,
            callable_name='curry',
            reason=f'the parameters of {name_of(unwrapped)} cannot be introspected',
        ))
    never = never_parameters(sig) if sig is not None else []
    if never:
        _raise(Rejection(
            kind=RejectionKind.UNSATISFIABLE_CURRY,
            callable_name='curry',
            reason=f'{name_of(unwrapped)} has parameters no argument can satisfy: {", ".join(never)}',
        ))
    return Curried(target)
