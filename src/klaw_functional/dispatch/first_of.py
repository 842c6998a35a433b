"""first_of() and Excluded: first-match-wins dispatch over ordered alternatives.

A `FirstOf` hands each call to the first alternative that accepts the call's
argument types. Marking an alternative `excluded()` keeps its place in the
order but forbids it from being chosen: if it is the first to accept a
signature, that signature is rejected even when a later alternative would
accept it too.

Beware of implicit conversions: an `int` satisfies a `float` annotation, so a
broad early alternative can shadow a more specific later one.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import msgspec

from klaw_functional._combinator import Combinator, capture, name_of, require_callable
from klaw_functional.errors import Rejection, RejectionKind
from klaw_functional.invoke import _raise, dispatch, resolve, resolve_prefix
from klaw_functional.shapes import CallShape, call_shape

__all__ = ['Excluded', 'FirstOf', 'excluded', 'first_of']


class Excluded(msgspec.Struct, frozen=True):
    """Exclusion marker: an alternative that must never be chosen.

    Attributes:
        target: The alternative whose signature still takes part in matching.
    """

    target: Any

    def accepts(self, call: CallShape) -> bool:
        """Would the wrapped alternative accept this signature?"""
        return resolve(self.target, call) is None

    def __resolve__(self, call: CallShape) -> Rejection:
        inner = resolve(self.target, call)
        if inner is not None:
            return inner
        return Rejection(
            kind=RejectionKind.EXCLUDED_ALTERNATIVE,
            callable_name=repr(self),
            reason='the alternative is excluded',
            signature=repr(call),
        )

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        _raise(self.__resolve__(call_shape(args, kwargs)))

    def __repr__(self) -> str:
        return f'excluded({name_of(self.target)})'


def excluded(f: Callable[..., Any], /) -> Excluded:
    """Mark an alternative of `first_of()` as excluded.

    Example:
        ```python
        f = first_of(handle_first, excluded(handle_second), handle_third)
        ```
    """
    require_callable(f, builder='excluded')
    return Excluded(capture(f, builder='excluded'))


class FirstOf(Combinator):
    """Ordered alternatives dispatched first-match-wins; built by `first_of()`.

    The verdict for an argument-type signature - the index of the matched
    alternative or a rejection - is computed once and reused.
    """

    __slots__ = ('_alternatives',)

    def __init__(self, alternatives: tuple[Any, ...]) -> None:
        super().__init__()
        self._alternatives = alternatives

    @property
    def alternatives(self) -> tuple[Any, ...]:
        return self._alternatives

    @property
    def name(self) -> str:
        return 'first_of'

    def _verdict(self, call: CallShape) -> Rejection | int:
        for index, alternative in enumerate(self._alternatives):
            if isinstance(alternative, Excluded):
                if alternative.accepts(call):
                    return self._reject(
                        RejectionKind.EXCLUDED_ALTERNATIVE,
                        f'the first matching alternative #{index} ({name_of(alternative.target)}) is excluded',
                        call,
                    )
                continue
            if resolve(alternative, call) is None:
                return index
        return self._reject(
            RejectionKind.NO_MATCHING_ALTERNATIVE,
            f'none of the {len(self._alternatives)} alternatives accepts the arguments',
            call,
        )

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        """Some alternative that may be chosen must be able to complete the call."""
        for alternative in self._alternatives:
            if not isinstance(alternative, Excluded) and resolve_prefix(alternative, call) is None:
                return None
        return self._reject(
            RejectionKind.NO_MATCHING_ALTERNATIVE,
            f'none of the {len(self._alternatives)} alternatives can accept a call starting with these arguments',
            call,
        )

    def matched(self, *args: Any, **kwargs: Any) -> int:
        """Index of the alternative that would handle this call.

        Raises:
            NoMatchingAlternativeError: If no alternative accepts the arguments.
            ExcludedAlternativeError: If the first accepting alternative is excluded.
        """
        return self._checked(args, kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        index = self._checked(args, kwargs)
        return dispatch(self._alternatives[index], args, kwargs)

    def __repr__(self) -> str:
        return f'first_of({", ".join(name_of(a) if not isinstance(a, Excluded) else repr(a) for a in self._alternatives)})'


def first_of(f: Callable[..., Any], /, *fs: Callable[..., Any]) -> FirstOf:
    """Dispatch each call to the first alternative accepting its argument types.

    Acceptance is decided the same way as `is_invocable`: arity plus the
    alternatives' parameter annotations.

    Example:
        ```python
        def describe_int(x: int) -> str: ...
        def describe_str(x: str) -> str: ...

        describe = first_of(describe_int, describe_str)
        describe('a')  # handled by describe_str
        ```
    """
    alternatives = (f, *fs)
    for alternative in alternatives:
        require_callable(alternative, builder='first_of')
    return FirstOf(tuple(capture(a, builder='first_of') for a in alternatives))
