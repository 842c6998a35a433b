"""Boolean algebra over predicates: inverse(), all_of(), any_of(), none_of().

`all_of` and `any_of` are superpositions, so every predicate is evaluated on
every call, left to right. They do not short-circuit; predicates with side
effects always run.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from klaw_functional._combinator import Combinator, capture, name_of, require_callable
from klaw_functional.compose import Superposition, compose, superpose
from klaw_functional.errors import Rejection
from klaw_functional.invoke import dispatch, resolve, resolve_prefix
from klaw_functional.shapes import CallShape

__all__ = ['Inverse', 'all_of', 'any_of', 'inverse', 'none_of']


class Inverse(Combinator):
    """`not p(*args)`; built by `inverse()`."""

    __slots__ = ('_p',)

    def __init__(self, p: Callable[..., Any]) -> None:
        super().__init__()
        self._p = p

    def _verdict(self, call: CallShape) -> Rejection | None:
        return resolve(self._p, call)

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        return resolve_prefix(self._p, call)

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        self._checked(args, kwargs)
        return not dispatch(self._p, args, kwargs)

    def __repr__(self) -> str:
        return f'inverse({name_of(self._p)})'


def inverse(predicate: Callable[..., Any], /) -> Inverse:
    """Logical negation of a predicate.

    Example:
        ```python
        is_odd = inverse(lambda n: n % 2 == 0)
        ```
    """
    require_callable(predicate, builder='inverse')
    return Inverse(capture(predicate, builder='inverse'))


def _and_all(*values: Any) -> bool:
    return all(values)


def _or_all(*values: Any) -> bool:
    return any(values)


def _make_predicate_combinator(op: Callable[..., bool], name: str) -> Callable[..., Superposition]:
    def combinator(*predicates: Callable[..., Any]) -> Superposition:
        return superpose(op, *predicates)

    combinator.__name__ = combinator.__qualname__ = name
    return combinator


all_of = _make_predicate_combinator(_and_all, 'all_of')
all_of.__doc__ = """Predicate true when every predicate is true for the same arguments.

Every predicate is evaluated on every call; at least one is required.

Example:
    ```python
    is_positive_even = all_of(lambda n: n > 0, lambda n: n % 2 == 0)
    ```
"""

any_of = _make_predicate_combinator(_or_all, 'any_of')
any_of.__doc__ = """Predicate true when any predicate is true for the same arguments.

Every predicate is evaluated on every call; at least one is required.
"""

none_of = compose(inverse, any_of)
"""Predicate true when no predicate is true: `none_of(*ps) == inverse(any_of(*ps))`."""
