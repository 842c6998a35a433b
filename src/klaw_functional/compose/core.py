"""superpose() and compose(): run callables over the same or chained inputs."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from klaw_functional._combinator import Combinator, capture, name_of, require_callable
from klaw_functional._config import get_config
from klaw_functional.errors import Rejection, RejectionKind
from klaw_functional.invoke import _raise, dispatch, resolve, resolve_prefix, result_shape
from klaw_functional.shapes import CallShape, call_shape

__all__ = [
    'Composition',
    'Flipped',
    'Superposition',
    'compose',
    'empty_function',
    'flip',
    'identity',
    'superpose',
]


T = TypeVar('T')


def identity(x: T, /) -> T:
    """Return the argument itself."""
    return x


def empty_function(*args: Any, **kwargs: Any) -> None:
    """Accept anything, do nothing."""


class Superposition(Combinator):
    """`f(g1(*args), ..., gn(*args))`; built by `superpose()`.

    Every `gi` receives the same arguments, so arguments must be shareable:
    single-pass iterators are rejected when more than one function would
    consume them.
    """

    __slots__ = ('_f', '_gs', '_stage_verdicts')

    def __init__(self, f: Callable[..., Any], gs: tuple[Callable[..., Any], ...]) -> None:
        super().__init__()
        self._f = f
        self._gs = gs
        self._stage_verdicts: dict[tuple[CallShape, Any], Rejection | None] = {}

    @property
    def name(self) -> str:
        return f'{type(self).__name__}({name_of(self._f)})'

    def _check_sharing(self, call: CallShape) -> Rejection | None:
        if len(self._gs) < 2:
            return None
        shapes = [*call.args, *(shape for _, shape in call.kwargs)]
        if any(issubclass(s.apparent, Iterator) for s in shapes):
            return self._reject(
                RejectionKind.INCOMPATIBLE_ARGUMENTS,
                f'a single-pass iterator cannot be shared by {len(self._gs)} functions',
                call,
            )
        return None

    def _verdict(self, call: CallShape) -> Rejection | bool:
        """Resolve the inner stages; True means the outer stage was checked too."""
        rejection = self._check_sharing(call)
        if rejection is not None:
            return rejection

        for g in self._gs:
            inner = resolve(g, call)
            if inner is not None:
                return self._reject(
                    RejectionKind.INCOMPATIBLE_ARGUMENTS,
                    f'{inner.callable_name} rejects the arguments: {inner.reason}',
                    call,
                )

        shapes = [result_shape(g) for g in self._gs]
        if any(shape is None for shape in shapes):
            # Result classes are only known once the inner stages have run
            return False
        stage = self._check_stage(CallShape(tuple(shapes)))
        return stage if stage is not None else True

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        """Every inner stage must be able to complete the call."""
        rejection = self._check_sharing(call)
        if rejection is not None:
            return rejection
        for g in self._gs:
            inner = resolve_prefix(g, call)
            if inner is not None:
                return self._reject(
                    RejectionKind.INCOMPATIBLE_ARGUMENTS,
                    f'{inner.callable_name} can never accept the arguments: {inner.reason}',
                    call,
                )
        return None

    def _check_stage(self, results: CallShape) -> Rejection | None:
        try:
            return self._stage_verdicts[results, get_config()]
        except KeyError:
            pass
        outer = resolve(self._f, results)
        verdict = None
        if outer is not None:
            verdict = self._reject(
                RejectionKind.INCOMPATIBLE_STAGES,
                f'{outer.callable_name} cannot accept the results {results!r}: {outer.reason}',
                results,
            )
        self._stage_verdicts[results, get_config()] = verdict
        return verdict

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        stage_checked = self._checked(args, kwargs)
        results = tuple(dispatch(g, args, kwargs) for g in self._gs)
        if not stage_checked:
            rejection = self._check_stage(call_shape(results))
            if rejection is not None:
                _raise(rejection)
        return dispatch(self._f, results, {})

    def __repr__(self) -> str:
        inner = ', '.join(name_of(g) for g in self._gs)
        return f'superpose({name_of(self._f)}, {inner})'


class Composition(Superposition):
    """`f(g(*args))`; built by `compose()`.

    `g` is the only consumer of the arguments, so they are passed straight
    through, iterators included.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f'compose({name_of(self._f)}, {name_of(self._gs[0])})'


class Flipped(Combinator):
    """`f(y, x)` for a call `(x, y)`; built by `flip()`."""

    __slots__ = ('_f',)

    def __init__(self, f: Callable[..., Any]) -> None:
        super().__init__()
        self._f = f

    def _verdict(self, call: CallShape) -> Rejection | None:
        if len(call.args) != 2 or call.kwargs:
            return self._reject(
                RejectionKind.INCOMPATIBLE_ARGUMENTS, 'a flipped function takes exactly two arguments', call
            )
        return resolve(self._f, CallShape((call.args[1], call.args[0])))

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        if len(call.args) > 2 or call.kwargs:
            return self._reject(
                RejectionKind.INCOMPATIBLE_ARGUMENTS, 'a flipped function takes exactly two arguments', call
            )
        if len(call.args) == 2:
            return self.__resolve__(call)
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self._checked(args, kwargs)
        x, y = args
        return dispatch(self._f, (y, x), {})

    def __repr__(self) -> str:
        return f'flip({name_of(self._f)})'


def _require_secondary(builder: str, gs: tuple[Any, ...]) -> None:
    if not gs:
        _raise(Rejection(
            kind=RejectionKind.EMPTY_COMPOSITION,
            callable_name=builder,
            reason='at least one secondary function is required',
        ))


def superpose(f: Callable[..., Any], /, *gs: Callable[..., Any]) -> Superposition:
    """Build `(*args) -> f(g1(*args), ..., gn(*args))`.

    Results are collected in `g1..gn` order and passed to `f` as they are.
    Each call's argument-type signature is resolved once: every `gi` must
    accept it, and `f` must accept the `gi` result classes (checked before `f`
    runs; from return annotations when every `gi` has one).

    Args:
        f: The governing function.
        *gs: Secondary functions, at least one.

    Returns:
        The superposition combinator.

    Raises:
        EmptyCompositionError: If no secondary function is given.

    Example:
        ```python
        import operator
        f = superpose(operator.ge, operator.mul, operator.add)
        f(2, 3)  # 6 >= 5 -> True
        ```
    """
    _require_secondary('superpose', gs)
    for func in (f, *gs):
        require_callable(func, builder='superpose')
    return Superposition(
        capture(f, builder='superpose'),
        tuple(capture(g, builder='superpose') for g in gs),
    )


def compose(f: Callable[..., Any], /, *gs: Callable[..., Any]) -> Composition:
    """Build `(*args) -> f(g(*args))`; more functions nest to the right.

    `compose(f, g, h)` is `compose(compose(f, g), h)`: the rightmost function
    receives the call's arguments and `f` is applied last.

    Raises:
        EmptyCompositionError: If no secondary function is given.

    Example:
        ```python
        compose(str.upper, str.strip)('  abc ')  # 'ABC'
        compose(len, str.split, str.strip)(' a b ')  # 2
        ```
    """
    _require_secondary('compose', gs)
    g, *rest = gs
    for func in (f, g):
        require_callable(func, builder='compose')
    composed = Composition(capture(f, builder='compose'), (capture(g, builder='compose'),))
    if rest:
        return compose(composed, *rest)
    return composed


def flip(f: Callable[..., Any], /) -> Flipped:
    """Build `(x, y) -> f(y, x)`.

    Example:
        ```python
        flip(operator.sub)(1, 10)  # 9
        ```
    """
    require_callable(f, builder='flip')
    return Flipped(capture(f, builder='flip'))
