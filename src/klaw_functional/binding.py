"""bind_front() and bind_first(): fixed leading arguments."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from klaw_functional._combinator import Combinator, capture, name_of, require_callable
from klaw_functional.errors import Rejection, RejectionKind
from klaw_functional.invoke import _raise, dispatch, resolve, resolve_prefix
from klaw_functional.shapes import CallShape, call_shape

__all__ = ['BoundFront', 'bind_first', 'bind_front']


class BoundFront(Combinator):
    """`f(*bound, *args, **bound_kwargs, **kwargs)`; built by `bind_front()`."""

    __slots__ = ('_args', '_bound_shape', '_f', '_kwargs')

    def __init__(self, f: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        super().__init__()
        self._f = f
        self._args = args
        self._kwargs = kwargs
        self._bound_shape = call_shape(args, kwargs)

    @property
    def name(self) -> str:
        return f'bind_front({name_of(self._f)})'

    def _full_shape(self, call: CallShape) -> Rejection | CallShape:
        duplicated = {name for name, _ in call.kwargs} & set(self._kwargs)
        if duplicated:
            return self._reject(
                RejectionKind.INCOMPATIBLE_ARGUMENTS,
                f'keyword arguments already bound: {", ".join(sorted(duplicated))}',
                call,
            )
        return CallShape(
            (*self._bound_shape.args, *call.args),
            tuple(sorted((*self._bound_shape.kwargs, *call.kwargs))),
        )

    def __resolve_prefix__(self, call: CallShape) -> Rejection | None:
        full = self._full_shape(call)
        if isinstance(full, Rejection):
            return full
        inner = resolve_prefix(self._f, full)
        if inner is None:
            return None
        return self._reject(
            RejectionKind.INCOMPATIBLE_ARGUMENTS,
            f'{inner.callable_name} can never accept bound and supplied arguments {full!r}: {inner.reason}',
            call,
        )

    def _verdict(self, call: CallShape) -> Rejection | None:
        full = self._full_shape(call)
        if isinstance(full, Rejection):
            return full
        inner = resolve(self._f, full)
        if inner is None:
            return None
        return self._reject(
            RejectionKind.INCOMPATIBLE_ARGUMENTS,
            f'{inner.callable_name} rejects bound and supplied arguments {full!r}: {inner.reason}',
            call,
        )

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self._checked(args, kwargs)
        return dispatch(self._f, (*self._args, *args), {**self._kwargs, **kwargs})

    def __repr__(self) -> str:
        bound = [repr(a) for a in self._args]
        bound.extend(f'{k}={v!r}' for k, v in self._kwargs.items())
        return f'bind_front({", ".join([name_of(self._f), *bound])})'


def bind_front(f: Callable[..., Any], /, *args: Any, **kwargs: Any) -> BoundFront:
    """Bind leading positional (and keyword) arguments of `f`.

    Bound arguments are captured by copy at construction; wrap one with
    `ref()` to share it instead. They are rejected immediately if no call
    could ever accept them.

    Example:
        ```python
        add3 = bind_front(lambda x, y, z: x + y + z, 1, 2)
        [add3(n) for n in (1, 2, 3)]  # [4, 5, 6]
        ```
    """
    require_callable(f, builder='bind_front')
    target = capture(f, builder='bind_front')
    bound_args = tuple(capture(a, builder='bind_front') for a in args)
    bound_kwargs = {k: capture(v, builder='bind_front') for k, v in kwargs.items()}

    prefix = resolve_prefix(target, call_shape(bound_args, bound_kwargs))
    if prefix is not None:
        _raise(Rejection(
            kind=RejectionKind.INCOMPATIBLE_ARGUMENTS,
            callable_name='bind_front',
            reason=f'{prefix.callable_name} can never accept the bound arguments: {prefix.reason}',
            signature=prefix.signature,
        ))
    return BoundFront(target, bound_args, bound_kwargs)


def bind_first(f: Callable[..., Any], arg: Any, /) -> BoundFront:
    """Bind the first argument of `f`.

    Example:
        ```python
        bind_first(operator.sub, 10)(3)  # 7
        ```
    """
    return bind_front(f, arg)
