"""Type-level description of calls and the checks built on it.

A call is described by its *argument-type signature*: the class of every
positional argument plus the name and class of every keyword argument.
Combinators resolve each signature once and cache the verdict, so nothing
here ever looks at argument values beyond their classes.
"""

from __future__ import annotations

import collections.abc
import functools
import inspect
import types
from collections.abc import Callable, Mapping
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Literal,
    NamedTuple,
    Never,
    NoReturn,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from klaw_functional._config import get_config
from klaw_functional.errors import Rejection, RejectionKind

__all__ = [
    'CallShape',
    'Shape',
    'call_shape',
    'check_signature',
    'describe',
    'never_parameters',
    'return_shape',
    'shape_of',
    'signature_of',
    'type_accepts',
]

_EMPTY = inspect.Parameter.empty

# Implicit numeric conversions: annotation -> argument classes it also accepts.
_WIDENING: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}


class Shape(NamedTuple):
    """The class of one argument.

    `actual` is `type(value)`. `apparent` is `value.__class__`, which differs
    from `actual` for transparent proxies such as `ref()` handles: the proxy
    is classified by its actual class and checked against annotations by the
    class it stands in for.
    """

    actual: type
    apparent: type

    @classmethod
    def of_type(cls, tp: type) -> Shape:
        return cls(tp, tp)

    def __repr__(self) -> str:
        if self.actual is self.apparent:
            return self.actual.__qualname__
        return f'{self.actual.__qualname__}[{self.apparent.__qualname__}]'


class CallShape(NamedTuple):
    """Argument-type signature of one call; the resolution cache key."""

    args: tuple[Shape, ...] = ()
    kwargs: tuple[tuple[str, Shape], ...] = ()

    def prepend(self, shapes: tuple[Shape, ...]) -> CallShape:
        return CallShape((*shapes, *self.args), self.kwargs)

    def without_first(self) -> CallShape:
        return CallShape(self.args[1:], self.kwargs)

    def __repr__(self) -> str:
        parts = [repr(s) for s in self.args]
        parts.extend(f'{name}={shape!r}' for name, shape in self.kwargs)
        return f'({", ".join(parts)})'


def shape_of(value: Any) -> Shape:
    """Describe one argument value by its classes."""
    actual = type(value)
    apparent = value.__class__
    if not isinstance(apparent, type):
        apparent = actual
    return Shape(actual, apparent)


def call_shape(args: tuple[Any, ...], kwargs: Mapping[str, Any] | None = None) -> CallShape:
    """Build the argument-type signature of a call."""
    kw = tuple(sorted((name, shape_of(value)) for name, value in (kwargs or {}).items()))
    return CallShape(tuple(shape_of(a) for a in args), kw)


def describe(f: Any) -> str:
    """Readable name of a callable for rejection messages and logs."""
    name = getattr(f, '__qualname__', None) or getattr(f, '__name__', None)
    if isinstance(name, str):
        return name
    return repr(f)


# =============================================================================
# Signatures
# =============================================================================


@functools.lru_cache(maxsize=1024)
def _cached_signature(f: Any) -> inspect.Signature | None:
    return _compute_signature(f)


def _compute_signature(f: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(f, eval_str=True)
    except (NameError, SyntaxError, AttributeError):
        # Forward references that cannot be resolved stay strings.
        pass
    except (ValueError, TypeError):
        return None
    try:
        return inspect.signature(f)
    except (ValueError, TypeError):
        return None


def signature_of(f: Any) -> inspect.Signature | None:
    """Signature of a callable, or None when it cannot be introspected."""
    try:
        return _cached_signature(f)
    except TypeError:
        # Unhashable callable
        return _compute_signature(f)


# =============================================================================
# Annotations
# =============================================================================


def type_accepts(annotation: Any, tp: type, *, widening: bool | None = None) -> bool:
    """Does an argument of class `tp` satisfy `annotation`?

    Unknown or unresolvable annotations accept everything; the check only
    rejects what it can prove incompatible.

    Example:
        ```python
        type_accepts(int | None, int)       # True
        type_accepts(list[int], tuple)      # False
        type_accepts(float, int)            # True (numeric widening)
        ```
    """
    if widening is None:
        widening = get_config().numeric_widening

    if annotation is _EMPTY or annotation is Any or annotation is object:
        return True
    if isinstance(annotation, (str, ForwardRef)):
        return True
    if annotation is None or annotation is type(None):
        return tp is type(None)
    if annotation is Never or annotation is NoReturn:
        return False
    if isinstance(annotation, TypeVar):
        if annotation.__constraints__:
            return any(type_accepts(c, tp, widening=widening) for c in annotation.__constraints__)
        if annotation.__bound__ is not None:
            return type_accepts(annotation.__bound__, tp, widening=widening)
        return True

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(type_accepts(arg, tp, widening=widening) for arg in get_args(annotation))
    if origin is Annotated:
        return type_accepts(get_args(annotation)[0], tp, widening=widening)
    if origin is Literal:
        return any(issubclass(tp, type(value)) for value in get_args(annotation))
    if origin is not None:
        # Parameterized generics are checked by their origin only
        annotation = origin

    if not isinstance(annotation, type):
        return True

    try:
        if issubclass(tp, annotation):
            return True
    except TypeError:
        # Protocols that are not runtime checkable, or have data members
        return True

    if widening:
        return any(issubclass(tp, w) for w in _WIDENING.get(annotation, ()))
    return False


def _bound_shapes(param: inspect.Parameter, bound: Any) -> tuple[Shape, ...]:
    if param.kind is inspect.Parameter.VAR_POSITIONAL:
        return tuple(bound)
    if param.kind is inspect.Parameter.VAR_KEYWORD:
        return tuple(bound.values())
    return (bound,)


def check_signature(
    sig: inspect.Signature,
    call: CallShape,
    *,
    name: str,
    partial: bool = False,
) -> Rejection | None:
    """Check a call shape against a signature.

    Args:
        sig: The callable's signature.
        call: Argument-type signature of the call.
        name: Callable name used in the rejection.
        partial: Only require that `call` can be the start of a valid call.

    Returns:
        None if the call is accepted, otherwise the Rejection.
    """
    kwargs = dict(call.kwargs)
    try:
        bound = sig.bind_partial(*call.args, **kwargs) if partial else sig.bind(*call.args, **kwargs)
    except TypeError as exc:
        return Rejection(
            kind=RejectionKind.INCOMPATIBLE_ARGUMENTS,
            callable_name=name,
            reason=str(exc),
            signature=repr(call),
        )

    if not get_config().check_annotations:
        return None

    for param_name, value in bound.arguments.items():
        param = sig.parameters[param_name]
        for shape in _bound_shapes(param, value):
            if not type_accepts(param.annotation, shape.apparent):
                return Rejection(
                    kind=RejectionKind.INCOMPATIBLE_ARGUMENTS,
                    callable_name=name,
                    reason=f"argument '{param_name}' of type {shape!r} does not satisfy {_render(param.annotation)}",
                    signature=repr(call),
                )
    return None


def _render(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__qualname__
    return str(annotation)


def never_parameters(sig: inspect.Signature) -> list[str]:
    """Names of parameters no argument can ever satisfy."""
    return [
        name
        for name, param in sig.parameters.items()
        if param.annotation is Never or param.annotation is NoReturn
    ]


# =============================================================================
# Return types
# =============================================================================


def annotation_shape(annotation: Any) -> Shape | None:
    """Shape every value of `annotation` is known to have, if there is exactly one."""
    if annotation is _EMPTY or annotation is Any or isinstance(annotation, (str, ForwardRef)):
        return None
    if annotation is None:
        return Shape.of_type(type(None))
    origin = get_origin(annotation)
    if origin is Annotated:
        return annotation_shape(get_args(annotation)[0])
    if origin is not None and origin is not Union and origin is not types.UnionType and isinstance(origin, type):
        # Abstract origins such as Sequence do not name a concrete class
        if origin.__module__ == 'builtins':
            return Shape.of_type(origin)
        return None
    if isinstance(annotation, type) and annotation.__module__ == 'builtins':
        return Shape.of_type(annotation)
    if isinstance(annotation, type) and not inspect.isabstract(annotation) and not _is_protocol(annotation):
        # A user class: results may still be subclasses, which the
        # subclass-aware checks accept.
        return Shape.of_type(annotation)
    return None


def _is_protocol(tp: type) -> bool:
    return bool(getattr(tp, '_is_protocol', False)) or tp is collections.abc.Callable


def return_shape(f: Callable[..., Any]) -> Shape | None:
    """Annotated result shape of a free callable, or None when unknown."""
    sig = signature_of(f)
    if sig is None:
        return None
    return annotation_shape(sig.return_annotation)
