"""Unified invocation of free callables and bound accessors.

`invoke(f, *args)` is the single entry point every combinator calls through.
A bound accessor - `Method(owner, name)`, `Field(owner, name)`, or a native
descriptor such as `str.upper` - takes its receiver as the first argument,
and the receiver may be reached three ways:

    invoke(Method(Point, 'norm'), point)             # direct: Point or a subclass
    invoke(Method(Point, 'norm'), ref(point))        # aliasing handle
    invoke(Method(Point, 'norm'), weakref.ref(point)) # pointer-like indirection

The three cases are decided from the receiver's class alone and are mutually
exclusive. Anything else is rejected before the accessor is touched.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import types
import typing
import weakref
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, NoReturn, Protocol, runtime_checkable

import msgspec
import wrapt

from klaw_functional._config import FunctionalConfig, get_config
from klaw_functional._logging import ResolutionEvent, ResolutionEventKind, emit, get_logger
from klaw_functional.errors import Rejection, RejectionKind
from klaw_functional.shapes import (
    CallShape,
    Shape,
    annotation_shape,
    call_shape,
    check_signature,
    describe,
    shape_of,
    signature_of,
)

__all__ = [
    'Dereferenceable',
    'Field',
    'Method',
    'ReceiverKind',
    'Ref',
    'as_accessor',
    'classify_receiver',
    'contract_signature',
    'dispatch',
    'invoke',
    'is_invocable',
    'ref',
    'resolve',
    'resolve_once',
    'resolve_prefix',
    'result_shape',
]

log = get_logger(__name__)


# =============================================================================
# Aliasing handles and pointer-like receivers
# =============================================================================


class Ref(wrapt.ObjectProxy):
    """Non-owning aliasing handle to an external object.

    Builders capture values by copy; wrapping a value with `ref()` opts into
    sharing it instead. The handle is a transparent proxy, so callables that
    receive it see the wrapped object. The caller is responsible for the
    aliased object's lifetime and for any synchronization.

    The aliased object is available as `__wrapped__`.
    """

    def __copy__(self) -> Ref:
        return Ref(self.__wrapped__)

    def __deepcopy__(self, memo: dict[int, Any]) -> Ref:
        return Ref(self.__wrapped__)

    def __repr__(self) -> str:
        return f'ref({self.__wrapped__!r})'


def ref(obj: Any) -> Ref:
    """Wrap `obj` in an aliasing handle; handles are not nested."""
    if isinstance(obj, Ref):
        return obj
    return Ref(obj)


@runtime_checkable
class Dereferenceable(Protocol):
    """Pointer-like indirection: `deref()` returns the object pointed to."""

    def deref(self) -> Any: ...


class ReceiverKind(Enum):
    """How a bound accessor reaches its receiver."""

    DIRECT = 'direct'
    ALIAS = 'alias'
    POINTER = 'pointer'


def classify_receiver(owner: type, shape: Shape) -> ReceiverKind | None:
    """Classify a receiver of a bound accessor declared on `owner`.

    Returns:
        The receiver kind, or None if the receiver cannot reach an `owner`.
    """
    if issubclass(shape.actual, owner):
        return ReceiverKind.DIRECT
    if issubclass(shape.actual, Ref):
        return ReceiverKind.ALIAS if issubclass(shape.apparent, owner) else None
    if issubclass(shape.actual, weakref.ReferenceType) or issubclass(shape.actual, Dereferenceable):
        # The pointee's class is only known once dereferenced
        return ReceiverKind.POINTER
    return None


# =============================================================================
# Bound accessors
# =============================================================================


class Method(msgspec.Struct, frozen=True):
    """Method-style accessor: `Method(Owner, 'name')(receiver, *args)`.

    Attributes:
        owner: Declaring type; receivers must be instances of it or reach one.
        name: Method name.
    """

    owner: type
    name: str

    def __post_init__(self) -> None:
        _check_owner(self, callable_member=True)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return invoke(self, *args, **kwargs)

    def __repr__(self) -> str:
        return f'{getattr(self.owner, "__qualname__", repr(self.owner))}.{self.name}'


class Field(msgspec.Struct, frozen=True):
    """Field-style accessor: `Field(Owner, 'name')(receiver)` reads the attribute.

    Attributes:
        owner: Declaring type; receivers must be instances of it or reach one.
        name: Attribute name.
    """

    owner: type
    name: str

    def __post_init__(self) -> None:
        _check_owner(self, callable_member=False)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return invoke(self, *args, **kwargs)

    def __repr__(self) -> str:
        return f'{getattr(self.owner, "__qualname__", repr(self.owner))}.{self.name}'


def _check_owner(accessor: Method | Field, *, callable_member: bool) -> None:
    if not isinstance(accessor.owner, type):
        _raise(_rejection(
            RejectionKind.INCOMPATIBLE_ARGUMENTS,
            accessor,
            f'owner must be a class, not {type(accessor.owner).__qualname__}',
        ))
    if not callable_member:
        if not _may_have_field(accessor.owner, accessor.name):
            _raise(_rejection(
                RejectionKind.INCOMPATIBLE_ARGUMENTS,
                accessor,
                f'{accessor.owner.__qualname__} has no field {accessor.name!r}',
            ))
        return
    try:
        member = inspect.getattr_static(accessor.owner, accessor.name)
    except AttributeError:
        _raise(_rejection(
            RejectionKind.INCOMPATIBLE_ARGUMENTS,
            accessor,
            f'{accessor.owner.__qualname__} has no method {accessor.name!r}',
        ))
    if not (callable(member) or isinstance(member, (staticmethod, classmethod))):
        _raise(_rejection(
            RejectionKind.INCOMPATIBLE_ARGUMENTS,
            accessor,
            f'{accessor.owner.__qualname__}.{accessor.name} is not callable',
        ))


def _may_have_field(owner: type, name: str) -> bool:
    """Could instances of `owner` carry attribute `name`?

    Class attributes, properties, slots and annotated fields are declared.
    Classes whose instances have a `__dict__` or a `__getattr__` may gain
    any attribute at runtime, except dataclasses and msgspec structs, whose
    declared fields are taken as complete.
    """
    try:
        inspect.getattr_static(owner, name)
    except AttributeError:
        pass
    else:
        return True
    if any(name in getattr(klass, '__annotations__', {}) for klass in owner.__mro__):
        return True
    if inspect.getattr_static(owner, '__getattr__', None) is not None:
        return True
    if dataclasses.is_dataclass(owner) or issubclass(owner, msgspec.Struct):
        return False
    return any('__dict__' in vars(klass) for klass in owner.__mro__)


_METHOD_DESCRIPTORS = (types.MethodDescriptorType, types.WrapperDescriptorType)
_FIELD_DESCRIPTORS = (types.MemberDescriptorType, types.GetSetDescriptorType)


def as_accessor(f: Any) -> Method | Field | None:
    """Return the bound accessor `f` denotes, or None for a free callable.

    Native descriptors carrying `__objclass__` are accessors too: method
    descriptors (`str.upper`, `list.append`) are method-style, slot members
    and getset descriptors are field-style.
    """
    if isinstance(f, (Method, Field)):
        return f
    if isinstance(f, _METHOD_DESCRIPTORS):
        return _native_accessor(Method, f.__objclass__, f.__name__)
    if isinstance(f, _FIELD_DESCRIPTORS):
        return _native_accessor(Field, f.__objclass__, f.__name__)
    return None


@functools.cache
def _native_accessor(kind: type[Method] | type[Field], owner: type, name: str) -> Method | Field:
    return kind(owner, name)


@functools.lru_cache(maxsize=512)
def _method_signature(owner: type, name: str) -> inspect.Signature | None:
    """Signature of a method as seen through a receiver (receiver removed)."""
    member = inspect.getattr_static(owner, name)
    if isinstance(member, staticmethod):
        return signature_of(member.__func__)
    if isinstance(member, classmethod):
        sig = signature_of(member.__func__)
        drop = True
    elif inspect.isfunction(member) or isinstance(member, _METHOD_DESCRIPTORS):
        sig = signature_of(member)
        drop = True
    else:
        sig = signature_of(getattr(owner, name))
        drop = False
    if sig is None or not drop:
        return sig
    params = list(sig.parameters.values())
    if params and params[0].kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
        params = params[1:]
    return sig.replace(parameters=params)


_RECEIVER = inspect.Parameter('__receiver__', inspect.Parameter.POSITIONAL_ONLY)


def contract_signature(f: Any) -> inspect.Signature | None:
    """Full parameter contract of a callable, receiver included for accessors.

    Returns None for combinators and for callables that cannot be introspected.
    """
    if isinstance(f, Ref):
        f = f.__wrapped__
    if getattr(type(f), '__resolve__', None) is not None:
        return None
    accessor = as_accessor(f)
    if isinstance(accessor, Field):
        return inspect.Signature([_RECEIVER])
    if isinstance(accessor, Method):
        sig = _method_signature(accessor.owner, accessor.name)
        if sig is None:
            return None
        return sig.replace(parameters=[_RECEIVER, *sig.parameters.values()])
    return signature_of(f)


def resolve_prefix(f: Any, call: CallShape) -> Rejection | None:
    """Decide whether a call of this signature can be completed into a valid call.

    Only too many arguments, unknown keywords, classes an annotation rejects,
    or an unreachable receiver are proven permanent. Combinators answer
    through `__resolve_prefix__(call)`; other objects defining only
    `__resolve__` and callables without an introspectable signature are
    always completable.
    """
    if isinstance(f, Ref):
        f = f.__wrapped__
    hook = getattr(type(f), '__resolve_prefix__', None)
    if hook is not None:
        return hook(f, call)
    accessor = as_accessor(f)
    if accessor is not None and call.args and classify_receiver(accessor.owner, call.args[0]) is None:
        return _resolve_accessor(accessor, call)
    sig = contract_signature(f)
    if sig is None:
        return None
    return check_signature(sig, call, name=repr(accessor) if accessor is not None else describe(f), partial=True)


def _field_annotation(owner: type, name: str) -> Any:
    try:
        return typing.get_type_hints(owner).get(name, inspect.Parameter.empty)
    except (NameError, TypeError, AttributeError):
        return inspect.Parameter.empty


def _resolve_accessor(accessor: Method | Field, call: CallShape) -> Rejection | None:
    if not call.args:
        return _rejection(
            RejectionKind.INCOMPATIBLE_ARGUMENTS, accessor, 'a bound accessor requires a receiver', call
        )
    if classify_receiver(accessor.owner, call.args[0]) is None:
        return _rejection(
            RejectionKind.INCOMPATIBLE_ARGUMENTS,
            accessor,
            f'receiver of type {call.args[0]!r} is neither a {accessor.owner.__qualname__}, '
            'a ref() to one, nor a pointer-like indirection',
            call,
        )
    if isinstance(accessor, Field):
        if len(call.args) != 1 or call.kwargs:
            return _rejection(
                RejectionKind.INCOMPATIBLE_ARGUMENTS,
                accessor,
                'field access takes exactly one argument, the receiver',
                call,
            )
        return None
    sig = _method_signature(accessor.owner, accessor.name)
    if sig is None:
        return None
    return check_signature(sig, call.without_first(), name=repr(accessor))


def _reach(accessor: Method | Field, receiver: Any) -> Any:
    """Follow the receiver to the object the accessor acts on."""
    kind = classify_receiver(accessor.owner, shape_of(receiver))
    if kind is ReceiverKind.DIRECT:
        return receiver
    if kind is ReceiverKind.ALIAS:
        return receiver.__wrapped__
    target = receiver() if isinstance(receiver, weakref.ReferenceType) else receiver.deref()
    if target is None or not isinstance(target, accessor.owner):
        reason = (
            'weak reference receiver is dead'
            if target is None
            else f'pointer-like receiver points to {type(target).__qualname__}, not {accessor.owner.__qualname__}'
        )
        _raise(_rejection(RejectionKind.INCOMPATIBLE_ARGUMENTS, accessor, reason, call_shape((receiver,))))
    return target


# =============================================================================
# Resolution and dispatch
# =============================================================================


def _rejection(kind: RejectionKind, f: Any, reason: str, call: CallShape | None = None) -> Rejection:
    return Rejection(
        kind=kind,
        callable_name=repr(f) if isinstance(f, (Method, Field)) else describe(f),
        reason=reason,
        signature=repr(call) if call is not None else '',
    )


def _raise(rejection: Rejection) -> NoReturn:
    emit(log, ResolutionEvent(
        kind=ResolutionEventKind.REJECTED,
        callable_name=rejection.callable_name,
        signature=rejection.signature,
        accepted=False,
        rejection=rejection.kind,
        reason=rejection.reason,
    ))
    raise rejection.to_exception()


def resolve(f: Any, call: CallShape) -> Rejection | None:
    """Decide whether `f` accepts a call of the given argument-type signature.

    Combinators define `__resolve__(call)` and are consulted through it, so
    nested combinators resolve through each other without running anything.
    Callables whose signature cannot be introspected are accepted.

    Returns:
        None if the call is accepted, otherwise the Rejection.
    """
    if isinstance(f, Ref):
        f = f.__wrapped__
    hook = getattr(type(f), '__resolve__', None)
    if hook is not None:
        return hook(f, call)
    accessor = as_accessor(f)
    if accessor is not None:
        return _resolve_accessor(accessor, call)
    if not callable(f):
        return _rejection(
            RejectionKind.INCOMPATIBLE_ARGUMENTS, f, f'{type(f).__qualname__} object is not callable', call
        )
    sig = signature_of(f)
    if sig is None:
        return None
    return check_signature(sig, call, name=describe(f))


@functools.lru_cache(maxsize=2048)
def _resolve_cached(f: Any, call: CallShape, config: FunctionalConfig) -> Rejection | None:
    return resolve(f, call)


def resolve_once(f: Any, call: CallShape) -> Rejection | None:
    """`resolve` memoized per callable, signature and configuration."""
    if getattr(type(f), '__resolve__', None) is not None:
        # Combinators keep their own per-signature cache
        return resolve(f, call)
    try:
        return _resolve_cached(f, call, get_config())
    except TypeError:
        # Unhashable callable
        return resolve(f, call)


def dispatch(f: Any, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> Any:
    """Call an already resolved callable."""
    if isinstance(f, Ref):
        f = f.__wrapped__
    accessor = as_accessor(f)
    if accessor is None:
        return f(*args, **kwargs)
    receiver = _reach(accessor, args[0])
    if isinstance(accessor, Field):
        return getattr(receiver, accessor.name)
    return getattr(receiver, accessor.name)(*args[1:], **kwargs)


def invoke(f: Callable[..., Any] | Method | Field, /, *args: Any, **kwargs: Any) -> Any:
    """Invoke a free callable or bound accessor with uniform call syntax.

    The result is returned as produced; nothing is copied.

    Raises:
        RejectedCallError: If `f` cannot accept the argument types.

    Example:
        ```python
        invoke(len, [1, 2])                 # 2
        invoke(str.upper, 'abc')            # 'ABC'
        invoke(Field(Point, 'x'), ref(p))   # p.x
        ```
    """
    rejection = resolve_once(f, call_shape(args, kwargs))
    if rejection is not None:
        _raise(rejection)
    return dispatch(f, args, kwargs)


def is_invocable(f: Any, /, *args: Any, **kwargs: Any) -> bool:
    """Would `invoke(f, *args, **kwargs)` be accepted? Nothing is called."""
    return resolve_once(f, call_shape(args, kwargs)) is None


def result_shape(f: Any) -> Shape | None:
    """Annotated result shape of a callable or accessor, or None when unknown."""
    if isinstance(f, Ref):
        f = f.__wrapped__
    accessor = as_accessor(f)
    if isinstance(accessor, Field):
        return annotation_shape(_field_annotation(accessor.owner, accessor.name))
    if isinstance(accessor, Method):
        sig = _method_signature(accessor.owner, accessor.name)
        return None if sig is None else annotation_shape(sig.return_annotation)
    if getattr(type(f), '__resolve__', None) is not None:
        return None
    sig = signature_of(f)
    return None if sig is None else annotation_shape(sig.return_annotation)
