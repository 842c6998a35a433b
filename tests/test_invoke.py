"""Tests for invoke(): free callables, bound accessors and receiver shapes."""

import gc
import weakref
from dataclasses import dataclass

import pytest
from klaw_functional import Field, Method, ReceiverKind, Ref, invoke, is_invocable, ref
from klaw_functional.errors import IncompatibleArgumentsError, RejectedCallError
from klaw_functional.invoke import Dereferenceable, as_accessor, classify_receiver, result_shape
from klaw_functional.shapes import Shape, shape_of


class Counter:
    def __init__(self, value: int = 0) -> None:
        self.value = value

    def add(self, n: int) -> int:
        self.value += n
        return self.value

    def get(self) -> int:
        return self.value

    @staticmethod
    def zero() -> int:
        return 0


class SubCounter(Counter):
    pass


class Box:
    """Pointer-like holder."""

    def __init__(self, target):
        self.target = target

    def deref(self):
        return self.target


class Slotted:
    __slots__ = ('x',)

    def __init__(self, x):
        self.x = x


@dataclass
class Point:
    x: int
    y: int


class TestFreeCallables:
    """Tests for invoking plain callables."""

    def test_function(self):
        """Functions are called with the arguments as given."""
        assert invoke(lambda x, y: x - y, 10, 3) == 7

    def test_builtin(self):
        """Builtins with a text signature are resolved and called."""
        assert invoke(len, [1, 2]) == 2

    def test_keywords(self):
        """Keyword arguments are forwarded."""
        assert invoke(lambda a, *, b: (a, b), 1, b=2) == (1, 2)

    def test_result_is_not_copied(self):
        """The result comes back as produced."""
        obj = [1, 2, 3]
        assert invoke(lambda x: x, obj) is obj

    def test_rejection_runs_nothing(self):
        """A rejected call never reaches the callable."""
        calls = []

        def record(x: int) -> None:
            calls.append(x)

        with pytest.raises(IncompatibleArgumentsError):
            invoke(record, 'a')
        assert calls == []

    def test_not_callable(self):
        """Non-callables are rejected."""
        with pytest.raises(IncompatibleArgumentsError, match='not callable'):
            invoke(42)

    def test_rejection_is_type_error(self):
        """Rejections stay in the TypeError family."""
        with pytest.raises(TypeError):
            invoke(lambda x: x)


class TestMethodAccessor:
    """Tests for Method accessors and their receivers."""

    def test_direct_receiver(self):
        """An instance of the owner is the receiver."""
        counter = Counter()
        assert invoke(Method(Counter, 'add'), counter, 5) == 5
        assert counter.value == 5

    def test_subclass_receiver(self):
        """Subclass instances are direct receivers too."""
        assert invoke(Method(Counter, 'add'), SubCounter(1), 2) == 3

    def test_ref_receiver_aliases(self):
        """A ref() handle reaches the original object."""
        counter = Counter()
        invoke(Method(Counter, 'add'), ref(counter), 3)
        assert counter.value == 3

    def test_weakref_receiver(self):
        """A weak reference is dereferenced."""
        counter = Counter(7)
        assert invoke(Method(Counter, 'get'), weakref.ref(counter)) == 7

    def test_dereferenceable_receiver(self):
        """Any object with deref() is pointer-like."""
        counter = Counter(4)
        assert invoke(Method(Counter, 'add'), Box(counter), 1) == 5
        assert counter.value == 5

    def test_staticmethod(self):
        """Static methods are reached through the receiver."""
        assert invoke(Method(Counter, 'zero'), Counter()) == 0

    def test_accessor_is_callable(self):
        """Accessors can be called directly."""
        assert Method(Counter, 'get')(Counter(2)) == 2

    def test_foreign_receiver_rejected(self):
        """A receiver that cannot reach the owner is rejected."""
        with pytest.raises(IncompatibleArgumentsError, match='receiver'):
            invoke(Method(Counter, 'get'), 'nope')
        assert not is_invocable(Method(Counter, 'get'), 1)

    def test_missing_receiver_rejected(self):
        """An accessor needs a receiver."""
        assert not is_invocable(Method(Counter, 'get'))

    def test_method_arguments_checked(self):
        """Method arity and annotations are checked past the receiver."""
        counter = Counter()
        assert is_invocable(Method(Counter, 'add'), counter, 1)
        assert not is_invocable(Method(Counter, 'add'), counter)
        assert not is_invocable(Method(Counter, 'add'), counter, 'x')
        assert counter.value == 0

    def test_unknown_method_rejected_at_construction(self):
        """Methods must exist on the owner."""
        with pytest.raises(IncompatibleArgumentsError):
            Method(Counter, 'missing')

    def test_owner_must_be_class(self):
        """The owner of an accessor is a class."""
        with pytest.raises(RejectedCallError):
            Method('Counter', 'get')

    def test_dead_weakref(self):
        """A dead weak reference is rejected before the method runs."""
        counter = Counter()
        dangling = weakref.ref(counter)
        del counter
        gc.collect()
        with pytest.raises(IncompatibleArgumentsError, match='dead'):
            invoke(Method(Counter, 'get'), dangling)

    def test_pointer_to_wrong_class(self):
        """A pointer-like receiver must point at an owner instance."""
        with pytest.raises(IncompatibleArgumentsError, match='points to str'):
            invoke(Method(Counter, 'get'), Box('text'))


class TestFieldAccessor:
    """Tests for Field accessors."""

    def test_direct(self):
        """Fields read the attribute."""
        assert invoke(Field(Point, 'x'), Point(1, 2)) == 1

    def test_ref_and_pointer(self):
        """Fields follow aliasing handles and pointers."""
        point = Point(3, 4)
        assert invoke(Field(Point, 'y'), ref(point)) == 4
        assert invoke(Field(Point, 'y'), Box(point)) == 4
        assert invoke(Field(Point, 'x'), weakref.ref(point)) == 3

    def test_extra_arguments_rejected(self):
        """Field access takes only the receiver."""
        with pytest.raises(IncompatibleArgumentsError, match='exactly one argument'):
            invoke(Field(Point, 'x'), Point(1, 2), 1)

    def test_result_shape_from_annotation(self):
        """Field result shapes come from class annotations."""
        assert result_shape(Field(Point, 'x')) == Shape(int, int)
        assert result_shape(Field(Counter, 'value')) is None

    def test_unknown_field_rejected(self):
        """Classes with a fixed set of fields reject other names."""
        with pytest.raises(IncompatibleArgumentsError, match='no field'):
            Field(Slotted, 'y')
        with pytest.raises(IncompatibleArgumentsError, match='no field'):
            Field(Point, 'z')
        with pytest.raises(IncompatibleArgumentsError, match='no field'):
            Field(str, 'nope')

    def test_dynamic_fields_accepted(self):
        """Instance attributes, properties and __getattr__ may supply a field."""

        class Temperature:
            @property
            def celsius(self) -> float:
                return 21.5

        class Lenient:
            def __getattr__(self, name):
                return name

        assert invoke(Field(Counter, 'value'), Counter(3)) == 3
        assert invoke(Field(Temperature, 'celsius'), Temperature()) == 21.5
        assert invoke(Field(Lenient, 'anything'), Lenient()) == 'anything'
        assert invoke(Field(Slotted, 'x'), Slotted(7)) == 7


class TestNativeDescriptors:
    """Tests for descriptors of builtin types."""

    def test_method_descriptor(self):
        """str.upper is a method-style accessor."""
        assert as_accessor(str.upper) == Method(str, 'upper')
        assert invoke(str.upper, 'abc') == 'ABC'
        assert invoke(str.upper, ref('abc')) == 'ABC'

    def test_method_descriptor_rejects_foreign_receiver(self):
        """Native accessors check their receiver class."""
        assert not is_invocable(str.upper, b'abc')

    def test_member_descriptor(self):
        """Slot members are field-style accessors."""
        assert isinstance(as_accessor(Slotted.x), Field)
        assert invoke(Slotted.x, Slotted(3)) == 3

    def test_free_callable_is_not_accessor(self):
        """Plain functions are free callables."""
        assert as_accessor(len) is None


class TestReceiverKinds:
    """Tests for receiver classification."""

    def test_kinds(self):
        """The three receiver kinds are told apart by class alone."""
        counter = Counter()
        assert classify_receiver(Counter, shape_of(counter)) is ReceiverKind.DIRECT
        assert classify_receiver(Counter, shape_of(ref(counter))) is ReceiverKind.ALIAS
        assert classify_receiver(Counter, shape_of(weakref.ref(counter))) is ReceiverKind.POINTER
        assert classify_receiver(Counter, shape_of(Box(counter))) is ReceiverKind.POINTER
        assert classify_receiver(Counter, shape_of('text')) is None

    def test_ref_to_foreign_object(self):
        """A ref() to something else is not a receiver."""
        assert classify_receiver(Counter, shape_of(ref('text'))) is None

    def test_box_is_dereferenceable(self):
        """Objects with deref() satisfy the protocol."""
        assert isinstance(Box(1), Dereferenceable)


class TestRef:
    """Tests for aliasing handles."""

    def test_transparent(self):
        """A handle behaves like the object it aliases."""
        items = [1, 2]
        handle = ref(items)
        assert isinstance(handle, list)
        assert len(handle) == 2
        handle.append(3)
        assert items == [1, 2, 3]

    def test_not_nested(self):
        """Wrapping a handle returns it unchanged."""
        handle = ref([1])
        assert ref(handle) is handle

    def test_copy_keeps_alias(self):
        """Copying a handle still aliases the same object."""
        import copy

        items = [1]
        copied = copy.copy(ref(items))
        assert isinstance(copied, Ref)
        assert copied.__wrapped__ is items

    def test_repr(self):
        """Handles render as ref(...)."""
        assert repr(ref([1])) == 'ref([1])'
