"""Point-free binary operator adapters.

Each adapter takes the right-hand operand and returns a function of the
left-hand operand:

    list(map(plus('!'), ['a', 'b']))   # ['a!', 'b!']
    list(filter(less_than(3), [1, 5, 2]))  # [1, 2]

All adapters are derived mechanically as `compose(curry(bind_first), flip)`
applied to the underlying binary operation.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any

from klaw_functional.binding import bind_first
from klaw_functional.compose import Composition, compose, flip
from klaw_functional.curry import curry

__all__ = [
    'differs',
    'divided',
    'equal_to',
    'equals',
    'greater_or_equal_to',
    'greater_than',
    'less_or_equal_to',
    'less_than',
    'make_right_operand_binder',
    'matches',
    'minus',
    'mod',
    'plus',
    'times',
]

_right_operand_binder = compose(curry(bind_first), flip)


def make_right_operand_binder(op: Callable[[Any, Any], Any]) -> Callable[[Any], Callable[[Any], Any]]:
    """Turn a binary operation into `rhs -> (lhs -> op(lhs, rhs))`.

    Example:
        ```python
        power = make_right_operand_binder(operator.pow)
        power(2)(5)  # 25
        ```
    """
    return _right_operand_binder(op)


plus = make_right_operand_binder(operator.add)
minus = make_right_operand_binder(operator.sub)
times = make_right_operand_binder(operator.mul)
divided = make_right_operand_binder(operator.truediv)
mod = make_right_operand_binder(operator.mod)

equals = make_right_operand_binder(operator.eq)
differs = make_right_operand_binder(operator.ne)
less_than = make_right_operand_binder(operator.lt)
greater_than = make_right_operand_binder(operator.gt)
greater_or_equal_to = make_right_operand_binder(operator.ge)
less_or_equal_to = make_right_operand_binder(operator.le)

equal_to = equals


def matches(key: Any, extractor: Callable[[Any], Any]) -> Composition:
    """Predicate testing whether `extractor(item) == key`.

    The key is captured by copy.

    Example:
        ```python
        is_admin = matches('admin', Field(User, 'role'))
        [u.name for u in users if is_admin(u)]
        ```
    """
    return compose(equal_to(key), extractor)
