"""klaw-functional: generic function combinators for the Klaw ecosystem.

Build pipelines over arbitrary callables - functions, method and field
accessors, aliasing handles and pointer-like receivers - without glue code.
Every combinator resolves a call's argument types before running anything
and rejects incompatible combinations with `RejectedCallError`.

Flat imports (preferred):
    from klaw_functional import invoke, compose, superpose, curry, bind_front
    from klaw_functional import all_of, any_of, none_of, first_of, excluded

Submodule imports (for organization):
    from klaw_functional.compose import compose, superpose, flip
    from klaw_functional.dispatch import first_of, excluded
    from klaw_functional.operators import plus, equals, matches
"""

# Configuration and logging
from klaw_functional._config import FunctionalConfig, get_config, init
from klaw_functional._logging import (
    ResolutionEvent,
    ResolutionEventKind,
    add_resolution_hook,
    clear_resolution_hooks,
    configure_logging,
    get_logger,
    remove_resolution_hook,
)

# Binder
from klaw_functional.binding import BoundFront, bind_first, bind_front

# Composition
from klaw_functional.compose import (
    Composition,
    Flipped,
    Superposition,
    compose,
    empty_function,
    flip,
    identity,
    superpose,
)

# Curry
from klaw_functional.curry import Curried, curry

# Alternative dispatch
from klaw_functional.dispatch import Excluded, FirstOf, excluded, first_of

# Errors
from klaw_functional.errors import (
    CaptureError,
    EmptyCompositionError,
    ExcludedAlternativeError,
    IncompatibleArgumentsError,
    IncompatibleStagesError,
    NoMatchingAlternativeError,
    RejectedCallError,
    Rejection,
    RejectionKind,
    UnsatisfiableCurryError,
)

# Invocation
from klaw_functional.invoke import (
    Dereferenceable,
    Field,
    Method,
    ReceiverKind,
    Ref,
    invoke,
    is_invocable,
    ref,
)

# Operator adapters
from klaw_functional.operators import (
    differs,
    divided,
    equal_to,
    equals,
    greater_or_equal_to,
    greater_than,
    less_or_equal_to,
    less_than,
    make_right_operand_binder,
    matches,
    minus,
    mod,
    plus,
    times,
)

# Predicates
from klaw_functional.predicates import Inverse, all_of, any_of, inverse, none_of

__all__ = [
    'BoundFront',
    'CaptureError',
    'Composition',
    'Curried',
    'Dereferenceable',
    'EmptyCompositionError',
    'Excluded',
    'ExcludedAlternativeError',
    'Field',
    'FirstOf',
    'Flipped',
    'FunctionalConfig',
    'IncompatibleArgumentsError',
    'IncompatibleStagesError',
    'Inverse',
    'Method',
    'NoMatchingAlternativeError',
    'ReceiverKind',
    'Ref',
    'RejectedCallError',
    'Rejection',
    'RejectionKind',
    'ResolutionEvent',
    'ResolutionEventKind',
    'Superposition',
    'UnsatisfiableCurryError',
    'add_resolution_hook',
    'all_of',
    'any_of',
    'bind_first',
    'bind_front',
    'clear_resolution_hooks',
    'compose',
    'configure_logging',
    'curry',
    'differs',
    'divided',
    'empty_function',
    'equal_to',
    'equals',
    'excluded',
    'first_of',
    'flip',
    'get_config',
    'get_logger',
    'greater_or_equal_to',
    'greater_than',
    'identity',
    'init',
    'inverse',
    'invoke',
    'is_invocable',
    'less_or_equal_to',
    'less_than',
    'make_right_operand_binder',
    'matches',
    'minus',
    'mod',
    'none_of',
    'plus',
    'ref',
    'remove_resolution_hook',
    'superpose',
    'times',
]
