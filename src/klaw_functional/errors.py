"""Rejection types: dual struct+exception for inspection and raise-based code.

Every failure in klaw-functional is a rejection of a combination of types,
raised before any user callable runs. A `Rejection` struct describes the
verdict (it is what resolution caches store); `RejectedCallError` and its
subclasses are what callers see.
"""

from __future__ import annotations

from enum import Enum

import msgspec

__all__ = [
    'CaptureError',
    'EmptyCompositionError',
    'ExcludedAlternativeError',
    'IncompatibleArgumentsError',
    'IncompatibleStagesError',
    'NoMatchingAlternativeError',
    'RejectedCallError',
    'Rejection',
    'RejectionKind',
    'UnsatisfiableCurryError',
]


class RejectionKind(Enum):
    """Why a combination of callable and argument types was rejected."""

    INCOMPATIBLE_ARGUMENTS = 'incompatible_arguments'
    INCOMPATIBLE_STAGES = 'incompatible_stages'
    UNSATISFIABLE_CURRY = 'unsatisfiable_curry'
    NO_MATCHING_ALTERNATIVE = 'no_matching_alternative'
    EXCLUDED_ALTERNATIVE = 'excluded_alternative'
    CAPTURE = 'capture'
    EMPTY_COMPOSITION = 'empty_composition'


class Rejection(msgspec.Struct, frozen=True, gc=False):
    """A rejected call - struct variant, cached per argument-type signature.

    Attributes:
        kind: Category of the rejection.
        callable_name: Name of the callable or combinator that rejected.
        reason: Human readable explanation.
        signature: Rendered argument-type signature, e.g. ``(int, str)``.
    """

    kind: RejectionKind
    callable_name: str
    reason: str
    signature: str = ''

    def to_exception(self) -> RejectedCallError:
        """Convert to exception for raise-based code."""
        return _EXCEPTIONS[self.kind](self)


class RejectedCallError(TypeError):
    """A combination of callable and argument types was rejected - exception variant.

    Subclasses `TypeError` so that code written against ordinary Python
    callables keeps catching the same exception family.
    """

    def __init__(self, rejection: Rejection) -> None:
        self.rejection = rejection
        msg = f'{rejection.callable_name}: {rejection.reason}'
        if rejection.signature:
            msg = f'{msg} for signature {rejection.signature}'
        super().__init__(msg)

    @property
    def kind(self) -> RejectionKind:
        return self.rejection.kind

    def to_struct(self) -> Rejection:
        """Convert to struct for inspection."""
        return self.rejection


class IncompatibleArgumentsError(RejectedCallError):
    """The arguments cannot be accepted by the callable or its receiver."""


class IncompatibleStagesError(RejectedCallError):
    """An outer stage cannot accept the results of the inner stages."""


class UnsatisfiableCurryError(RejectedCallError):
    """No extension of the bound arguments can ever satisfy the curried target."""


class NoMatchingAlternativeError(RejectedCallError):
    """No alternative of a first_of dispatcher accepts the arguments."""


class ExcludedAlternativeError(RejectedCallError):
    """The first alternative accepting the arguments is marked excluded."""


class CaptureError(RejectedCallError):
    """A value could not be captured by copy; wrap it with ref() to alias it."""


class EmptyCompositionError(RejectedCallError):
    """A composition builder was given no secondary functions."""


_EXCEPTIONS: dict[RejectionKind, type[RejectedCallError]] = {
    RejectionKind.INCOMPATIBLE_ARGUMENTS: IncompatibleArgumentsError,
    RejectionKind.INCOMPATIBLE_STAGES: IncompatibleStagesError,
    RejectionKind.UNSATISFIABLE_CURRY: UnsatisfiableCurryError,
    RejectionKind.NO_MATCHING_ALTERNATIVE: NoMatchingAlternativeError,
    RejectionKind.EXCLUDED_ALTERNATIVE: ExcludedAlternativeError,
    RejectionKind.CAPTURE: CaptureError,
    RejectionKind.EMPTY_COMPOSITION: EmptyCompositionError,
}
