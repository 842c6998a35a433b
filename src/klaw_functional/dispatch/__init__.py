"""Alternative dispatch: first-match-wins over ordered callables."""

from klaw_functional.dispatch.first_of import Excluded, FirstOf, excluded, first_of

__all__ = [
    'Excluded',
    'FirstOf',
    'excluded',
    'first_of',
]
