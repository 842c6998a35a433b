"""Composition utilities: superpose(), compose(), flip() and identity."""

from klaw_functional.compose.core import (
    Composition,
    Flipped,
    Superposition,
    compose,
    empty_function,
    flip,
    identity,
    superpose,
)

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
