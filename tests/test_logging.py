"""Tests for logging configuration and resolution hooks."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import pytest
import structlog
from klaw_functional import (
    ResolutionEvent,
    ResolutionEventKind,
    add_resolution_hook,
    clear_resolution_hooks,
    compose,
    configure_logging,
    identity,
    invoke,
    remove_resolution_hook,
)
from klaw_functional.errors import IncompatibleArgumentsError, RejectionKind

if TYPE_CHECKING:
    from collections.abc import Generator


def takes_int(x: int) -> int:
    return x


@pytest.fixture(autouse=True)
def cleanup_logging() -> Generator[None]:
    """Clear hooks and silence the library logger after each test."""
    clear_resolution_hooks()
    yield
    clear_resolution_hooks()
    library_logger = logging.getLogger('klaw_functional')
    library_logger.handlers.clear()
    library_logger.setLevel(logging.NOTSET)
    library_logger.propagate = True
    structlog.reset_defaults()


def _json_lines(text: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestResolutionHooks:
    """Tests for hooks receiving resolution events."""

    def test_rejection_event(self) -> None:
        """Raised rejections reach hooks without any logging setup."""
        received: list[ResolutionEvent] = []
        add_resolution_hook(received.append)

        with pytest.raises(IncompatibleArgumentsError):
            invoke(takes_int, 'a')

        assert len(received) == 1
        event = received[0]
        assert event.kind is ResolutionEventKind.REJECTED
        assert event.callable_name == 'takes_int'
        assert event.signature == '(str)'
        assert event.accepted is False
        assert event.rejection is RejectionKind.INCOMPATIBLE_ARGUMENTS

    def test_resolved_once_per_signature(self) -> None:
        """Combinators report each new signature once."""
        received: list[ResolutionEvent] = []
        add_resolution_hook(received.append)

        f = compose(identity, identity)
        f(1)
        f(2)
        f('a')

        resolved = [e for e in received if e.kind is ResolutionEventKind.RESOLVED]
        assert [e.signature for e in resolved] == ['(int)', '(str)']
        assert all(e.accepted for e in resolved)
        assert resolved[0].rejection is None

    def test_remove_hook(self) -> None:
        """Removed hooks stop receiving events."""
        received: list[ResolutionEvent] = []
        add_resolution_hook(received.append)
        remove_resolution_hook(received.append)

        with pytest.raises(IncompatibleArgumentsError):
            invoke(takes_int, 'a')

        assert received == []

    def test_failing_hook_does_not_break_resolution(self) -> None:
        """A failing hook neither replaces the rejection nor starves later hooks."""
        received: list[ResolutionEvent] = []

        def broken(event: ResolutionEvent) -> None:
            raise RuntimeError('hook failure')

        add_resolution_hook(broken)
        add_resolution_hook(received.append)

        with pytest.raises(IncompatibleArgumentsError):
            invoke(takes_int, 'a')

        assert [e.callable_name for e in received] == ['takes_int']


class TestConfigureLogging:
    """Tests for structured log output."""

    def test_rejections_are_logged(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Rejections are logged as JSON at debug level."""
        configure_logging(level='DEBUG', json_output=True)

        with pytest.raises(IncompatibleArgumentsError):
            invoke(takes_int, 'a')

        records = [r for r in _json_lines(capsys.readouterr().err) if r['event'] == 'rejected']
        assert len(records) == 1
        assert records[0]['callable'] == 'takes_int'
        assert records[0]['rejection'] == 'incompatible_arguments'
        assert records[0]['level'] == 'debug'

    def test_silent_below_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Debug events are filtered at higher levels."""
        configure_logging(level='WARNING')

        with pytest.raises(IncompatibleArgumentsError):
            invoke(takes_int, 'a')

        assert 'rejected' not in capsys.readouterr().err

    def test_root_logger_untouched(self) -> None:
        """Only the library namespace is configured."""
        root = logging.getLogger()
        handlers = list(root.handlers)

        configure_logging(level='DEBUG')

        assert root.handlers == handlers
        assert logging.getLogger('klaw_functional').propagate is False
