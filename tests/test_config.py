"""Tests for configuration."""

import dataclasses

import pytest
from klaw_functional import FunctionalConfig, bind_front, get_config, init, is_invocable


def takes_int(x: int) -> int:
    return x


def append_to(xs, item):
    xs.append(item)
    return xs


class TestFunctionalConfig:
    """Tests for the FunctionalConfig dataclass."""

    def test_defaults(self):
        """Defaults check annotations, widen numbers and copy captures."""
        config = FunctionalConfig()
        assert config.check_annotations is True
        assert config.numeric_widening is True
        assert config.copy_captures is True
        assert config.log_level is None

    def test_frozen_and_hashable(self):
        """Configs are immutable and usable as cache keys."""
        config = FunctionalConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.copy_captures = False  # type: ignore[misc]
        assert hash(config) == hash(FunctionalConfig())


class TestInit:
    """Tests for init() and get_config()."""

    def test_get_config_initializes(self, fresh_config):
        """get_config() initializes lazily."""
        assert get_config() == FunctionalConfig()

    def test_init_overrides(self, fresh_config):
        """Explicit arguments win."""
        config = init(numeric_widening=False)
        assert config.numeric_widening is False
        assert get_config() is config

    def test_environment(self, fresh_config, monkeypatch):
        """KLAW_FUNCTIONAL_* variables are read."""
        monkeypatch.setenv('KLAW_FUNCTIONAL_NUMERIC_WIDENING', '0')
        monkeypatch.setenv('KLAW_FUNCTIONAL_COPY_CAPTURES', 'false')
        config = init()
        assert config.numeric_widening is False
        assert config.copy_captures is False
        assert config.check_annotations is True

    def test_explicit_beats_environment(self, fresh_config, monkeypatch):
        """Arguments override the environment."""
        monkeypatch.setenv('KLAW_FUNCTIONAL_CHECK_ANNOTATIONS', 'no')
        assert init(check_annotations=True).check_annotations is True

    def test_unknown_environment_value(self, fresh_config, monkeypatch):
        """Unrecognized values fall back to the default."""
        monkeypatch.setenv('KLAW_FUNCTIONAL_NUMERIC_WIDENING', 'sometimes')
        assert init().numeric_widening is True


class TestConfigEffects:
    """Tests for options taking effect on existing combinators."""

    def test_check_annotations_off(self, fresh_config):
        """Without annotation checks only arity is checked."""
        assert not is_invocable(takes_int, 'a')
        init(check_annotations=False)
        assert is_invocable(takes_int, 'a')
        assert not is_invocable(takes_int)

    def test_copy_captures_off(self, fresh_config):
        """Without copying, bound arguments are shared."""
        init(copy_captures=False)
        items = [1]
        bind_front(append_to, items)(2)
        assert items == [1, 2]
