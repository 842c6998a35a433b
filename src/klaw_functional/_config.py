"""Library configuration: FunctionalConfig, environment overrides and init()."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from klaw_functional._logging import configure_logging

__all__ = [
    'FunctionalConfig',
    'get_config',
    'init',
]

_ENV_PREFIX = 'KLAW_FUNCTIONAL_'
_TRUE = frozenset({'1', 'true', 'yes', 'on'})
_FALSE = frozenset({'0', 'false', 'no', 'off'})


@dataclass(frozen=True)
class FunctionalConfig:
    """Configuration for klaw-functional.

    The config is hashable and takes part in every resolution cache key,
    so changing it through `init()` is visible to existing combinators.

    Attributes:
        check_annotations: Check argument classes against parameter annotations
            when resolving a call. When False only arity is checked.
        numeric_widening: Let `int` satisfy `float` and `int`/`float` satisfy
            `complex` annotations.
        copy_captures: Builders capture constituents and bound arguments by
            shallow copy. Values wrapped with `ref()` are always aliased.
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = silent.
    """

    check_annotations: bool = True
    numeric_widening: bool = True
    copy_captures: bool = True
    log_level: str | None = None


_config: FunctionalConfig | None = None


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    raw = os.environ.get(_ENV_PREFIX + name, '').strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    logging.warning("Unknown %s%s value '%s', using %s", _ENV_PREFIX, name, raw, default)
    return default


def _from_environment() -> FunctionalConfig:
    """Build a config from KLAW_FUNCTIONAL_* environment variables."""
    defaults = FunctionalConfig()
    return FunctionalConfig(
        check_annotations=_env_flag('CHECK_ANNOTATIONS', defaults.check_annotations),
        numeric_widening=_env_flag('NUMERIC_WIDENING', defaults.numeric_widening),
        copy_captures=_env_flag('COPY_CAPTURES', defaults.copy_captures),
        log_level=os.environ.get(_ENV_PREFIX + 'LOG_LEVEL') or None,
    )


def init(
    check_annotations: bool | None = None,
    numeric_widening: bool | None = None,
    copy_captures: bool | None = None,
    log_level: str | None = None,
) -> FunctionalConfig:
    """Initialize klaw-functional with the specified configuration.

    Options left as None fall back to the environment, then to the defaults.

    Args:
        check_annotations: Check annotations during resolution.
        numeric_widening: Allow implicit int -> float -> complex widening.
        copy_captures: Capture constituents and bound arguments by copy.
        log_level: Logging level ("DEBUG", "INFO", etc.). None = silent.

    Returns:
        The FunctionalConfig that was set.

    Example:
        ```python
        from klaw_functional import init

        init(numeric_widening=False, log_level="DEBUG")
        ```
    """
    global _config  # noqa: PLW0603

    env = _from_environment()
    _config = FunctionalConfig(
        check_annotations=env.check_annotations if check_annotations is None else check_annotations,
        numeric_widening=env.numeric_widening if numeric_widening is None else numeric_widening,
        copy_captures=env.copy_captures if copy_captures is None else copy_captures,
        log_level=log_level if log_level is not None else env.log_level,
    )

    if _config.log_level is not None:
        configure_logging(_config.log_level)

    return _config


def get_config() -> FunctionalConfig:
    """Get the current configuration, initializing from the environment on first use.

    Returns:
        The current FunctionalConfig.
    """
    if _config is None:
        return init()
    return _config


def reset() -> None:
    """Forget the current configuration so the next get_config() re-reads the environment."""
    global _config  # noqa: PLW0603
    _config = None
