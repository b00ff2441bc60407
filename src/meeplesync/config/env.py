"""Readers for settings that come from environment variables.

Blank values count as unset everywhere, and surrounding whitespace is dropped.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Final

from meeplesync import __version__

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

DEFAULT_USER_AGENT: Final[str] = (
    f"meeplesync/{__version__} (https://github.com/meeplesync/meeplesync)"
)


def optional_env_var(name: str) -> str | None:
    return (os.getenv(name) or "").strip() or None


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Read every name at once so the error can list all that are missing."""

    values = {name: optional_env_var(name) for name in names}
    missing = sorted(name for name, value in values.items() if value is None)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return {name: value for name, value in values.items() if value is not None}


def _positive_number[T: (int, float)](
    name: str, default: T, parse: Callable[[str], T], kind: str
) -> T:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = parse(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be {kind}, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def float_env_var(name: str, default: float) -> float:
    return _positive_number(name, default, float, "a number")


def int_env_var(name: str, default: int) -> int:
    return _positive_number(name, default, int, "an integer")


def user_agent() -> str:
    """User-Agent sent to every source; Wikimedia rejects anonymous clients."""

    return optional_env_var("MEEPLESYNC_USER_AGENT") or DEFAULT_USER_AGENT
