"""Argument normalizers shared by the bridge operations."""

from __future__ import annotations

import math
from typing import Any, Iterable

from tw_bridge.errors import InvalidArgumentError, MissingArgumentError
from tw_bridge.protocol import MAX_STEPS, MIN_STEPS


def require_text(value: Any, argument: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise MissingArgumentError(argument)
    return text


def optional_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def require_choice(value: Any, argument: str, choices: Iterable[str]) -> str:
    """Trim and lower-case ``value`` and check it against ``choices``."""
    allowed = tuple(choices)
    normalized = optional_text(value).lower()
    if normalized not in allowed:
        raise InvalidArgumentError(
            argument,
            f"invalid {argument}: {value!r} (expected one of {', '.join(allowed)})",
        )
    return normalized


def require_finite(value: Any, argument: str) -> float:
    if isinstance(value, bool):
        raise InvalidArgumentError(argument, f"{argument} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(argument, f"{argument} must be a number") from None
    if not math.isfinite(number):
        raise InvalidArgumentError(argument, f"{argument} must be a finite number")
    return number


def clamp_steps(distance: Any, argument: str = "distance") -> int:
    """Return ``clamp(round(abs(distance)), 1, 64)``, rounding halves up."""
    magnitude = abs(require_finite(distance, argument))
    steps = math.floor(magnitude + 0.5)
    return max(MIN_STEPS, min(steps, MAX_STEPS))


def require_int_in_range(value: Any, argument: str, low: int, high: int) -> int:
    number = _as_integer(value, argument)
    if number < low or number > high:
        raise InvalidArgumentError(argument, f"{argument} must be {low}-{high} (got {number})")
    return number


def _as_integer(value: Any, argument: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgumentError(argument, f"{argument} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(argument, f"{argument} must be an integer") from None
    if not math.isfinite(number) or not number.is_integer():
        raise InvalidArgumentError(argument, f"{argument} must be an integer")
    return int(number)
