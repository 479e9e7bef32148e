"""Test timeouts scaled by the TEST_TIMEOUT_SCALE environment variable."""

from __future__ import annotations

import functools
import os
import sys
import time
from datetime import timedelta
from typing import Callable, TypeVar

__all__ = ["timeout", "sleep", "initialize"]

D = TypeVar("D", timedelta, float)

_timeout_scale = 1.0


def _set_scale(value: float) -> float:
    """Install a new scale factor and return the one it replaced."""
    global _timeout_scale
    previous = _timeout_scale
    _timeout_scale = value
    return previous


def timeout(base: D) -> D:
    """Scale ``base`` (a timedelta or seconds) by the current factor."""
    return base * _timeout_scale


def sleep(base: timedelta | float) -> None:
    """Sleep for ``base`` scaled by the current factor."""
    scaled = timeout(base)
    seconds = scaled.total_seconds() if isinstance(scaled, timedelta) else scaled
    time.sleep(max(seconds, 0.0))


def initialize(factor: str) -> Callable[[], float]:
    """Set the scale factor from text and return a function restoring the old one."""
    if factor != factor.strip() or "_" in factor:
        raise ValueError(f"invalid timeout scale: {factor!r}")
    value = float(factor)
    original = _set_scale(value)
    return functools.partial(_set_scale, original)


_env_scale = os.environ.get("TEST_TIMEOUT_SCALE", "")
if _env_scale:
    initialize(_env_scale)
    print(f"Scaling timeouts by {_timeout_scale:g}x.", file=sys.stderr)