"""Logging levels, level enablers and an atomically changeable level."""

from __future__ import annotations

import json
import threading
from enum import IntEnum
from typing import Callable, Protocol, runtime_checkable

__all__ = [
    "Level",
    "UnrecognizedLevelError",
    "LeveledEnabler",
    "LevelEnablerFunc",
    "AtomicLevel",
    "parse_atomic_level",
]


class UnrecognizedLevelError(ValueError):
    """Raised when text does not name a known logging level."""


class Level(IntEnum):
    """A logging priority. Higher levels are more important."""

    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5

    @classmethod
    def from_text(cls, text: str | bytes) -> Level:
        """Parse a lowercase or all-caps level name; empty text means INFO."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        if text == "":
            return cls.INFO
        lowered = text.lower()
        if text in (lowered, lowered.upper()):
            member = cls.__members__.get(lowered.upper())
            if member is not None:
                return member
        raise UnrecognizedLevelError(
            f"unrecognized level: {json.dumps(text, ensure_ascii=False)}"
        )

    def enabled(self, lvl: Level | int) -> bool:
        """Report whether messages at ``lvl`` pass this minimum level."""
        return lvl >= self

    def __str__(self) -> str:
        return self.name.lower()


@runtime_checkable
class LeveledEnabler(Protocol):
    """A level enabler that can also report its own minimum level."""

    @property
    def level(self) -> Level: ...

    def enabled(self, lvl: Level) -> bool: ...


class LevelEnablerFunc:
    """Adapts a plain predicate on levels into a level enabler."""

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[Level], bool]) -> None:
        self._func = func

    def enabled(self, lvl: Level) -> bool:
        """Call the wrapped predicate."""
        return bool(self._func(lvl))


class AtomicLevel:
    """A thread-safe, dynamically changeable minimum logging level."""

    __slots__ = ("_lock", "_level")

    def __init__(self, level: Level | int = Level.INFO) -> None:
        self._lock = threading.Lock()
        self._level = Level(level)

    @property
    def level(self) -> Level:
        """The minimum enabled level."""
        with self._lock:
            return self._level

    @level.setter
    def level(self, value: Level | int) -> None:
        new = Level(value)
        with self._lock:
            self._level = new

    def enabled(self, lvl: Level) -> bool:
        """Report whether messages at ``lvl`` are enabled."""
        return self.level.enabled(lvl)

    def unmarshal_text(self, text: str | bytes) -> None:
        """Set the level from its text form; the level is unchanged on error."""
        self.level = Level.from_text(text)

    def marshal_text(self) -> bytes:
        """Return the text form of the current level."""
        return str(self.level).encode()

    def __str__(self) -> str:
        return str(self.level)

    def __repr__(self) -> str:
        return f"AtomicLevel({self.level!s})"


def parse_atomic_level(text: str | bytes) -> AtomicLevel:
    """Build an AtomicLevel from a lowercase or all-caps level name."""
    return AtomicLevel(Level.from_text(text))