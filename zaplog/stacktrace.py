"""Capturing and formatting the current call stack."""

from __future__ import annotations

import inspect
import sys
from dataclasses import dataclass
from enum import Enum
from types import FrameType

__all__ = [
    "StacktraceDepth",
    "Frame",
    "capture_stacktrace",
    "format_stack",
    "take_stacktrace",
]


class StacktraceDepth(Enum):
    """How much of the call stack to capture."""

    FIRST = 0
    """Only the first frame."""
    FULL = 1
    """The entire call stack."""


@dataclass(frozen=True)
class Frame:
    """One frame of a captured call stack."""

    function: str
    file: str
    line: int

    @classmethod
    def _from_frame(cls, frame: FrameType) -> Frame:
        owner = inspect.getmodule(frame)
        module = owner.__name__ if owner is not None else ""
        qualname = frame.f_code.co_qualname
        function = f"{module}.{qualname}" if module else qualname
        return cls(function, frame.f_code.co_filename, frame.f_lineno)


def capture_stacktrace(
    skip: int, depth: StacktraceDepth = StacktraceDepth.FULL
) -> list[Frame]:
    """Capture the call stack, innermost frame first.

    ``skip=0`` starts at the caller of this function; each increment skips
    one more frame. If ``skip`` reaches past the outermost frame, the result
    is empty.
    """
    try:
        frame: FrameType | None = sys._getframe(max(skip + 1, 0))
    except ValueError:
        return []
    frames: list[Frame] = []
    while frame is not None:
        frames.append(Frame._from_frame(frame))
        if depth is StacktraceDepth.FIRST:
            break
        frame = frame.f_back
    return frames


def format_stack(frames: list[Frame]) -> str:
    """Render frames as ``function`` lines each followed by a tab-indented
    ``file:line`` line."""
    return "\n".join(f"{f.function}\n\t{f.file}:{f.line}" for f in frames)


def take_stacktrace(skip: int = 0) -> str:
    """Return the formatted stack, starting at the caller when ``skip=0``."""
    return format_stack(capture_stacktrace(skip + 1, StacktraceDepth.FULL))