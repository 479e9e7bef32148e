"""Process exit that tests can replace with a recording stub."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable

__all__ = ["exit_with", "StubbedExit", "stub", "with_stub"]

_exit: Callable[[int], object] = sys.exit


def exit_with(code: int) -> None:
    """Exit with ``code``, or record the call if exiting is stubbed."""
    _exit(code)


@dataclass
class StubbedExit:
    """Records whether, and with which code, an exit was requested."""

    exited: bool = False
    code: int = 0
    _prev: Callable[[int], object] = field(default=sys.exit, repr=False, compare=False)

    def unstub(self) -> None:
        """Restore the exit function in place before this stub."""
        global _exit
        _exit = self._prev

    def _record(self, code: int) -> None:
        self.exited = True
        self.code = code


def stub() -> StubbedExit:
    """Replace exiting with a recording stub and return it."""
    global _exit
    stubbed = StubbedExit(_prev=_exit)
    _exit = stubbed._record
    return stubbed


def with_stub(f: Callable[[], object]) -> StubbedExit:
    """Run ``f`` with exiting stubbed and return the stub that was used."""
    stubbed = stub()
    try:
        f()
    finally:
        stubbed.unstub()
    return stubbed