"""Write syncers that record, discard or fail, for testing log output."""

from __future__ import annotations

import io

__all__ = ["Syncer", "Discarder", "FailWriter", "ShortWriter", "Buffer"]


class Syncer:
    """Records calls to ``sync`` and raises a configured error from it."""

    def __init__(self) -> None:
        self._err: BaseException | None = None
        self._called = False

    def set_error(self, err: BaseException | None) -> None:
        """Set the error that ``sync`` will raise."""
        self._err = err

    def sync(self) -> None:
        """Record the call, then raise the configured error if there is one."""
        self._called = True
        if self._err is not None:
            raise self._err

    def called(self) -> bool:
        """Report whether ``sync`` was called."""
        return self._called


class Discarder(Syncer):
    """Drops every write."""

    def write(self, b: bytes) -> int:
        return len(b)


class FailWriter(Syncer):
    """Fails every write."""

    def write(self, b: bytes) -> int:
        raise OSError("failed")


class ShortWriter(Syncer):
    """Never fails, but always reports one byte fewer than it was given."""

    def write(self, b: bytes) -> int:
        return len(b) - 1


class Buffer(Syncer):
    """Keeps every write in memory, with helpers to read it back as lines."""

    def __init__(self) -> None:
        super().__init__()
        self._buf = io.BytesIO()

    def write(self, b: bytes) -> int:
        return self._buf.write(b)

    def getvalue(self) -> str:
        """Return everything written so far, as text."""
        return self._buf.getvalue().decode("utf-8", errors="replace")

    def lines(self) -> list[str]:
        """Return the contents split on newlines, without the final piece."""
        return self.getvalue().split("\n")[:-1]

    def stripped(self) -> str:
        """Return the contents without trailing newlines."""
        return self.getvalue().rstrip("\n")

    def __str__(self) -> str:
        return self.getvalue()