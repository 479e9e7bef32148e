"""Opening log destinations by URL and combining write syncers."""

from __future__ import annotations

import contextlib
import json
import threading
from typing import Callable, Protocol, Sequence

from .sink import Sink, default_registry

__all__ = ["open_paths", "combine_write_syncers"]


class _WriteSyncer(Protocol):
    def write(self, data: bytes) -> int: ...

    def sync(self) -> None: ...


class _Discard:
    """Accepts and drops every write, counting bytes dropped since the last sync."""

    def __init__(self) -> None:
        self.unsynced = 0

    def write(self, data: bytes) -> int:
        self.unsynced += len(data)
        return len(data)

    def sync(self) -> None:
        self.unsynced = 0

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Discard)

    def __hash__(self) -> int:
        return hash(_Discard)


class _LockedMultiWriteSyncer:
    """Serialises writes and syncs and fans them out to several writers."""

    def __init__(self, writers: Sequence[_WriteSyncer]) -> None:
        self._writers = tuple(writers)
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        errors: list[Exception] = []
        written: int | None = None
        with self._lock:
            for writer in self._writers:
                try:
                    n = writer.write(data)
                except Exception as exc:
                    errors.append(exc)
                    n = 0
                if n is None:
                    n = len(data)
                written = n if written is None else min(written, n)
        if errors:
            raise ExceptionGroup("write failed", errors)
        return written if written is not None else 0

    def sync(self) -> None:
        errors: list[Exception] = []
        with self._lock:
            for writer in self._writers:
                try:
                    writer.sync()
                except Exception as exc:
                    errors.append(exc)
        if errors:
            raise ExceptionGroup("sync failed", errors)


def combine_write_syncers(*args: _WriteSyncer) -> _WriteSyncer:
    """Combine writers into one locked writer; with none, a discarding one."""
    if not args:
        return _Discard()
    return _LockedMultiWriteSyncer(args)


def open_paths(*args: str) -> tuple[_WriteSyncer, Callable[[], None]]:
    """Open every URL or path given and combine them into one writer.

    Returns the writer and a function that closes what was opened. If any
    destination fails to open, the others are closed and an ExceptionGroup
    holding every failure is raised; each failure carries a note naming
    its path.
    """
    registry = default_registry()
    sinks: list[Sink] = []
    errors: list[Exception] = []

    def close() -> None:
        for sink in sinks:
            with contextlib.suppress(Exception):
                sink.close()

    for path in args:
        try:
            sinks.append(registry.new_sink(path))
        except Exception as exc:
            exc.add_note(f"open sink {json.dumps(path, ensure_ascii=False)}")
            errors.append(exc)

    if errors:
        close()
        raise ExceptionGroup(f"failed to open {len(errors)} sink(s)", errors)
    return combine_write_syncers(*sinks), close