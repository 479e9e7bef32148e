"""Log destinations and a registry of sink factories keyed by URL scheme."""

from __future__ import annotations

import json
import os
import re
import string
import sys
import threading
from typing import Callable, Protocol, TextIO, runtime_checkable
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

__all__ = [
    "Sink",
    "SinkFactory",
    "SinkNotFoundError",
    "SinkRegistry",
    "normalize_scheme",
    "register_sink",
    "default_registry",
]

_SCHEME_FILE = "file"
_SCHEME_CHARS = frozenset(string.ascii_lowercase + string.digits + ".+-")
_CONTROL_CHAR = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@runtime_checkable
class Sink(Protocol):
    """A log destination that can be written to, synced and closed."""

    def write(self, data: bytes) -> int: ...

    def sync(self) -> None: ...

    def close(self) -> None: ...


SinkFactory = Callable[[SplitResult], Sink]


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class SinkNotFoundError(LookupError):
    """Raised when no factory is registered for a URL's scheme."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"no sink found for scheme {_quote(scheme)}")
        self.scheme = scheme


class _StreamSink:
    """Writes to a standard stream; closing it leaves the stream open."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write(self, data: bytes) -> int:
        data = bytes(data)
        buffer = getattr(self._stream, "buffer", None)
        if buffer is None:
            self._stream.write(data.decode("utf-8", errors="replace"))
        else:
            self._stream.flush()
            buffer.write(data)
        return len(data)

    def sync(self) -> None:
        self._stream.flush()
        buffer = getattr(self._stream, "buffer", None)
        if buffer is not None:
            buffer.flush()

    def close(self) -> None:
        """Flush pending output; the standard stream itself stays open."""
        self.sync()


class _FileSink:
    """An unbuffered file opened for appending, created if missing."""

    def __init__(self, path: str) -> None:
        self._file = open(path, "ab", buffering=0)

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def sync(self) -> None:
        os.fsync(self._file.fileno())

    def close(self) -> None:
        self._file.close()


def _split_host_port(host: str) -> tuple[str, str]:
    if host.startswith("["):
        end = host.find("]")
        if end < 0:
            return host, ""
        rest = host[end + 1 :]
        return host[1:end], rest[1:] if rest.startswith(":") else ""
    name, sep, port = host.rpartition(":")
    if not sep:
        return host, ""
    return name, port


def _parse_url(raw: str) -> SplitResult:
    if _CONTROL_CHAR.search(raw):
        raise ValueError("invalid control character in URL")
    if raw.startswith(":"):
        raise ValueError("missing protocol scheme")
    if _BAD_ESCAPE.search(raw):
        raise ValueError("invalid URL escape")
    parts = urlsplit(raw)
    if not parts.scheme and ":" in raw.split("/", 1)[0]:
        raise ValueError("first path segment in URL cannot contain colon")
    _, port = _split_host_port(parts.netloc.rpartition("@")[2])
    if port and not port.isdigit():
        raise ValueError(f"invalid port {_quote(':' + port)} after host")
    return parts._replace(path=unquote(parts.path))


def normalize_scheme(s: str) -> str:
    """Lowercase a URL scheme and check it against RFC 3986 section 3.1."""
    s = s.lower()
    if not s or not ("a" <= s[0] <= "z"):
        raise ValueError("must start with a letter")
    for c in s[1:]:
        if c not in _SCHEME_CHARS:
            raise ValueError(f"may not contain {c!r}")
    return s


class SinkRegistry:
    """Maps URL schemes to sink factories; "file" is registered up front."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._factories: dict[str, SinkFactory] = {}
        self.register_sink(_SCHEME_FILE, self._file_sink_from_url)

    def register_sink(self, scheme: str, factory: SinkFactory) -> None:
        """Register ``factory`` for ``scheme``; each scheme may be taken once."""
        with self._lock:
            if scheme == "":
                raise ValueError("can't register a sink factory for empty string")
            try:
                normalized = normalize_scheme(scheme)
            except ValueError as exc:
                raise ValueError(
                    f"{_quote(scheme)} is not a valid scheme: {exc}"
                ) from None
            if normalized in self._factories:
                raise ValueError(
                    f"sink factory already registered for scheme {_quote(normalized)}"
                )
            self._factories[normalized] = factory

    def new_sink(self, raw_url: str) -> Sink:
        """Open the sink a URL or path names.

        Absolute paths and URLs without a scheme are opened as files.
        """
        if os.path.isabs(raw_url):
            return self._file_sink_from_path(raw_url)
        try:
            url = _parse_url(raw_url)
        except ValueError as exc:
            raise ValueError(f"can't parse {_quote(raw_url)} as a URL: {exc}") from None
        if not url.scheme:
            url = url._replace(scheme=_SCHEME_FILE)
        with self._lock:
            factory = self._factories.get(url.scheme)
        if factory is None:
            raise SinkNotFoundError(url.scheme)
        return factory(url)

    def _file_sink_from_url(self, url: SplitResult) -> Sink:
        shown = urlunsplit(url)
        if "@" in url.netloc:
            raise ValueError(f"user and password not allowed with file URLs: got {shown}")
        if url.fragment:
            raise ValueError(f"fragments not allowed with file URLs: got {shown}")
        if url.query:
            raise ValueError(f"query parameters not allowed with file URLs: got {shown}")
        hostname, port = _split_host_port(url.netloc)
        if port:
            raise ValueError(f"ports not allowed with file URLs: got {shown}")
        if hostname not in ("", "localhost"):
            raise ValueError(
                f"file URLs must leave host empty or use localhost: got {shown}"
            )
        return self._file_sink_from_path(url.path)

    @staticmethod
    def _file_sink_from_path(path: str) -> Sink:
        if path == "stdout":
            return _StreamSink(sys.stdout)
        if path == "stderr":
            return _StreamSink(sys.stderr)
        return _FileSink(path)


_default_registry = SinkRegistry()


def default_registry() -> SinkRegistry:
    """Return the process-wide registry used when opening paths."""
    return _default_registry


def register_sink(scheme: str, factory: SinkFactory) -> None:
    """Register a factory for a scheme in the process-wide registry."""
    _default_registry.register_sink(scheme, factory)