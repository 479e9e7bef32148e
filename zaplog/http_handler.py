"""A JSON endpoint that reports or changes an AtomicLevel."""

from __future__ import annotations

import json
import re
from http import HTTPStatus
from typing import Any, Callable, Iterable
from urllib.parse import unquote_to_bytes

from .level import AtomicLevel, Level

__all__ = ["handle_level_request", "LevelHandler"]

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _to_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data


def _unescape(component: str) -> str:
    if _BAD_ESCAPE.search(component):
        raise ValueError(f"invalid URL escape in {component!r}")
    return unquote_to_bytes(component.replace("+", " ")).decode(
        "utf-8", errors="replace"
    )


def _parse_form(text: str) -> dict[str, str]:
    """Parse URL-encoded pairs, keeping first values and skipping bad pairs."""
    values: dict[str, str] = {}
    for pair in text.split("&"):
        if not pair or ";" in pair:
            continue
        key, _, value = pair.partition("=")
        try:
            key, value = _unescape(key), _unescape(value)
        except ValueError:
            continue
        values.setdefault(key, value)
    return values


def _decode_put_url(query: str, body: str) -> Level:
    body_form = _parse_form(body)
    if "level" in body_form:
        text = body_form["level"]
    else:
        text = _parse_form(query).get("level", "")
    if text == "":
        raise ValueError("must specify logging level")
    return Level.from_text(text)


def _decode_put_json(body: str) -> Level:
    try:
        document, _ = json.JSONDecoder().raw_decode(body.lstrip(" \t\r\n"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"malformed request body: {exc}") from None
    if document is None:
        raise ValueError("must specify logging level")
    if not isinstance(document, dict):
        raise ValueError(
            f"malformed request body: cannot decode {type(document).__name__} "
            "into a level payload"
        )
    if "level" in document:
        raw = document["level"]
    else:
        raw = None
        for key, value in document.items():
            if key.lower() == "level":
                raw = value
    if raw is None:
        raise ValueError("must specify logging level")
    if not isinstance(raw, str):
        raise ValueError("malformed request body: level must be a string")
    try:
        return Level.from_text(raw)
    except ValueError as exc:
        raise ValueError(f"malformed request body: {exc}") from None


def handle_level_request(
    atomic_level: AtomicLevel,
    method: str,
    content_type: str = "",
    query: str = "",
    body: str | bytes | None = b"",
) -> tuple[HTTPStatus, dict[str, str]]:
    """Serve one request; return the status and the JSON payload to send.

    GET reports the level. PUT changes it, reading a URL-encoded form
    (body before query) or, for any other content type, a JSON body.
    """
    method = method.upper()
    if method == "GET":
        return HTTPStatus.OK, {"level": str(atomic_level.level)}
    if method == "PUT":
        text = _to_text(body)
        try:
            if content_type == _FORM_CONTENT_TYPE:
                requested = _decode_put_url(query.lstrip("?"), text)
            else:
                requested = _decode_put_json(text)
        except ValueError as exc:
            return HTTPStatus.BAD_REQUEST, {"error": str(exc)}
        atomic_level.level = requested
        return HTTPStatus.OK, {"level": str(atomic_level.level)}
    return HTTPStatus.METHOD_NOT_ALLOWED, {"error": "Only GET and PUT are supported."}


class LevelHandler:
    """A WSGI application serving the level endpoint for an AtomicLevel."""

    def __init__(self, atomic_level: AtomicLevel) -> None:
        self.atomic_level = atomic_level

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""
        status, payload = handle_level_request(
            self.atomic_level,
            environ.get("REQUEST_METHOD", "GET"),
            environ.get("CONTENT_TYPE", ""),
            environ.get("QUERY_STRING", ""),
            body,
        )
        data = (json.dumps(payload, separators=(",", ":")) + "\n").encode()
        start_response(
            f"{status.value} {status.phrase}",
            [
                ("Content-Type", "text/plain; charset=utf-8"),
                ("Content-Length", str(len(data))),
            ],
        )
        return [data]