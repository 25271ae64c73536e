"""Exception types raised by Lirx."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class LirxError(Exception):
    """Base class for every error raised by this package."""

    pass


class ParseError(LirxError):
    """A command document could not be read or parsed.

    The underlying ``OSError`` or ``tomllib.TOMLDecodeError`` is chained as
    ``__cause__``.
    """

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to parse command document {self.path}: {reason}")


class TransportError(LirxError):
    """The HTTP request never produced a response (connect, read, timeout...)."""

    def __init__(self, method: str, url: str, reason: str):
        self.method = method
        self.url = url
        self.reason = reason
        super().__init__(f"{method} {url} failed: {reason}")


class APIError(LirxError):
    """Discord answered with a non-success status.

    ``code`` and ``message`` come from Discord's JSON error object when the
    body has one; ``errors`` holds the nested per-field error tree.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        code: int | None = None,
        errors: dict[str, Any] | None = None,
        body: str = "",
    ):
        self.status_code = status_code
        self.message = message
        self.code = code
        self.errors = errors or {}
        self.body = body
        detail = f" (code {code})" if code is not None else ""
        super().__init__(f"Discord API error {status_code}{detail}: {message}")


class ResponseDecodeError(LirxError):
    """A success response carried a body that is not valid JSON."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Could not decode JSON body of {status_code} response: {body[:200]!r}"
        )
