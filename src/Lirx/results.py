# src/Lirx/results.py

from __future__ import annotations

from dataclasses import dataclass

import httpx
import orjson

from Lirx.errors import APIError, ResponseDecodeError
from Lirx.types import JSONValue

NO_CONTENT = 204


@dataclass(frozen=True, slots=True)
class APIResult:
    """Outcome of one Discord request, split by status code.

    ``data`` is the decoded JSON body of a 2xx response (``None`` when the
    body is empty). ``error`` is set instead for any other status.
    """

    status_code: int
    data: JSONValue = None
    error: APIError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> JSONValue:
        """Return ``data``, or raise ``error`` if Discord reported a failure."""
        if self.error is not None:
            raise self.error
        return self.data

    @classmethod
    def from_response(cls, response: httpx.Response) -> APIResult:
        if response.is_success:
            if not response.content:
                return cls(status_code=response.status_code)
            try:
                data = orjson.loads(response.content)
            except orjson.JSONDecodeError as e:
                raise ResponseDecodeError(response.status_code, response.text) from e
            return cls(status_code=response.status_code, data=data)
        return cls(status_code=response.status_code, error=api_error_from_response(response))


def api_error_from_response(response: httpx.Response) -> APIError:
    """Build an APIError from a failed response.

    Discord error bodies look like ``{"code": 50035, "message": "...",
    "errors": {...}}``. Empty or non-JSON bodies fall back to the reason
    phrase or raw text.
    """
    text = response.text
    payload: JSONValue = None
    if response.content:
        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            payload = None

    if isinstance(payload, dict):
        return APIError(
            response.status_code,
            str(payload.get("message") or response.reason_phrase),
            code=payload.get("code"),
            errors=payload.get("errors"),
            body=text,
        )
    return APIError(
        response.status_code,
        text.strip()[:200] or response.reason_phrase or "no response body",
        body=text,
    )
