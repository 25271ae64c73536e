# tests/conftest.py

from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest

from Lirx import Lirx, metrics

BOT_TOKEN = "bot-token"
APP_ID = 123


class FakeTransport:
    """Stands in for ``httpx.AsyncClient.request`` and records every call."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: list[httpx.Response | Exception] = []

    def queue(self, status_code: int = 200, json: Any = None, content: bytes | None = None) -> None:
        if json is not None:
            self.responses.append(httpx.Response(status_code, json=json))
        else:
            self.responses.append(httpx.Response(status_code, content=content or b""))

    def fail_with(self, exc: Exception) -> None:
        self.responses.append(exc)

    async def __call__(self, method, url, params=None, headers=None, content=None):  # noqa: ANN001
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "headers": headers or {},
                "content": content,
            }
        )
        nxt = self.responses.pop(0) if self.responses else httpx.Response(200, json={})
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    @property
    def last(self) -> dict[str, Any]:
        return self.calls[-1]


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset_counters()
    yield
    metrics.reset_counters()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
async def lirx(monkeypatch, transport) -> AsyncIterator[Lirx]:
    client = Lirx(BOT_TOKEN, APP_ID)
    monkeypatch.setattr(client.api._client, "request", transport)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def write_toml(tmp_path):
    def _write(name: str, text: str):
        p = tmp_path / name
        p.write_text(text, encoding="utf-8")
        return p

    return _write
