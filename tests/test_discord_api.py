# tests/test_discord_api.py

import httpx
import orjson
import pytest

from Lirx import metrics
from Lirx.discord_api import USER_AGENT, DiscordAPI
from Lirx.errors import TransportError


@pytest.fixture
async def api(monkeypatch, transport):
    client = DiscordAPI("bot-token", 123)
    monkeypatch.setattr(client._client, "request", transport)
    try:
        yield client
    finally:
        await client.close()


def test_build_url_global_and_guild():
    api = DiscordAPI("t", 123)
    assert api.build_url("commands") == "https://discord.com/api/v10/applications/123/commands"
    assert api._scoped("commands", 456) == (
        "https://discord.com/api/v10/applications/123/guilds/456/commands"
    )


@pytest.mark.parametrize(
    "discord_url, api_version, expected",
    [
        ("https://example.test/api/", "v9", "https://example.test/api/v9/applications/1/commands"),
        ("http://localhost:8080", "v10", "http://localhost:8080/v10/applications/1/commands"),
    ],
)
def test_build_url_overrides(discord_url, api_version, expected):
    api = DiscordAPI("t", 1, discord_url, api_version)
    assert api.build_url("commands") == expected


def test_snowflakes_render_as_decimal_text():
    api = DiscordAPI("t", 1_094_224_181_463_457_843)
    assert api.build_url("commands").endswith("/applications/1094224181463457843/commands")


@pytest.mark.parametrize(
    "method_name, args, http_method, suffix",
    [
        ("create_command", ({"name": "x"},), "POST", "commands"),
        ("get_command", (9,), "GET", "commands/9"),
        ("edit_command", ({"description": "y"}, 9), "PATCH", "commands/9"),
        ("delete_command", (9,), "DELETE", "commands/9"),
        ("bulk_overwrite_commands", ([{"name": "x"}],), "PUT", "commands"),
    ],
)
@pytest.mark.asyncio
async def test_command_endpoints_route_by_scope(api, transport, method_name, args, http_method, suffix):
    method = getattr(api, method_name)

    await method(*args)
    await method(*args, guild_id=456)

    glob, guild = transport.calls
    base = "https://discord.com/api/v10/applications/123"
    assert glob["method"] == guild["method"] == http_method
    assert glob["url"] == f"{base}/{suffix}"
    assert guild["url"] == f"{base}/guilds/456/{suffix}"


@pytest.mark.asyncio
async def test_get_all_commands_sends_localization_flag(api, transport):
    await api.get_all_commands()
    await api.get_all_commands(guild_id=456, with_localizations=True)

    first, second = transport.calls
    assert first["url"].endswith("/applications/123/commands")
    assert first["params"] == {"with_localizations": "false"}
    assert second["url"].endswith("/applications/123/guilds/456/commands")
    assert second["params"] == {"with_localizations": "true"}


@pytest.mark.asyncio
async def test_headers_without_body(api, transport):
    await api.get_command(9)

    headers = transport.last["headers"]
    assert headers == {
        "Accept": "application/json",
        "Authorization": "Bot bot-token",
        "User-Agent": USER_AGENT,
    }
    assert transport.last["content"] is None


@pytest.mark.asyncio
async def test_body_is_json_with_content_type(api, transport):
    doc = {"name": "roll", "options": [{"name": "expr", "type": 3, "required": True}]}
    await api.create_command(doc)

    assert transport.last["headers"]["Content-Type"] == "application/json"
    assert orjson.loads(transport.last["content"]) == doc


@pytest.mark.asyncio
async def test_bulk_overwrite_with_empty_list_sends_empty_array(api, transport):
    await api.bulk_overwrite_commands([])
    assert transport.last["content"] == b"[]"
    assert transport.last["headers"]["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_permission_endpoints(api, transport):
    await api.get_all_command_permissions(456)
    await api.get_command_permissions(9, 456)

    base = "https://discord.com/api/v10/applications/123/guilds/456/commands"
    assert [c["url"] for c in transport.calls] == [f"{base}/permissions", f"{base}/9/permissions"]
    assert all(c["method"] == "GET" for c in transport.calls)


@pytest.mark.asyncio
async def test_edit_permissions_uses_bearer_once(api, transport):
    perms = [{"id": "789", "type": 1, "permission": True}]

    await api.edit_command_permissions(perms, 9, 456, "user-bearer")
    await api.get_command(9)

    edit, after = transport.calls
    assert edit["method"] == "PUT"
    assert edit["url"] == (
        "https://discord.com/api/v10/applications/123/guilds/456/commands/9/permissions"
    )
    assert edit["headers"]["Authorization"] == "Bearer user-bearer"
    assert orjson.loads(edit["content"]) == {"permissions": perms}
    assert after["headers"]["Authorization"] == "Bot bot-token"


@pytest.mark.asyncio
async def test_returns_raw_response_without_interpreting_status(api, transport):
    transport.queue(404, json={"message": "Unknown application command", "code": 10063})

    resp = await api.get_command(9)

    assert isinstance(resp, httpx.Response)
    assert resp.status_code == 404
    assert metrics.get_counter("discord.request.GET") == 1
    assert metrics.get_counter("discord.response.404") == 1


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error(api, transport):
    transport.fail_with(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError) as ei:
        await api.delete_command(9)

    assert ei.value.method == "DELETE"
    assert ei.value.url.endswith("/commands/9")
    assert isinstance(ei.value.__cause__, httpx.ConnectError)
    assert metrics.get_counter("discord.request.network_error") == 1


@pytest.mark.asyncio
async def test_external_client_is_not_closed():
    external = httpx.AsyncClient()
    async with DiscordAPI("t", 1, http_client=external):
        pass
    assert not external.is_closed
    await external.aclose()


@pytest.mark.asyncio
async def test_edit_permissions_rejects_empty_bearer(api, transport):
    with pytest.raises(ValueError):
        await api.edit_command_permissions([], 9, 456, "")
    assert transport.calls == []


@pytest.mark.asyncio
async def test_edit_permissions_accepts_full_body(api, transport):
    body = {"permissions": [{"id": "789", "type": 2, "permission": False}]}

    await api.edit_command_permissions(body, 9, 456, "user-bearer")

    assert orjson.loads(transport.last["content"]) == body


@pytest.mark.asyncio
async def test_edit_permissions_rejects_other_types(api, transport):
    with pytest.raises(TypeError):
        await api.edit_command_permissions("789", 9, 456, "user-bearer")
    assert transport.calls == []


def test_build_headers_empty_bearer_is_not_bot():
    api = DiscordAPI("bot-token", 1)
    assert api.build_headers(bearer_token="")["Authorization"] == "Bearer "
    assert api.build_headers()["Authorization"] == "Bot bot-token"
