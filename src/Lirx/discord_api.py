# src/Lirx/discord_api.py

import math
import time
from collections.abc import Mapping
from typing import Any

import httpx
import orjson
import structlog

from Lirx import metrics
from Lirx.config import DEFAULT_API_VERSION, DEFAULT_DISCORD_URL
from Lirx.errors import TransportError
from Lirx.types import CommandDocument, Snowflake

log = structlog.get_logger()

__all__ = ["DiscordAPI", "USER_AGENT"]

# Discord requires bots to identify as "DiscordBot (url, version)"
USER_AGENT = "DiscordBot (https://github.com/One-Nub/lirx, 1.0.0)"


class DiscordAPI:
    """
    Sends application command REST requests to Discord.

    Every method issues exactly one request and returns the raw
    ``httpx.Response``; status codes are left for the caller to interpret.
    ``guild_id=None`` targets the global command endpoints, a guild ID the
    guild-scoped ones. Permission endpoints only exist per guild.

    ``discord_url`` must end in "/" (one is appended if missing). Pass
    ``http_client`` to reuse an existing ``httpx.AsyncClient``; it is then
    left open by ``close()``.
    """

    def __init__(
        self,
        auth_token: str,
        application_id: Snowflake,
        discord_url: str = DEFAULT_DISCORD_URL,
        api_version: str = DEFAULT_API_VERSION,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 20.0,
    ):
        if not discord_url.endswith("/"):
            discord_url = f"{discord_url}/"
        self.discord_url = discord_url
        self.api_version = api_version
        self.application_id = application_id
        self._auth_token = auth_token
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "DiscordAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_url(self, endpoint: str) -> str:
        return f"{self.discord_url}{self.api_version}/applications/{self.application_id}/{endpoint}"

    def _scoped(self, endpoint: str, guild_id: Snowflake | None) -> str:
        if guild_id is None:
            return self.build_url(endpoint)
        return self.build_url(f"guilds/{guild_id}/{endpoint}")

    def build_headers(
        self, *, has_body: bool = False, bearer_token: str | None = None
    ) -> dict[str, str]:
        if bearer_token is None:
            authorization = f"Bot {self._auth_token}"
        else:
            authorization = f"Bearer {bearer_token}"
        headers = {
            "Accept": "application/json",
            "Authorization": authorization,
            "User-Agent": USER_AGENT,
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        body: Any = None,
        *,
        params: dict[str, str] | None = None,
        bearer_token: str | None = None,
    ) -> httpx.Response:
        has_body = body is not None
        headers = self.build_headers(has_body=has_body, bearer_token=bearer_token)
        content = orjson.dumps(body) if has_body else None

        log.info("discord.request.send", method=method, url=url, has_body=has_body)
        metrics.inc_counter(f"discord.request.{method}")
        start = time.perf_counter()
        try:
            response = await self._client.request(
                method, url, params=params, headers=headers, content=content
            )
        except httpx.TransportError as e:
            log.error("discord.request.network_error", method=method, url=url, error=str(e))
            metrics.inc_counter("discord.request.network_error")
            raise TransportError(method, url, str(e) or type(e).__name__) from e

        dur_ms = math.trunc((time.perf_counter() - start) * 1000)
        metrics.inc_counter(f"discord.response.{response.status_code}")
        log.info(
            "discord.request.completed",
            method=method,
            url=url,
            http_status_code=response.status_code,
            duration_ms=dur_ms,
        )
        return response

    async def get_all_commands(
        self, guild_id: Snowflake | None = None, with_localizations: bool = False
    ) -> httpx.Response:
        """Fetch every global or guild command, optionally with full localizations."""
        params = {"with_localizations": "true" if with_localizations else "false"}
        return await self._request("GET", self._scoped("commands", guild_id), params=params)

    async def create_command(
        self, command: CommandDocument, guild_id: Snowflake | None = None
    ) -> httpx.Response:
        return await self._request("POST", self._scoped("commands", guild_id), command)

    async def get_command(
        self, command_id: Snowflake, guild_id: Snowflake | None = None
    ) -> httpx.Response:
        return await self._request("GET", self._scoped(f"commands/{command_id}", guild_id))

    async def edit_command(
        self, command: CommandDocument, command_id: Snowflake, guild_id: Snowflake | None = None
    ) -> httpx.Response:
        """PATCH a published command. Only the fields present in ``command`` change."""
        return await self._request("PATCH", self._scoped(f"commands/{command_id}", guild_id), command)

    async def delete_command(
        self, command_id: Snowflake, guild_id: Snowflake | None = None
    ) -> httpx.Response:
        """Delete a published command. Discord answers 204 No Content on success."""
        return await self._request("DELETE", self._scoped(f"commands/{command_id}", guild_id))

    async def bulk_overwrite_commands(
        self, commands: list[CommandDocument], guild_id: Snowflake | None = None
    ) -> httpx.Response:
        """Replace every command in the scope with ``commands``.

        Commands missing from the list are deleted by Discord; an empty list
        clears the scope.
        """
        return await self._request("PUT", self._scoped("commands", guild_id), list(commands))

    async def get_all_command_permissions(self, guild_id: Snowflake) -> httpx.Response:
        return await self._request("GET", self.build_url(f"guilds/{guild_id}/commands/permissions"))

    async def get_command_permissions(
        self, command_id: Snowflake, guild_id: Snowflake
    ) -> httpx.Response:
        return await self._request(
            "GET", self.build_url(f"guilds/{guild_id}/commands/{command_id}/permissions")
        )

    async def edit_command_permissions(
        self,
        permissions: list[dict[str, Any]] | Mapping[str, Any],
        command_id: Snowflake,
        guild_id: Snowflake,
        bearer_token: str,
    ) -> httpx.Response:
        """Overwrite the permissions of one command in a guild.

        Discord rejects bot tokens here, so this call alone authorizes with
        ``Bearer <bearer_token>``. The stored bot token is not touched.
        ``permissions`` is either the list of permission objects or the full
        ``{"permissions": [...]}`` body, which is sent unchanged.
        See https://discord.com/developers/docs/interactions/application-commands#permissions
        """
        if not bearer_token:
            raise ValueError("edit_command_permissions requires a non-empty bearer token.")
        if isinstance(permissions, Mapping):
            body = dict(permissions)
        elif isinstance(permissions, list | tuple):
            body = {"permissions": list(permissions)}
        else:
            raise TypeError(
                f"permissions must be a list or a mapping, not {type(permissions).__name__}"
            )
        return await self._request(
            "PUT",
            self.build_url(f"guilds/{guild_id}/commands/{command_id}/permissions"),
            body,
            bearer_token=bearer_token,
        )
