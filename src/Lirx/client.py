# src/Lirx/client.py

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import httpx
import structlog

from Lirx.config import Settings
from Lirx.discord_api import DiscordAPI
from Lirx.loader import CommandLoader
from Lirx.results import NO_CONTENT, APIResult
from Lirx.types import CommandDocument, CommandList, Snowflake

log = structlog.get_logger()


class Lirx:
    """
    Entry point for loading and publishing application commands.

    Documents loaded through ``load_document``/``load_file``/``load_files``
    are staged in ``commands`` and only used by ``bulk_publish_commands``.
    Every other operation takes the command it acts on as an argument.

    Network methods return an ``APIResult``: check ``result.ok`` or call
    ``result.unwrap()`` to get the decoded JSON. The raw responses are
    available through ``api``.
    """

    def __init__(
        self,
        bot_token: str,
        application_id: Snowflake,
        discord_url: str | None = None,
        api_version: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 20.0,
    ):
        self.application_id = application_id
        self.loader = CommandLoader()
        overrides: dict[str, Any] = {}
        if discord_url is not None:
            overrides["discord_url"] = discord_url
        if api_version is not None:
            overrides["api_version"] = api_version
        self.api = DiscordAPI(
            bot_token,
            application_id,
            http_client=http_client,
            timeout=timeout,
            **overrides,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Lirx":
        if not settings.discord_app_id or settings.discord_bot_token is None:
            raise ValueError("Lirx requires discord_app_id and discord_bot_token to be set.")
        return cls(
            settings.discord_bot_token.get_secret_value(),
            settings.discord_app_id,
            settings.discord_api_url,
            settings.discord_api_version,
            timeout=settings.http_timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "Lirx":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.api.close()

    # --- Loading ---

    @property
    def commands(self) -> CommandList:
        return self.loader.commands

    def load_document(self, document: CommandDocument) -> CommandDocument:
        return self.loader.load_document(document)

    def load_file(self, path: str | Path) -> CommandDocument:
        return self.loader.load_file(path)

    def load_files(self, paths: Iterable[str | Path]) -> CommandList:
        return self.loader.load_files(paths)

    def load_directory(self, directory: str | Path, pattern: str = "*.toml") -> CommandList:
        return self.loader.load_directory(directory, pattern)

    # --- Publishing ---

    async def publish_command(
        self, command: CommandDocument, guild_id: Snowflake | None = None
    ) -> APIResult:
        """Create one command globally or in ``guild_id``.

        On success ``data`` is the command as Discord stored it, including
        its ID.
        """
        return self._result(
            "publish_command", await self.api.create_command(command, guild_id)
        )

    async def bulk_publish_commands(
        self, commands: list[CommandDocument] | None = None, guild_id: Snowflake | None = None
    ) -> APIResult:
        """Overwrite every command in the scope with ``commands``.

        Defaults to the staged ``commands`` list. Pass ``[]`` to clear the
        scope. New commands count towards Discord's daily create limit,
        existing ones do not.
        """
        if commands is None:
            commands = self.commands
        return self._result(
            "bulk_publish_commands",
            await self.api.bulk_overwrite_commands(commands, guild_id),
            count=len(commands),
        )

    async def edit_command(
        self, command: CommandDocument, command_id: Snowflake, guild_id: Snowflake | None = None
    ) -> APIResult:
        """Patch a published command; fields missing from ``command`` are kept.

        Accepted fields:
        https://discord.com/developers/docs/interactions/application-commands#edit-global-application-command-json-params
        """
        return self._result(
            "edit_command", await self.api.edit_command(command, command_id, guild_id)
        )

    async def delete_command(self, command_id: Snowflake, guild_id: Snowflake | None = None) -> bool:
        """Return True iff Discord answered 204 No Content. Never raises on error statuses."""
        response = await self.api.delete_command(command_id, guild_id)
        deleted = response.status_code == NO_CONTENT
        if not deleted:
            log.warning(
                "commands.delete_command.failed",
                command_id=str(command_id),
                http_status_code=response.status_code,
            )
        return deleted

    # --- Fetching ---

    async def get_command(self, command_id: Snowflake, guild_id: Snowflake | None = None) -> APIResult:
        return self._result("get_command", await self.api.get_command(command_id, guild_id))

    async def bulk_get_commands(
        self, guild_id: Snowflake | None = None, with_localizations: bool = False
    ) -> APIResult:
        """List published commands; ``data`` is an empty list when there are none."""
        return self._result(
            "bulk_get_commands",
            await self.api.get_all_commands(guild_id, with_localizations=with_localizations),
        )

    # --- Permissions ---

    async def get_command_permissions(self, command_id: Snowflake, guild_id: Snowflake) -> APIResult:
        return self._result(
            "get_command_permissions",
            await self.api.get_command_permissions(command_id, guild_id),
        )

    async def bulk_get_command_permissions(self, guild_id: Snowflake) -> APIResult:
        return self._result(
            "bulk_get_command_permissions",
            await self.api.get_all_command_permissions(guild_id),
        )

    async def edit_command_permissions(
        self,
        permissions: list[dict[str, Any]] | Mapping[str, Any],
        command_id: Snowflake,
        guild_id: Snowflake,
        bearer_token: str,
    ) -> APIResult:
        """Overwrite a command's permissions in ``guild_id``.

        Requires an OAuth2 bearer token; Discord refuses bot tokens here.
        """
        return self._result(
            "edit_command_permissions",
            await self.api.edit_command_permissions(permissions, command_id, guild_id, bearer_token),
        )

    def _result(self, operation: str, response: httpx.Response, **fields: Any) -> APIResult:
        result = APIResult.from_response(response)
        if result.error is not None:
            log.warning(
                f"commands.{operation}.failed",
                http_status_code=result.status_code,
                discord_code=result.error.code,
                error=result.error.message,
                **fields,
            )
        else:
            log.info(f"commands.{operation}.ok", http_status_code=result.status_code, **fields)
        return result
