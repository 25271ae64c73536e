#!/usr/bin/env python3


"""
Discord Command Management Script

Loads TOML command definitions and syncs them to Discord with Lirx.

Usage:
  - To check the status of commands:
    python register_commands.py --status [--global|--guild [GUILD_ID]] [PATH ...]
  - To publish (bulk overwrite) commands:
    python register_commands.py --publish [--global|--guild [GUILD_ID]] [PATH ...]
  - To remove every command in a scope:
    python register_commands.py --clear [--global|--guild [GUILD_ID]]

Arguments:
  PATH            TOML files to load. Defaults to every *.toml in --commands-dir.
  --status        Compare local definitions with published commands.
  --publish       Bulk overwrite the scope with the loaded definitions.
  --clear         Bulk overwrite the scope with an empty list.
  --global        Apply action to global commands (default).
  --guild         Apply action to guild commands. Optionally specify a guild ID.
  --commands-dir  Directory scanned when no PATH is given.

Environment Variables (or .env / config.toml):
  - DISCORD_APPLICATION_ID or DISCORD_APP_ID: The application ID of the Discord bot.
  - DISCORD_BOT_TOKEN: The bot token for authentication.
  - DISCORD_GUILD_ID (optional): The guild ID for guild-scoped commands.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog
from dotenv import load_dotenv
from prettytable import PrettyTable

from Lirx import Lirx, LirxError
from Lirx.config import load_settings
from Lirx.logging import redact_settings, setup_logging

log = structlog.get_logger()


def format_options(options, level=0):
    formatted = []
    indent = "  " * level
    for opt in options:
        sub_options = opt.get("options", [])
        formatted.append(
            f"{indent}- {opt['name']} ({'Required' if opt.get('required', False) else 'Optional'}): "
            f"{opt.get('description', 'No description')}"
        )
        if sub_options:
            formatted.extend(format_options(sub_options, level + 1))
    return formatted


def build_status_table(local_commands, registered_commands) -> PrettyTable:
    table = PrettyTable()
    table.field_names = ["Command Name", "Registered", "ID", "Description", "Options"]
    table.hrules = 1  # Enable horizontal row lines

    registered_by_name = {rc.get("name"): rc for rc in registered_commands}
    for cmd in local_commands:
        registered = registered_by_name.get(cmd.get("name"))
        options = "\n".join(format_options(cmd.get("options", [])))
        table.add_row([
            cmd.get("name", "<unnamed>"),
            "Yes" if registered else "No",
            registered.get("id", "") if registered else "",
            cmd.get("description", "No description"),
            options or "No options",
        ])

    # Published commands with no local definition would be removed by --publish
    local_names = {cmd.get("name") for cmd in local_commands}
    for name, rc in registered_by_name.items():
        if name not in local_names:
            table.add_row([name, "Remote only", rc.get("id", ""), rc.get("description", ""), ""])
    return table


async def print_status(lirx: Lirx, guild_id, scope: str) -> bool:
    result = await lirx.bulk_get_commands(guild_id)
    if not result.ok:
        print(f"Failed to fetch {scope} commands: {result.error}")
        return False
    print(f"\nStatus for {scope} commands:")
    print(build_status_table(lirx.commands, result.data or []))
    return True


async def publish(lirx: Lirx, guild_id, scope: str, commands=None) -> bool:
    result = await lirx.bulk_publish_commands(commands, guild_id)
    if not result.ok:
        print(f"Failed to publish {scope} commands: {result.error}")
        for key, value in (result.error.errors or {}).items():
            print(f"  {key}: {value}")
        return False
    names = ", ".join(c.get("name", "<unnamed>") for c in result.data or []) or "(none)"
    print(f"Published {len(result.data or [])} {scope} command(s): {names}")
    return True


async def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage Discord slash commands.")
    parser.add_argument("paths", nargs="*", help="TOML command definition files.")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--status", action="store_true", help="Check the status of commands.")
    action.add_argument("--publish", action="store_true", help="Bulk overwrite commands.")
    action.add_argument("--clear", action="store_true", help="Remove all commands in the scope.")
    parser.add_argument("--global", action="store_true", dest="is_global", help="Apply action to global commands.")
    parser.add_argument(
        "--guild",
        nargs="?",
        const=True,
        dest="is_guild",
        help="Apply action to guild commands. Optionally specify a guild ID.",
    )
    parser.add_argument("--commands-dir", help="Directory of TOML definitions.")
    args = parser.parse_args(argv)

    # .env.local (preferred) over .env; Settings reads the process env
    env_local = Path(".env.local")
    load_dotenv(dotenv_path=env_local if env_local.exists() else Path(".env"))

    settings = load_settings()
    setup_logging(settings)
    log.debug("settings.loaded", settings=redact_settings(settings))

    if not args.is_global and not args.is_guild:
        args.is_global = True  # Default to global if neither is specified

    guild_id = settings.discord_guild_id if args.is_guild is True else args.is_guild
    if args.is_guild and not guild_id:
        print("Error: DISCORD_GUILD_ID must be set for guild-scoped commands.")
        return 1

    try:
        lirx = Lirx.from_settings(settings)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    scopes = []
    if args.is_global:
        scopes.append(("Global", None))
    if guild_id:
        scopes.append(("Guild", guild_id))

    async with lirx:
        try:
            if not args.clear:
                if args.paths:
                    lirx.load_files(args.paths)
                else:
                    lirx.load_directory(args.commands_dir or settings.commands_dir)
                print(f"Loaded {len(lirx.commands)} command definition(s).")

            ok = True
            for scope, gid in scopes:
                if args.status:
                    ok = await print_status(lirx, gid, scope) and ok
                elif args.publish:
                    ok = await publish(lirx, gid, scope) and ok
                    ok = await print_status(lirx, gid, scope) and ok
                else:
                    ok = await publish(lirx, gid, scope, commands=[]) and ok
        except LirxError as e:
            print(f"Error: {e}")
            return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
