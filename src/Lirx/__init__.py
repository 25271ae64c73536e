"""Lirx: declarative management of Discord application commands."""

from Lirx.client import Lirx
from Lirx.discord_api import DiscordAPI
from Lirx.errors import APIError, LirxError, ParseError, ResponseDecodeError, TransportError
from Lirx.loader import CommandLoader
from Lirx.results import APIResult

__all__ = [
    "APIError",
    "APIResult",
    "CommandLoader",
    "DiscordAPI",
    "Lirx",
    "LirxError",
    "ParseError",
    "ResponseDecodeError",
    "TransportError",
]
