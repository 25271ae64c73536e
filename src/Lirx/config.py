"""Settings loader for Lirx."""

from pathlib import Path
from typing import Any

import tomllib
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DISCORD_URL = "https://discord.com/api/"
DEFAULT_API_VERSION = "v10"


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    """
    cfg_path = Path("config.toml")
    if not cfg_path.exists():
        return {}
    with cfg_path.open("rb") as f:
        t = tomllib.load(f)

    discord_cfg = t.get("discord", {}) or {}
    out: dict[str, Any] = {
        "discord_api_url": discord_cfg.get("api_url", DEFAULT_DISCORD_URL),
        "discord_api_version": discord_cfg.get("api_version", DEFAULT_API_VERSION),
        "http_timeout_seconds": (t.get("http", {}) or {}).get("timeout_seconds", 20.0),
        "commands_dir": (t.get("commands", {}) or {}).get("directory", "commands"),
        # Logging config
        "logging_enabled": t.get("logging", {}).get("enabled", True),
        "logging_level": str(t.get("logging", {}).get("level", "INFO")).upper(),
        "logging_file_path": t.get("logging", {}).get("file_path", "logs/lirx.jsonl"),
        "logging_max_bytes": t.get("logging", {}).get("max_bytes", 5_000_000),
        "logging_backup_count": t.get("logging", {}).get("backup_count", 5),
    }
    # IDs are public, so TOML may carry them; tokens belong in env/.env only
    if discord_cfg.get("application_id") is not None:
        out["discord_app_id"] = str(discord_cfg["application_id"])
    if discord_cfg.get("guild_id") is not None:
        out["discord_guild_id"] = str(discord_cfg["guild_id"])

    # Per-handler levels: strings INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE
    # Booleans map True->overall level, False->NONE
    log_cfg = t.get("logging", {}) or {}
    overall = out["logging_level"]

    def _norm_level(v, default):
        if isinstance(v, str):
            return v.upper()
        if isinstance(v, bool):
            return default if v else "NONE"
        return default

    out["logging_console"] = _norm_level(log_cfg.get("console"), overall)
    # File logging stays off unless [logging].to_file is set
    file_val = log_cfg.get("to_file")
    out["logging_file"] = "NONE" if file_val is None else _norm_level(file_val, overall)
    return out


class Settings(BaseSettings):
    # --- Discord Credentials ---
    discord_app_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("discord_app_id", "discord_application_id"),
    )
    discord_bot_token: SecretStr | None = None
    # Default guild for guild-scoped operations in the example program
    discord_guild_id: str | None = None

    # --- Discord API ---
    discord_api_url: str = DEFAULT_DISCORD_URL
    discord_api_version: str = DEFAULT_API_VERSION
    http_timeout_seconds: float = 20.0

    # --- Command definitions ---
    commands_dir: str = "commands"

    # --- Logging ---
    logging_enabled: bool = True
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "NONE"
    logging_file_path: str = "logs/lirx.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",  # Safely ignore any extra env vars
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env)
        # 4) TOML (config.toml)
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )


def load_settings() -> Settings:
    return Settings()
