"""
Discord REST Client - Konfiguration
"""

import os
from dotenv import load_dotenv
from dataclasses import dataclass

load_dotenv()

DEFAULT_API_BASE = "https://discord.com/api"
DEFAULT_API_VERSION = 10
DEFAULT_USER_AGENT = "DiscordBot (https://github.com/discord-rest-dispatcher, 1.0.0)"


@dataclass
class Config:
    discord_token: str
    api_base: str
    api_version: int
    user_agent: str
    request_timeout_seconds: float
    max_retries: int
    max_retry_after_seconds: float
    log_level: str
    error_webhook_url: str

    @classmethod
    def from_env(cls) -> "Config":
        discord_token = os.getenv("DISCORD_TOKEN")
        if not discord_token:
            raise ValueError("DISCORD_TOKEN ist nicht gesetzt!")

        return cls(
            discord_token=discord_token,
            api_base=os.getenv("API_BASE", DEFAULT_API_BASE).rstrip("/"),
            api_version=int(os.getenv("API_VERSION") or DEFAULT_API_VERSION),
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS") or "12"),
            max_retries=int(os.getenv("MAX_RETRIES") or "5"),
            # 0 = keine Obergrenze fuer retry_after
            max_retry_after_seconds=float(os.getenv("MAX_RETRY_AFTER_SECONDS") or "0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            error_webhook_url=os.getenv("ERROR_WEBHOOK_URL", ""),
        )


try:
    config = Config.from_env()
except ValueError:
    config = None
