#!/usr/bin/env python3
import sys
import asyncio
from pathlib import Path
from loguru import logger


def setup_logging(level: str = "INFO"):
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level
    )
    Path("logs").mkdir(exist_ok=True)
    logger.add(
        "logs/rest_{time:YYYY-MM-DD}.log",
        rotation="1 day",
        retention="7 days",
        level="DEBUG"
    )


def check_config():
    from config import config
    if config is None:
        logger.error("DISCORD_TOKEN fehlt! Kopiere .env.example zu .env")
        return False
    return True


async def main():
    """Prüft Token und Verbindung: holt Bot-User und Gateway-Infos."""
    if not check_config():
        sys.exit(1)

    from config import config
    from rest import DiscordRestError, RestClient
    from rest.endpoints import get_current_user, get_gateway_bot
    from utils.webhook import notify_request_failed

    setup_logging(config.log_level)
    logger.info("Discord REST Client startet...")

    async with RestClient.from_config(config) as client:
        for route, call in (("/users/@me", get_current_user), ("/gateway/bot", get_gateway_bot)):
            try:
                data = await call(client)
            except DiscordRestError as e:
                logger.error(f"{route}: {e}")
                await notify_request_failed(client, config.error_webhook_url, route, e)
                sys.exit(1)
            logger.info(f"{route}: {data}")


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main())
