"""
Discord Webhook Utility für Fehler-Benachrichtigungen
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from loguru import logger

from rest.client import RestClient
from rest.endpoints import execute_webhook
from rest.errors import DiscordRestError, RateLimitedError


def parse_webhook_url(url: str) -> Tuple[int, str]:
    """
    Zerlegt eine Webhook-URL in ID und Token.

    Beispiel:
        https://discord.com/api/webhooks/123/abc -> (123, "abc")

    Returns:
        (0, "") wenn die URL leer oder kein Webhook-Link ist
    """
    if not url:
        return 0, ""

    parts = url.split("?", 1)[0].rstrip("/").split("/")
    try:
        index = parts.index("webhooks")
        return int(parts[index + 1]), parts[index + 2]
    except (ValueError, IndexError):
        logger.warning(f"Ungültige Webhook-URL: {url}")
        return 0, ""


def build_embed(
    title: str,
    description: str,
    color: int = 0xFF0000,  # Rot für Fehler
    fields: Optional[list] = None,
    footer: str = "Discord REST Alert",
) -> dict:
    """Baut ein Embed-Objekt für Webhook-Nachrichten."""
    embed = {
        "title": title,
        "description": description,
        "color": color,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "footer": {
            "text": footer
        }
    }

    if fields:
        embed["fields"] = fields

    return embed


async def send_error_notification(
    client: RestClient,
    webhook_id: int,
    webhook_token: str,
    title: str,
    description: str,
    color: int = 0xFF0000,
    fields: Optional[list] = None
) -> bool:
    """
    Sendet eine Fehler-Benachrichtigung über einen Discord Webhook.

    Args:
        client: REST-Client, über dessen Rate-Limiter gesendet wird
        webhook_id: ID des Webhooks
        webhook_token: Token des Webhooks
        title: Titel der Nachricht
        description: Beschreibung des Fehlers
        color: Embed-Farbe (default: rot)
        fields: Optionale zusätzliche Felder [{name, value, inline}]

    Returns:
        True bei Erfolg, False bei Fehler oder wenn kein Webhook konfiguriert
    """
    if not webhook_id or not webhook_token:
        logger.debug("Kein Webhook konfiguriert - überspringe Benachrichtigung")
        return False

    payload = {
        "embeds": [build_embed(title, description, color, fields)]
    }

    try:
        await execute_webhook(client, webhook_id, webhook_token, payload)
    except DiscordRestError as e:
        logger.warning(f"Webhook-Fehler: {e}")
        return False

    logger.debug(f"Webhook-Benachrichtigung gesendet: {title}")
    return True


async def notify_request_failed(client: RestClient, webhook_url: str, route: str, error: Exception) -> bool:
    """Benachrichtigt wenn ein REST-Aufruf endgültig gescheitert ist."""
    webhook_id, webhook_token = parse_webhook_url(webhook_url)
    fields = [{"name": "Fehler", "value": type(error).__name__, "inline": True}]

    if isinstance(error, RateLimitedError):
        fields.append({"name": "retry_after", "value": f"{error.retry_after:.2f}s", "inline": True})
        color = 0xFFA500  # Orange für Warnung
    else:
        color = 0x8B0000  # Dunkelrot

    return await send_error_notification(
        client,
        webhook_id,
        webhook_token,
        title=f"REST-Aufruf fehlgeschlagen: {route}",
        description=str(error)[:2000],
        color=color,
        fields=fields
    )
