"""
Ausgewählte Discord Endpunkte

Jeder Endpunkt baut nur die Route, ruft den Dispatcher und dekodiert JSON.
"""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .client import RestClient
from .routes import build_query_string


def _decode(body: bytes) -> Any:
    return json.loads(body) if body else None


async def get_gateway_bot(client: RestClient) -> Dict[str, Any]:
    return _decode(await client.get("/gateway/bot"))


async def get_current_user(client: RestClient) -> Dict[str, Any]:
    return _decode(await client.get("/users/@me"))


async def get_channel_messages(
    client: RestClient,
    channel_id: int,
    **options: Any,
) -> List[Dict[str, Any]]:
    """
    Holt Nachrichten eines Channels.

    Args:
        options: around, before, after, limit
    """
    route = f"/channels/{channel_id}/messages" + build_query_string(options)
    return _decode(await client.get(route))


async def create_message(
    client: RestClient,
    channel_id: int,
    content: Optional[str] = None,
    embeds: Optional[List[Dict[str, Any]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(extra)
    if content is not None:
        payload["content"] = content
    if embeds:
        payload["embeds"] = embeds
    return _decode(await client.post(f"/channels/{channel_id}/messages", payload))


async def edit_message(
    client: RestClient,
    channel_id: int,
    message_id: int,
    **fields: Any,
) -> Dict[str, Any]:
    return _decode(await client.patch(f"/channels/{channel_id}/messages/{message_id}", fields))


async def delete_message(
    client: RestClient,
    channel_id: int,
    message_id: int,
    reason: Optional[str] = None,
) -> None:
    await client.delete(f"/channels/{channel_id}/messages/{message_id}", reason=reason)


async def create_reaction(client: RestClient, channel_id: int, message_id: int, emoji: str) -> None:
    """Reagiert mit emoji (Unicode oder name:id) auf eine Nachricht."""
    route = f"/channels/{channel_id}/messages/{message_id}/reactions/{quote(emoji)}/@me"
    await client.put(route)


async def execute_webhook(
    client: RestClient,
    webhook_id: int,
    webhook_token: str,
    payload: Dict[str, Any],
    wait: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Führt einen Webhook aus.

    Returns:
        Die erzeugte Nachricht bei wait=True, sonst None
    """
    route = f"/webhooks/{webhook_id}/{webhook_token}"
    if wait:
        route += "?wait=true"
    return _decode(await client.post(route, payload))
