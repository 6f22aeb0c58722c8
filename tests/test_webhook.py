"""Tests für Webhook-Benachrichtigungen."""

import pytest
from aiohttp import web

from rest import RateLimitedError
from utils.webhook import build_embed, notify_request_failed, parse_webhook_url, send_error_notification


def test_parse_webhook_url():
    assert parse_webhook_url("https://discord.com/api/webhooks/123/abc") == (123, "abc")
    assert parse_webhook_url("https://discord.com/api/webhooks/123/abc/?wait=true") == (123, "abc")


def test_parse_webhook_url_invalid():
    assert parse_webhook_url("") == (0, "")
    assert parse_webhook_url("https://example.com/hooks/1") == (0, "")
    assert parse_webhook_url("https://discord.com/api/webhooks/abc/def") == (0, "")


def test_build_embed():
    embed = build_embed("Titel", "Text", fields=[{"name": "a", "value": "b", "inline": True}])

    assert embed["title"] == "Titel"
    assert embed["color"] == 0xFF0000
    assert embed["fields"] == [{"name": "a", "value": "b", "inline": True}]
    assert embed["footer"] == {"text": "Discord REST Alert"}
    assert "timestamp" in embed


def test_build_embed_without_fields():
    assert "fields" not in build_embed("Titel", "Text")


@pytest.mark.asyncio
async def test_send_error_notification(fake_api):
    payloads = []

    async def handler(request):
        payloads.append(await request.json())
        return web.Response(status=204)

    client = await fake_api([("POST", "/webhooks/{webhook_id}/{token}", handler)])

    assert await send_error_notification(client, 1, "tok", "Fehler", "Details") is True
    assert payloads[0]["embeds"][0]["title"] == "Fehler"
    assert payloads[0]["embeds"][0]["description"] == "Details"


@pytest.mark.asyncio
async def test_send_error_notification_failure_returns_false(fake_api):
    async def handler(request):
        return web.json_response({"code": 10015, "message": "Unknown Webhook"}, status=404)

    client = await fake_api([("POST", "/webhooks/{webhook_id}/{token}", handler)])

    assert await send_error_notification(client, 1, "tok", "Fehler", "Details") is False


@pytest.mark.asyncio
async def test_send_error_notification_without_webhook(fake_api):
    client = await fake_api([])
    assert await send_error_notification(client, 0, "", "Fehler", "Details") is False


@pytest.mark.asyncio
async def test_notify_request_failed_for_rate_limit(fake_api):
    payloads = []

    async def handler(request):
        payloads.append(await request.json())
        return web.Response(status=204)

    client = await fake_api([("POST", "/webhooks/{webhook_id}/{token}", handler)])
    url = "https://discord.com/api/webhooks/77/secret"

    sent = await notify_request_failed(client, url, "/channels/1", RateLimitedError(2.5, attempts=6))

    assert sent is True
    embed = payloads[0]["embeds"][0]
    assert embed["title"] == "REST-Aufruf fehlgeschlagen: /channels/1"
    assert embed["color"] == 0xFFA500
    assert {"name": "retry_after", "value": "2.50s", "inline": True} in embed["fields"]


@pytest.mark.asyncio
async def test_send_error_notification_bad_rate_limit_header_returns_false(fake_api):
    async def handler(request):
        return web.Response(status=204, headers={"X-RateLimit-Remaining": "abc"})

    client = await fake_api([("POST", "/webhooks/{webhook_id}/{token}", handler)])

    assert await send_error_notification(client, 1, "tok", "Fehler", "Details") is False
