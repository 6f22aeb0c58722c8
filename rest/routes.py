"""
URL- und Query-Hilfen für die Discord API
"""

from typing import Any, Mapping, Optional

API_BASE = "https://discord.com/api"
API_VERSION = 10

# Nur diese Query-Parameter werden von den unterstützten Endpunkten akzeptiert
QUERY_KEYS = (
    "around",
    "before",
    "after",
    "limit",
    "with_counts",
    "with_expiration",
    "guild_scheduled_event_id",
)


def api_url(path: str, base: str = API_BASE, version: int = API_VERSION) -> str:
    """Baut die volle URL; absolute URLs bleiben unverändert."""
    if path.startswith(("http://", "https://")):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return f"{base.rstrip('/')}/v{version}{path}"


def bucket_key(route: str) -> str:
    """Bucket-Key einer Route: alles vor dem ersten '?'."""
    return route.split("?", 1)[0]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(options: Optional[Mapping[str, Any]]) -> str:
    """
    Baut einen Query-String aus den erlaubten Optionen.

    Returns:
        "?key=value&..." oder "" wenn keine erlaubte Option gesetzt ist
    """
    if not options:
        return ""

    parts = []
    for key, value in options.items():
        name = key.lower()
        if name in QUERY_KEYS and value is not None:
            parts.append(f"{name}={_format_value(value)}")

    return "?" + "&".join(parts) if parts else ""
