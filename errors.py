"""
Gemeinsame Fehler-Basis für ratelimit und rest
"""

from typing import Optional


class DiscordRestError(Exception):
    """Basisklasse aller Fehler des REST-Clients."""


class RateLimitHeaderError(DiscordRestError, ValueError):
    """Ein X-RateLimit-* Header konnte nicht gelesen werden."""

    def __init__(self, header: str, value: Optional[str]):
        self.header = header
        self.value = value
        super().__init__(f"Ungültiger Rate-Limit Header {header}: {value!r}")
