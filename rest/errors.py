"""
Fehlerklassen für Discord REST Aufrufe
"""

import json
from typing import Any, Dict, Optional, Type

from errors import DiscordRestError, RateLimitHeaderError


class TransportError(DiscordRestError):
    """Die Anfrage kam nicht beim Server an oder lief in einen Timeout."""

    def __init__(self, method: str, url: str, original: BaseException):
        self.method = method
        self.url = url
        self.original = original
        super().__init__(f"{method} {url} fehlgeschlagen: {type(original).__name__}: {original}")


class RateLimitedError(DiscordRestError):
    """429 wurde nicht mehr abgewartet (zu viele Versuche oder retry_after zu lang)."""

    def __init__(self, retry_after: float, is_global: bool = False, attempts: int = 0):
        self.retry_after = retry_after
        self.is_global = is_global
        self.attempts = attempts
        scope = "global" if is_global else "bucket"
        super().__init__(
            f"Rate-Limit ({scope}) nach {attempts} Versuchen, retry_after={retry_after:.2f}s"
        )


class HTTPException(DiscordRestError):
    """
    Antwort mit Fehlerstatus (außer 429).

    Enthält Status, Status-Text und den rohen Body. Liefert Discord einen
    JSON-Fehler, stehen code, message und errors zusätzlich bereit.
    """

    def __init__(self, status: int, reason: Optional[str], body: bytes):
        self.status = status
        self.reason = reason or ""
        self.body = body
        self.code: int = 0
        self.message: str = ""
        self.errors: Dict[str, Any] = {}

        try:
            data = json.loads(body) if body else None
        except ValueError:
            data = None
        if isinstance(data, dict):
            self.code = data.get("code", 0)
            self.message = data.get("message", "")
            self.errors = data.get("errors") or {}

        super().__init__(f"HTTP Request Error : {status} : {self.reason} : {self.text}")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class BadRequest(HTTPException):
    pass


class Unauthorized(HTTPException):
    pass


class Forbidden(HTTPException):
    pass


class NotFound(HTTPException):
    pass


class MethodNotAllowed(HTTPException):
    pass


class DiscordServerError(HTTPException):
    pass


_STATUS_ERRORS: Dict[int, Type[HTTPException]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    405: MethodNotAllowed,
}


def http_exception_for(status: int, reason: Optional[str], body: bytes) -> HTTPException:
    """Wählt die passende Fehlerklasse für einen Status."""
    if status >= 500:
        return DiscordServerError(status, reason, body)
    cls = _STATUS_ERRORS.get(status, HTTPException)
    return cls(status, reason, body)


__all__ = [
    "BadRequest",
    "DiscordRestError",
    "DiscordServerError",
    "Forbidden",
    "HTTPException",
    "MethodNotAllowed",
    "NotFound",
    "RateLimitHeaderError",
    "RateLimitedError",
    "TransportError",
    "Unauthorized",
    "http_exception_for",
]
