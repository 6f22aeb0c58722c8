"""
Rate-Limit Buckets für Discord REST Aufrufe

Ein Bucket gehört zu genau einer Route (Pfad ohne Query-String) und merkt sich,
wie viele Aufrufe noch erlaubt sind und wann das Limit zurückgesetzt wird.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional

from loguru import logger

from errors import RateLimitHeaderError

# Sicherheitsabstand auf X-RateLimit-Reset, damit wir nicht zu früh wieder senden
RESET_MARGIN = timedelta(milliseconds=250)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CustomRateLimit:
    """
    Eigenes Limit für Routen, deren Server-Header nicht ausreichen.

    Args:
        pattern: Teilstring des Bucket-Keys, für den das Limit gilt
        requests: Erlaubte Anfragen pro Zeitfenster
        reset: Länge des Zeitfensters in Sekunden
    """
    pattern: str
    requests: int
    reset: float


class GlobalRateLimit:
    """Globales Limit des Bot-Accounts, blockiert alle Buckets gleichzeitig."""

    def __init__(self):
        self.reset_at: Optional[datetime] = None

    def extend(self, seconds: float):
        """Verschiebt das globale Limit auf jetzt + seconds (nie nach vorne)."""
        reset_at = utcnow() + timedelta(seconds=seconds)
        if self.reset_at is None or reset_at > self.reset_at:
            self.reset_at = reset_at
            logger.warning(f"Globales Rate-Limit aktiv für {seconds:.2f}s")

    def wait_time(self, now: Optional[datetime] = None) -> float:
        if self.reset_at is None:
            return 0.0
        now = now or utcnow()
        if now < self.reset_at:
            return (self.reset_at - now).total_seconds()
        return 0.0


@dataclass(eq=False)
class Bucket:
    key: str
    global_limit: GlobalRateLimit
    remaining: int = 1
    reset: Optional[datetime] = None
    custom_limit: Optional[CustomRateLimit] = None
    last_reset: Optional[datetime] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def release(self, headers: Optional[Mapping[str, str]] = None):
        """
        Aktualisiert den Bucket aus den Antwort-Headern und gibt ihn frei.

        Args:
            headers: Header der Antwort oder None, wenn die Anfrage nicht durchging.
                     Ohne Header bleibt der verbrauchte Aufruf abgezogen.

        Raises:
            RateLimitHeaderError: wenn ein Header nicht lesbar ist. Der Bucket
                                  wird trotzdem freigegeben.
        """
        try:
            self._update(headers)
        finally:
            self.lock.release()

    def _update(self, headers: Optional[Mapping[str, str]]):
        if self.custom_limit is not None:
            self._check_custom_limit(self.custom_limit)
            return

        if headers is None:
            return

        lowered = {k.lower(): v for k, v in headers.items()}
        remaining = lowered.get("x-ratelimit-remaining")
        reset = lowered.get("x-ratelimit-reset")
        reset_after = lowered.get("x-ratelimit-reset-after")
        is_global = lowered.get("x-ratelimit-global", "").lower() == "true"

        # Reset-After ist genauer als Reset, weil keine Uhren verglichen werden müssen
        if reset_after:
            self._check_reset_after(reset_after, is_global)
        elif reset:
            self._check_reset(reset, lowered.get("date"))

        if remaining:
            try:
                self.remaining = int(remaining)
            except ValueError as e:
                raise RateLimitHeaderError("X-RateLimit-Remaining", remaining) from e

        logger.debug(f"Bucket {self.key}: remaining={self.remaining} reset={self.reset}")

    def _check_custom_limit(self, limit: CustomRateLimit):
        now = utcnow()
        if self.last_reset is None or (now - self.last_reset).total_seconds() >= limit.reset:
            self.remaining = limit.requests - 1
            self.last_reset = now

        if self.remaining < 1:
            self.reset = now + timedelta(seconds=limit.reset)

    def _check_reset(self, reset: str, date: Optional[str]):
        try:
            reset_at = datetime.fromtimestamp(float(reset), timezone.utc)
        except (ValueError, OverflowError) as e:
            raise RateLimitHeaderError("X-RateLimit-Reset", reset) from e

        now = utcnow()
        if date:
            try:
                server_now = parsedate_to_datetime(date)
            except (TypeError, ValueError) as e:
                raise RateLimitHeaderError("Date", date) from e
            if server_now.tzinfo is None:
                server_now = server_now.replace(tzinfo=timezone.utc)
        else:
            server_now = now

        # Abstand auf der Server-Uhr, übertragen auf die lokale Uhr
        self.reset = now + (reset_at - server_now) + RESET_MARGIN

    def _check_reset_after(self, reset_after: str, is_global: bool):
        try:
            seconds = float(reset_after)
        except ValueError as e:
            raise RateLimitHeaderError("X-RateLimit-Reset-After", reset_after) from e

        if is_global:
            self.global_limit.extend(seconds)
        else:
            self.reset = utcnow() + timedelta(seconds=seconds)
