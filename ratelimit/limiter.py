"""
Bucket-Verwaltung für Discord API Aufrufe

Hält alle Buckets eines Clients. Anfragen mit demselben Bucket-Key laufen
nacheinander, verschiedene Keys blockieren sich nicht.
"""

import asyncio
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .bucket import Bucket, CustomRateLimit, GlobalRateLimit, utcnow

# Reaktionen haben ein strengeres Limit als die Header verraten
DEFAULT_CUSTOM_LIMITS = (
    CustomRateLimit(pattern="/reactions/", requests=1, reset=0.2),
)


class BucketStore:
    """
    Speicher für Rate-Limit Buckets.

    Wird explizit erzeugt und dem Client übergeben, damit mehrere Clients
    (z.B. mit verschiedenen Tokens) getrennte Limits haben.
    """

    def __init__(self, custom_limits: Optional[Iterable[CustomRateLimit]] = None):
        """
        Args:
            custom_limits: Eigene Limits pro Routen-Muster (default: Reaktionen 1/200ms)
        """
        self._buckets: Dict[str, Bucket] = {}
        self.global_limit = GlobalRateLimit()
        self.custom_limits: List[CustomRateLimit] = list(
            DEFAULT_CUSTOM_LIMITS if custom_limits is None else custom_limits
        )

    def get_bucket(self, key: str) -> Bucket:
        """Holt den Bucket für key oder legt ihn an."""
        # Kein await zwischen Lookup und Insert, daher ohne Lock atomar
        bucket = self._buckets.get(key)
        if bucket is not None:
            return bucket

        bucket = Bucket(key=key, global_limit=self.global_limit)
        for limit in self.custom_limits:
            if limit.pattern in key:
                bucket.custom_limit = limit
                break

        self._buckets[key] = bucket
        logger.debug(f"Neuer Bucket: {key}")
        return bucket

    def get_wait_time(self, bucket: Bucket, min_remaining: int = 1) -> float:
        """Sekunden, die vor dem nächsten Aufruf auf bucket gewartet werden muss."""
        now = utcnow()
        if bucket.remaining < min_remaining and bucket.reset is not None and bucket.reset > now:
            return (bucket.reset - now).total_seconds()

        return self.global_limit.wait_time(now)

    async def lock_bucket_object(self, bucket: Bucket) -> Bucket:
        """
        Sperrt einen bekannten Bucket, bis eine Anfrage erlaubt ist.

        Der Aufrufer muss bucket.release() aufrufen.
        """
        await bucket.lock.acquire()
        try:
            wait = self.get_wait_time(bucket)
            if wait > 0:
                logger.debug(f"Rate-Limit: Warte {wait:.2f}s für {bucket.key}")
                await asyncio.sleep(wait)
        except BaseException:
            bucket.lock.release()
            raise

        bucket.remaining -= 1
        return bucket

    async def lock_bucket(self, key: str) -> Bucket:
        return await self.lock_bucket_object(self.get_bucket(key))

    def __contains__(self, key: str) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)
