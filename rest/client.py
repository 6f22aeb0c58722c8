"""
Discord REST Client mit Rate-Limiting pro Route

Jede Anfrage sperrt den Bucket ihrer Route, bis die Antwort da ist. Bei 429
wird retry_after abgewartet und auf demselben Bucket erneut gesendet.
"""

import asyncio
import json
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import aiohttp
from loguru import logger

from config import Config, DEFAULT_USER_AGENT
from ratelimit import BucketStore

from .errors import RateLimitedError, TransportError, http_exception_for
from .models import HTTPRequest, RateLimitResponse
from .routes import API_BASE, API_VERSION, api_url, bucket_key


class RestClient:
    """
    Asynchroner Client für die Discord REST API.

    Beispiel:
        async with RestClient(token) as client:
            data = await client.get("/users/@me")
    """

    def __init__(
        self,
        token: str,
        *,
        store: Optional[BucketStore] = None,
        session: Optional[aiohttp.ClientSession] = None,
        api_base: str = API_BASE,
        api_version: int = API_VERSION,
        user_agent: str = DEFAULT_USER_AGENT,
        request_timeout: float = 12.0,
        max_retries: int = 5,
        max_retry_after: float = 0.0,
    ):
        """
        Args:
            token: Bot-Token (ohne "Bot " Präfix)
            store: Bucket-Speicher; ohne Angabe bekommt der Client einen eigenen
            session: Vorhandene aiohttp Session (wird dann nicht vom Client geschlossen)
            request_timeout: Zeitlimit pro HTTP-Aufruf in Sekunden
            max_retries: Maximale Wiederholungen nach 429
            max_retry_after: Längstes retry_after, das abgewartet wird (0 = unbegrenzt)
        """
        self.token = token
        self.store = store if store is not None else BucketStore()
        self.api_base = api_base
        self.api_version = api_version
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.max_retry_after = max_retry_after
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, cfg: Config, **kwargs) -> "RestClient":
        return cls(
            cfg.discord_token,
            api_base=cfg.api_base,
            api_version=cfg.api_version,
            user_agent=cfg.user_agent,
            request_timeout=cfg.request_timeout_seconds,
            max_retries=cfg.max_retries,
            max_retry_after=cfg.max_retry_after_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    def url(self, route: str) -> str:
        return api_url(route, self.api_base, self.api_version)

    # === Dispatcher ===

    async def request(
        self,
        method: str,
        route: str,
        data: Any = None,
        reason: Optional[str] = None,
    ) -> bytes:
        """
        Sendet eine Anfrage mit Rate-Limiting.

        Args:
            method: HTTP-Methode
            route: Pfad relativ zur API-Version (z.B. "/channels/123/messages") oder volle URL
            data: JSON-serialisierbarer Body oder None
            reason: Optionaler Grund für das Audit-Log

        Returns:
            Body der Antwort als Bytes

        Raises:
            HTTPException: bei Fehlerstatus außer 429
            RateLimitedError: wenn 429 nicht mehr abgewartet wird
            TransportError: bei Verbindungsfehlern und Timeouts
        """
        url = self.url(route)
        return await self.request_with_bucket_id(method, url, data, bucket_key(url), reason)

    async def request_with_bucket_id(
        self,
        method: str,
        route: str,
        data: Any,
        bucket_id: str,
        reason: Optional[str] = None,
    ) -> bytes:
        request = HTTPRequest(
            method=method.upper(),
            url=self.url(route),
            data=data,
            reason=reason,
            content_type="application/json",
            bucket_id=bucket_id,
            sequence=0,
        )
        return await self._request(request)

    async def _request(self, request: HTTPRequest) -> bytes:
        if not request.bucket_id:
            request.bucket_id = bucket_key(request.url)

        request.bucket = await self.store.lock_bucket(request.bucket_id)
        return await self._locked_request(request)

    async def _locked_request(self, request: HTTPRequest) -> bytes:
        while True:
            status, reason, headers, body = await self._send(request)

            if status == 429:
                retry_after, is_global = self._parse_rate_limit(headers, body, status, reason)
                self._check_retry(request, retry_after, is_global)

                logger.warning(
                    f"Rate Limited! {request.method} {request.url} - "
                    f"Warte {retry_after:.2f}s (Versuch {request.sequence + 1}/{self.max_retries})"
                )
                if is_global:
                    self.store.global_limit.extend(retry_after)

                await asyncio.sleep(retry_after)
                request.sequence += 1
                request.bucket = await self.store.lock_bucket_object(request.bucket)
                continue

            if status >= 400:
                logger.debug(f"{request.method} {request.url} -> {status}")
                raise http_exception_for(status, reason, body)

            return body

    def _parse_rate_limit(self, headers, body: bytes, status: int, reason: Optional[str]) -> Tuple[float, bool]:
        try:
            rate_limit = RateLimitResponse.from_body(body)
            return rate_limit.retry_after, rate_limit.is_global
        except ValueError:
            pass

        # Proxies liefern 429 manchmal ohne JSON, dann hilft nur Retry-After
        retry_after = headers.get("Retry-After")
        if retry_after is None:
            raise http_exception_for(status, reason, body)
        try:
            return float(retry_after), False
        except ValueError:
            raise http_exception_for(status, reason, body)

    def _check_retry(self, request: HTTPRequest, retry_after: float, is_global: bool):
        if request.sequence >= self.max_retries:
            logger.error(f"Rate-Limit: Maximale Versuche erreicht für {request.method} {request.url}")
            raise RateLimitedError(retry_after, is_global, attempts=request.sequence + 1)

        if self.max_retry_after and retry_after > self.max_retry_after:
            logger.error(
                f"Rate-Limit: retry_after {retry_after:.2f}s überschreitet "
                f"Maximum {self.max_retry_after:.2f}s für {request.url}"
            )
            raise RateLimitedError(retry_after, is_global, attempts=request.sequence + 1)

    def _headers(self, request: HTTPRequest) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bot {self.token}",
            "User-Agent": self.user_agent,
        }
        if request.data is not None:
            headers["Content-Type"] = request.content_type
        if request.reason is not None:
            headers["X-Audit-Log-Reason"] = quote(request.reason)
        return headers

    @staticmethod
    def _encode_body(request: HTTPRequest) -> Optional[bytes]:
        if request.data is None:
            return None
        return json.dumps(request.data, ensure_ascii=False).encode("utf-8")

    async def _send(self, request: HTTPRequest):
        """Führt einen HTTP-Aufruf aus und gibt den gesperrten Bucket danach frei."""
        response_headers = None
        try:
            payload = self._encode_body(request)
            session = self._get_session()
            async with session.request(
                request.method,
                request.url,
                data=payload,
                headers=self._headers(request),
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            ) as response:
                body = await response.read()
                status, reason = response.status, response.reason
                response_headers = response.headers
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"HTTP-Fehler bei {request.method} {request.url}: {e!r}")
            raise TransportError(request.method, request.url, e) from e
        finally:
            request.bucket.release(response_headers)

        return status, reason, response_headers, body

    # === Verben ===

    async def get(self, route: str) -> bytes:
        return await self.request("GET", route)

    async def post(self, route: str, data: Any = None, reason: Optional[str] = None) -> bytes:
        return await self.request("POST", route, data, reason)

    async def put(self, route: str, data: Any = None, reason: Optional[str] = None) -> bytes:
        return await self.request("PUT", route, data, reason)

    async def patch(self, route: str, data: Any = None, reason: Optional[str] = None) -> bytes:
        return await self.request("PATCH", route, data, reason)

    async def delete(self, route: str, reason: Optional[str] = None) -> None:
        await self.request("DELETE", route, reason=reason)
