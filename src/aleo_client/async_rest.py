"""Async REST client shared by the explorer, ANS and bridge clients."""

from __future__ import annotations

import asyncio
import json
import logging
import random
import ssl
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote, urlencode

import aiohttp

from dca.errors import RemoteUnavailable


@dataclass
class AsyncRestRequest:
    method: str
    path: str
    params: Mapping[str, Any] | None = None
    body: Mapping[str, Any] | None = None


class AsyncRestError(RemoteUnavailable):
    """Base exception for async REST client errors."""


class AsyncNotFoundError(AsyncRestError):
    """Raised when the API answers 404."""


class AsyncRateLimitError(AsyncRestError):
    """Raised when the API indicates that the rate limit has been exceeded."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class AsyncTransientApiError(AsyncRestError):
    """Raised for transient REST errors that may succeed on retry."""


def path_segment(value: str) -> str:
    """Quote a value for use as a single URL path segment."""
    return quote(str(value), safe="")


class AsyncRestClient:
    """Async REST client with retry and rate-limit handling."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        session: aiohttp.ClientSession | None = None,
        verify_ssl: bool = True,  # Enable SSL certificate verification
        ssl_context: ssl.SSLContext | None = None,  # Custom SSL context
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._ssl_context = ssl_context
        if ssl_context is None and verify_ssl:
            self._ssl_context = ssl.create_default_context()
        elif ssl_context is None and not verify_ssl:
            # Disable certificate verification (NOT recommended for production)
            self._ssl_context = ssl._create_unverified_context()
            logging.warning(
                "SSL certificate verification is DISABLED. "
                "This should NEVER be used in production environments. "
                "Man-in-the-middle attacks are possible."
            )
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._session = session
        self._owns_session = session is None

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def send(self, request: AsyncRestRequest) -> Any:
        attempts = 0
        while True:
            try:
                return await self._send_once(request)
            except AsyncRateLimitError as exc:
                attempts += 1
                if attempts > self.max_retries:
                    raise
                delay = exc.retry_after or self._compute_backoff(attempts)
                await asyncio.sleep(delay)
            except AsyncTransientApiError:
                attempts += 1
                if attempts > self.max_retries:
                    raise
                await asyncio.sleep(self._compute_backoff(attempts))

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self.send(AsyncRestRequest(method="GET", path=path, params=params))

    async def _send_once(self, request: AsyncRestRequest) -> Any:
        url = self.build_url(request.path)
        params = dict(request.params or {})
        headers = {"Accept": "application/json"}

        if request.method.upper() == "GET" and params:
            url = f"{url}?{urlencode(params)}"

        data_bytes = None
        if request.method.upper() != "GET" and request.body:
            data_bytes = json.dumps(dict(request.body), separators=(",", ":")).encode(
                "utf8"
            )
            headers["Content-Type"] = "application/json"

        session = await self._ensure_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with session.request(
                request.method.upper(),
                url,
                headers=headers,
                data=data_bytes,
                timeout=timeout,
            ) as response:
                payload = await response.text()
                if response.status == 404:
                    raise AsyncNotFoundError(
                        f"Not found: {request.path}", status_code=404
                    )
                if response.status == 429:
                    retry_after = self._parse_retry_after(
                        response.headers.get("Retry-After")
                    )
                    raise AsyncRateLimitError(
                        "Rate limit exceeded", retry_after=retry_after
                    )
                if response.status in {500, 502, 503, 504}:
                    raise AsyncTransientApiError(
                        f"Transient HTTP error {response.status}",
                        status_code=response.status,
                    )
                if response.status >= 400:
                    raise AsyncRestError(
                        self._build_http_error_message(response.status, payload),
                        status_code=response.status,
                    )
        except aiohttp.ClientError as exc:
            raise AsyncTransientApiError("Network error while contacting API") from exc
        except asyncio.TimeoutError as exc:
            raise AsyncTransientApiError("Timed out while contacting API") from exc

        if not payload:
            return {}
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise AsyncRestError(
                f"Invalid JSON from {request.path}: {payload[:200]}"
            ) from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def __aenter__(self) -> "AsyncRestClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            connector = aiohttp.TCPConnector(ssl=self._ssl_context)
            self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
            self._owns_session = True
        return self._session

    def _compute_backoff(self, attempt: int) -> float:
        base = self.backoff_factor * (2 ** (attempt - 1))
        return base + random.uniform(0, base)

    def _parse_retry_after(self, header_value: str | None) -> float | None:
        if header_value is None:
            return None
        try:
            return float(header_value)
        except ValueError:
            return None

    def _build_http_error_message(self, status_code: int, payload: str) -> str:
        if payload:
            return f"HTTP error {status_code}: {payload}"
        return f"HTTP error {status_code}"
