from __future__ import annotations

from typing import Any

import httpx
import structlog
from circuitbreaker import CircuitBreaker
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger()


class RetryableHTTPError(Exception):
    """HTTP errors that should be retried."""


class PermanentHTTPError(Exception):
    """HTTP errors that should not be retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


class BaseHTTPClient:
    """Base HTTP client for external collaborators, with retries and a circuit breaker.

    Every instance owns its breaker, so one failing collaborator never opens
    the circuit for another.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        token: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_factor = backoff_factor
        self._token = token
        self._breaker = CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=60,
            expected_exception=RetryableHTTPError,
            name=f"{type(self).__name__}:{self._base_url}",
        )
        self._guarded_request = self._breaker(self._request_with_retries)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def circuit_open(self) -> bool:
        return self._breaker.opened

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute HTTP request through this client's circuit breaker."""
        return await self._guarded_request(method, path, json=json)

    async def _request_with_retries(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff_factor, max=30),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._send(method, path, json=json)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, url, json=json, headers=self._headers())
        except httpx.TransportError as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableHTTPError(str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error("http_request_error", method=method, url=url, error=str(exc))
            raise PermanentHTTPError(str(exc)) from exc
        except Exception:
            logger.exception("http_unexpected_error", method=method, url=url)
            raise

        if is_retryable_status(response.status_code):
            logger.warning(
                "http_retryable_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise RetryableHTTPError(f"HTTP {response.status_code}: {response.text}")

        if response.is_error:
            logger.debug(
                "http_permanent_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise PermanentHTTPError(
                f"HTTP {response.status_code}: {response.text}", response.status_code
            )

        return _decode_body(response)

    async def get(self, path: str) -> dict[str, Any]:
        """Execute GET request."""
        return await self._request("GET", path)

    async def post(self, path: str, *, json: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute POST request."""
        return await self._request("POST", path, json=json)


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a successful response body. Non-JSON bodies come back as ``{"text": ...}``."""
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {"text": response.text}
    return body if isinstance(body, dict) else {"data": body}
