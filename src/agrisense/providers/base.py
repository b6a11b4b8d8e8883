"""Weather provider abstraction.

A provider fetches the raw current-conditions and forecast payloads for a
city. The advisory engine parses them into an `Observation`; the raw
payloads are also returned untouched to API clients, which chart them.

## Errors

Every failure surfaces as `ProviderError` (or a subclass) carrying the
provider name, the upstream HTTP status and the upstream message, so the
API layer can map "city not found" to 404 and everything else to 502.
Timeouts and connection errors are retried with exponential backoff;
HTTP error statuses are not.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from agrisense import __version__
from agrisense.models.observation import Observation


class ProviderError(Exception):
    """A weather request failed."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class RateLimitError(ProviderError):
    """The provider answered 429."""

    def __init__(self, provider: str, retry_after: int | None = None):
        super().__init__(
            f"Rate limit exceeded for {provider}", provider=provider, status_code=429
        )
        self.retry_after = retry_after


class AuthenticationError(ProviderError):
    """The API key is missing or was rejected."""


@dataclass(frozen=True)
class WeatherReport:
    """Raw payloads returned by a provider for one city."""

    current: dict[str, Any]
    forecast: dict[str, Any] | None = None

    def to_observation(self) -> Observation:
        return Observation.from_payloads(self.current, self.forecast)

    @property
    def city(self) -> str | None:
        return self.current.get("name")


class WeatherProvider(ABC):
    """Base class for weather data sources.

    Providers hold one `httpx.AsyncClient`, created lazily and closed by
    `aclose()` or by leaving the `async with` block.
    """

    name: str
    base_url: str
    requires_api_key: bool = False

    def __init__(
        self,
        api_key: str | None = None,
        user_agent: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.user_agent = user_agent or f"agrisense/{__version__}"
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WeatherProvider:
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            )
        return self._client

    def _error_message(self, response: httpx.Response) -> str:
        """Upstream error text for a failed response."""
        return f"API request failed: {response.status_code}"

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name, retry_after=int(retry_after) if retry_after else None
            )

        error_cls = AuthenticationError if status == 401 else ProviderError
        raise error_cls(
            self._error_message(response),
            provider=self.name,
            status_code=status,
            response_body=response.text,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _fetch(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET `url`, retrying transport failures.

        Raises:
            RateLimitError: on 429
            AuthenticationError: on 401
            ProviderError: on any other 4xx/5xx
        """
        response = await self._get_client().get(url, params=params)
        self._raise_for_status(response)
        return response

    @abstractmethod
    async def get_weather(self, city: str) -> WeatherReport:
        """Fetch current conditions and forecast for a city.

        Args:
            city: City name, optionally with country code ("Pune,IN")

        Raises:
            ProviderError: If the current conditions cannot be retrieved.
                A failed forecast alone is not an error.
        """
