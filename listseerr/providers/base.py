"""Base classes for list providers."""

from __future__ import annotations

import asyncio
import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, ClassVar

import aiohttp

from listseerr import __version__, log
from listseerr.exceptions import ProviderFetchError, UnsupportedProviderError
from listseerr.models.media import MediaItem, Provider

__all__ = ["MediaFetcher", "ProviderRegistry", "provider_registry"]


class MediaFetcher(ABC):
    """Fetches the items of a list from one external provider.

    Subclasses declare the provider they serve, whether a credential is
    required and how many requests one fetch makes. All requests of a fetcher
    share one aiohttp session.
    """

    PROVIDER: ClassVar[Provider]
    REQUIRES_CREDENTIAL: ClassVar[bool] = True
    MAX_RETRIES: ClassVar[int] = 3
    MAX_RETRY_WAIT: ClassVar[float] = 60
    REQUESTS_PER_FETCH: ClassVar[int] = 1

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize the fetcher.

        Args:
            timeout (float): Total timeout in seconds for each HTTP request.
        """
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "User-Agent": f"ListSeerr/{__version__}",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> MediaFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @abstractmethod
    async def fetch_items(
        self, list_url: str, max_items: int, credential: str | None
    ) -> list[MediaItem]:
        """Fetch at most `max_items` items of a list.

        Args:
            list_url (str): URL of the list on the provider's website.
            max_items (int): Maximum number of items to return.
            credential (str | None): Provider API key or client id.

        Returns:
            list[MediaItem]: The list's items in provider order.

        Raises:
            InvalidListUrlError: If the URL does not belong to this provider.
            ProviderFetchError: If the provider cannot be reached or errors out.
        """

    @property
    def fetch_timeout(self) -> float:
        """Upper bound in seconds for one `fetch_items` call.

        Covers `REQUESTS_PER_FETCH` requests, each tried `MAX_RETRIES` times
        with at most `MAX_RETRY_WAIT` seconds of backoff between tries.
        """
        per_try = self.timeout + self.MAX_RETRY_WAIT + 1
        return self.REQUESTS_PER_FETCH * self.MAX_RETRIES * per_try

    @classmethod
    def _retry_after(cls, headers: Mapping[str, str]) -> float:
        """Seconds to wait according to a `Retry-After` header.

        The header may hold a number of seconds or an HTTP date. Missing or
        malformed values fall back to 10 seconds; the result is clamped to
        `MAX_RETRY_WAIT`.
        """
        value = headers.get("Retry-After")
        delay = 10.0
        if value:
            try:
                delay = float(value)
            except ValueError:
                try:
                    until = parsedate_to_datetime(value)
                except (TypeError, ValueError):
                    pass
                else:
                    if until.tzinfo is None:
                        until = until.replace(tzinfo=UTC)
                    delay = (until - datetime.now(UTC)).total_seconds()
        if not math.isfinite(delay):
            delay = 10.0
        return min(max(delay, 0.0), cls.MAX_RETRY_WAIT)

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make a GET request and decode its JSON body."""
        return await self._request_json("GET", url, params=params, headers=headers)

    async def _post_json(
        self,
        url: str,
        payload: Any,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make a POST request with a JSON body and decode its JSON response."""
        return await self._request_json("POST", url, json=payload, headers=headers)

    async def _request_json(
        self, method: str, url: str, retry_count: int = 0, **kwargs: Any
    ) -> Any:
        """Make a request and decode its JSON body.

        Rate limit (429) and server (5xx) responses as well as connection errors
        are retried up to `MAX_RETRIES` times.

        Raises:
            ProviderFetchError: If the request fails, keeps failing or returns
                a body that is not JSON.
        """
        if retry_count >= self.MAX_RETRIES:
            raise ProviderFetchError(
                f"{self.PROVIDER}: request failed after {self.MAX_RETRIES} tries"
            )

        session = await self._get_session()
        try:
            async with session.request(method, url, **kwargs) as response:
                if response.status == 429:
                    retry_after = self._retry_after(response.headers)
                    log.warning(
                        f"{self.PROVIDER} rate limit exceeded, waiting "
                        f"{retry_after:g} seconds"
                    )
                    await asyncio.sleep(retry_after + 1)
                    return await self._request_json(
                        method, url, retry_count + 1, **kwargs
                    )
                if response.status >= 500:
                    log.warning(
                        f"{self.PROVIDER} returned {response.status}, retrying"
                    )
                    await asyncio.sleep(1)
                    return await self._request_json(
                        method, url, retry_count + 1, **kwargs
                    )
                if response.status >= 400:
                    body = await response.text()
                    raise ProviderFetchError(
                        f"{self.PROVIDER} API error {response.status}: {body[:200]}"
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ProviderFetchError(
                        f"{self.PROVIDER} returned a response that is not JSON"
                    ) from e
        except (TimeoutError, aiohttp.ClientError) as e:
            log.warning(f"Connection error while requesting {self.PROVIDER}: {e}")
            await asyncio.sleep(1)
            return await self._request_json(method, url, retry_count + 1, **kwargs)


class ProviderRegistry:
    """Registry mapping each provider to its fetcher class."""

    def __init__(self) -> None:
        self._fetchers: dict[Provider, type[MediaFetcher]] = {}

    def register(self, fetcher_cls: type[MediaFetcher]) -> type[MediaFetcher]:
        """Register a fetcher class, usable as a class decorator."""
        self._fetchers[fetcher_cls.PROVIDER] = fetcher_cls
        return fetcher_cls

    def unregister(self, provider: Provider) -> None:
        """Remove the fetcher registered for a provider, if any."""
        self._fetchers.pop(provider, None)

    def requires_credential(self, provider: Provider) -> bool:
        """Whether lists of the provider need a configured credential.

        Providers without a registered fetcher are treated as requiring one.
        """
        fetcher_cls = self._fetchers.get(provider)
        return fetcher_cls.REQUIRES_CREDENTIAL if fetcher_cls else True

    def create(self, provider: Provider, **kwargs: Any) -> MediaFetcher:
        """Instantiate the fetcher registered for a provider.

        Raises:
            UnsupportedProviderError: If no fetcher is registered for the provider.
        """
        try:
            fetcher_cls = self._fetchers[provider]
        except KeyError:
            raise UnsupportedProviderError(
                f"No fetcher registered for provider '{provider}'"
            ) from None
        return fetcher_cls(**kwargs)

    def __contains__(self, provider: object) -> bool:
        return provider in self._fetchers


provider_registry = ProviderRegistry()
