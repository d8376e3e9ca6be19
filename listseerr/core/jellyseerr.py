"""Jellyseerr Client."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp
from limiter import Limiter
from pydantic import ValidationError

from listseerr import __version__, log
from listseerr.config.settings import JellyseerrConfig
from listseerr.exceptions import JellyseerrError, JellyseerrRequestError
from listseerr.models.availability import Availability
from listseerr.models.media import MediaItem, MediaType
from listseerr.models.schemas.jellyseerr import MediaDetails, RequestResponse

__all__ = [
    "AvailabilityChecker",
    "JellyseerrClient",
    "RequestFailure",
    "RequestResults",
    "RequestSubmitter",
]

jellyseerr_limiter = Limiter(rate=10, capacity=10, jitter=False)


@dataclass(frozen=True, slots=True)
class RequestFailure:
    """An item whose request was rejected, with the reason."""

    item: MediaItem
    error: str


@dataclass(slots=True)
class RequestResults:
    """Outcome of submitting a batch of items."""

    successful: list[MediaItem] = field(default_factory=list)
    failed: list[RequestFailure] = field(default_factory=list)


class RequestSubmitter(Protocol):
    """Submits media requests to the downstream service."""

    async def request_items(
        self, items: Sequence[MediaItem], config: JellyseerrConfig
    ) -> RequestResults:
        """Request every item, recording failures without aborting the rest."""
        ...


class AvailabilityChecker(Protocol):
    """Looks up what the downstream service knows about an item."""

    async def get_availability(
        self, item: MediaItem, config: JellyseerrConfig
    ) -> Availability:
        """Categorize the item's availability."""
        ...


class JellyseerrClient:
    """Client for the Jellyseerr (or Overseerr) API.

    The client is not bound to a Jellyseerr instance: each call takes the
    connection settings of the profile it runs for. Requests are sent one at a
    time and share a single aiohttp session.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize the Jellyseerr client.

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

    async def __aenter__(self) -> JellyseerrClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def _auth_headers(config: JellyseerrConfig) -> dict[str, str]:
        return {
            "X-Api-Key": config.api_key.get_secret_value(),
            "X-Api-User": str(config.user_id),
        }

    @jellyseerr_limiter()
    async def _get_media_details(
        self, item: MediaItem, config: JellyseerrConfig
    ) -> MediaDetails | None:
        """Fetch Jellyseerr's record of an item, None if it has none."""
        session = await self._get_session()
        media_type = item.media_type.jellyseerr_type
        url = f"{config.url}/api/v1/{media_type}/{item.external_id}"

        async with session.get(
            url, params={"language": "en"}, headers=self._auth_headers(config)
        ) as response:
            if response.status == 404:
                return None
            if response.status >= 400:
                log.debug(
                    f"Jellyseerr returned {response.status} for $$'{item}'$$, "
                    f"treating as unknown"
                )
                return None
            try:
                return MediaDetails.model_validate(
                    await response.json(content_type=None)
                )
            except ValueError as e:
                raise JellyseerrError(
                    f"Jellyseerr returned an unexpected response for $$'{item}'$$"
                ) from e

    async def get_availability(
        self, item: MediaItem, config: JellyseerrConfig
    ) -> Availability:
        """Categorize an item from Jellyseerr's media status.

        Both the standard and 4K statuses are considered, along with whether
        any request exists for the item.

        Raises:
            aiohttp.ClientError: If Jellyseerr cannot be reached.
            TimeoutError: If Jellyseerr does not answer in time.
            JellyseerrError: If the response is not a media details payload.
        """
        details = await self._get_media_details(item, config)
        media_info = details.media_info if details else None
        if media_info is None:
            return Availability.TO_BE_REQUESTED

        return Availability.from_combined_status(
            media_info.status,
            media_info.status4k,
            has_known_requests=bool(media_info.requests),
        )

    @staticmethod
    def _build_request_payload(item: MediaItem) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "mediaType": item.media_type.jellyseerr_type,
            "mediaId": item.external_id,
        }
        if item.media_type is MediaType.SHOW:
            payload["seasons"] = [1]
        return payload

    @jellyseerr_limiter()
    async def _request_item(self, item: MediaItem, config: JellyseerrConfig) -> None:
        """Submit a single request.

        Raises:
            JellyseerrRequestError: If Jellyseerr rejected the request.
        """
        session = await self._get_session()
        async with session.post(
            f"{config.url}/api/v1/request",
            json=self._build_request_payload(item),
            headers=self._auth_headers(config),
        ) as response:
            if response.status in (200, 201):
                try:
                    data = RequestResponse.model_validate(
                        await response.json(content_type=None)
                    )
                except (ValidationError, ValueError) as e:
                    raise JellyseerrRequestError(
                        f"Unexpected response ({response.status}): {e}"
                    ) from e
                if data.media and data.media.tmdb_id == item.external_id:
                    return
                raise JellyseerrRequestError(
                    f"Response does not match the requested item ({response.status})"
                )
            if response.status == 202:
                return

            body = await response.text()
            if response.status == 400:
                message = _extract_message(body)
                if "already" in message.lower():
                    log.debug(f"$$'{item}'$$ was already requested")
                    return
                raise JellyseerrRequestError(f"Bad request (400): {message or body}")
            raise JellyseerrRequestError(
                f"Unexpected status {response.status}: {body[:200]}"
            )

    async def request_items(
        self, items: Sequence[MediaItem], config: JellyseerrConfig
    ) -> RequestResults:
        """Request items one after another.

        A failed request (rejection, network error or timeout) is recorded and the
        remaining items are still submitted.

        Args:
            items (Sequence[MediaItem]): Items to request.
            config (JellyseerrConfig): Connection settings of the profile.

        Returns:
            RequestResults: Successfully requested and failed items.
        """
        results = RequestResults()
        for item in items:
            try:
                await self._request_item(item, config)
            except JellyseerrRequestError as e:
                log.warning(f"Failed to request $$'{item}'$$: {e}")
                results.failed.append(RequestFailure(item, str(e)))
            except (TimeoutError, aiohttp.ClientError) as e:
                error = str(e) or type(e).__name__
                log.warning(f"Error requesting $$'{item}'$$ to Jellyseerr: {error}")
                results.failed.append(RequestFailure(item, error))
            else:
                log.debug(f"Requested $$'{item}'$$")
                results.successful.append(item)

        return results


def _extract_message(body: str) -> str:
    """Get the `message` field of a JSON error body, if there is one."""
    try:
        data = json.loads(body)
    except ValueError:
        return ""
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return ""


