"""Tests for the StevenLu popular movies fetcher."""

import pytest

from listseerr.models.media import MediaType
from listseerr.providers import stevenlu as stevenlu_module
from listseerr.providers.stevenlu import FEED_URL, StevenLuFetcher
from tests.fakes import FakeResponse, FakeSession


@pytest.mark.asyncio
async def test_feed_is_fetched_once_and_sliced(monkeypatch) -> None:
    """The feed is cached, and each fetch returns at most max_items movies."""
    session = FakeSession(
        FakeResponse(
            payload=[
                {"title": "Sinners", "tmdb_id": 1233413, "imdb_id": "tt31193180"},
                {"title": "No TMDB", "tmdb_id": None, "imdb_id": "tt0000001"},
                {"title": "Weapons", "tmdb_id": 1078605, "imdb_id": "tt26581740"},
                {"title": "F1", "tmdb_id": 911430, "imdb_id": "tt16311594"},
            ]
        )
    )

    async def _get_session(self) -> FakeSession:
        return session

    monkeypatch.setattr(StevenLuFetcher, "_get_session", _get_session)
    stevenlu_module._load_feed.cache_clear()

    fetcher = StevenLuFetcher(timeout=5)
    first = await fetcher.fetch_items("ignored", 2, None)
    second = await fetcher.fetch_items("ignored", 50, None)

    assert [item.external_id for item in first] == [1233413, 1078605]
    assert [item.external_id for item in second] == [1233413, 1078605, 911430]
    assert all(item.media_type is MediaType.MOVIE for item in second)
    assert all(item.year is None for item in second)
    assert [call[1] for call in session.calls] == [FEED_URL]

    stevenlu_module._load_feed.cache_clear()
