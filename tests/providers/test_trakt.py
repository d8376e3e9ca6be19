"""Tests for the Trakt list and chart fetchers."""

import pytest

from listseerr.exceptions import InvalidListUrlError, ProviderNotConfiguredError
from listseerr.models.media import MediaType
from listseerr.providers.trakt import TraktChartFetcher, TraktListFetcher
from tests.fakes import FakeResponse, FakeSession, attach_session


def _media(title: str, year: int, tmdb: int | None) -> dict:
    return {"title": title, "year": year, "ids": {"trakt": 1, "tmdb": tmdb}}


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (
            "https://trakt.tv/users/bob/lists/favs",
            "/users/bob/lists/favs/items",
        ),
        (
            "https://trakt.tv/users/bob/lists/favs/?display=movie",
            "/users/bob/lists/favs/items/movie",
        ),
        (
            "https://trakt.tv/users/bob/lists/favs?sort=rank,asc",
            "/users/bob/lists/favs/items/movie,show/rank/asc",
        ),
        (
            "https://trakt.tv/users/bob/lists/favs?display=show&sort=added,desc",
            "/users/bob/lists/favs/items/show/added/desc",
        ),
        (
            "https://trakt.tv/users/bob/lists/favs?display=person&sort=rank",
            "/users/bob/lists/favs/items",
        ),
    ],
)
def test_build_items_path(url: str, expected: str) -> None:
    """List URLs and their display/sort options map to API paths."""
    assert TraktListFetcher.build_items_path(url) == expected


def test_build_items_path_rejects_other_urls() -> None:
    """URLs that are not Trakt user lists are rejected."""
    with pytest.raises(InvalidListUrlError):
        TraktListFetcher.build_items_path("https://trakt.tv/movies/trending")


@pytest.mark.asyncio
async def test_list_fetch_keeps_movies_and_shows() -> None:
    """Only movies and shows with a TMDB id become items."""
    fetcher = TraktListFetcher(timeout=5)
    session = attach_session(
        fetcher,
        FakeSession(
            FakeResponse(
                payload=[
                    {"type": "movie", "movie": _media("Heat", 1995, 949)},
                    {"type": "show", "show": _media("The Wire", 2002, 1438)},
                    {"type": "episode", "show": _media("The Wire", 2002, 1438)},
                    {"type": "movie", "movie": _media("Unknown", 2020, None)},
                    {"type": "person"},
                ]
            )
        ),
    )

    items = await fetcher.fetch_items(
        "https://trakt.tv/users/bob/lists/favs", 10, "client-id"
    )

    assert [(item.external_id, item.media_type) for item in items] == [
        (949, MediaType.MOVIE),
        (1438, MediaType.SHOW),
    ]
    _, url, kwargs = session.calls[0]
    assert url == "https://api.trakt.tv/users/bob/lists/favs/items"
    assert kwargs["headers"]["trakt-api-key"] == "client-id"
    assert kwargs["headers"]["trakt-api-version"] == "2"
    assert kwargs["params"] == {"page": 1, "limit": 10}


@pytest.mark.asyncio
async def test_list_fetch_requires_client_id() -> None:
    """Trakt cannot be queried without a client id."""
    with pytest.raises(ProviderNotConfiguredError):
        await TraktListFetcher(timeout=5).fetch_items(
            "https://trakt.tv/users/bob/lists/favs", 10, ""
        )


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://trakt.tv/movies/trending", (MediaType.MOVIE, "trending")),
        ("https://trakt.tv/shows/popular/", (MediaType.SHOW, "popular")),
        ("https://api.trakt.tv/movies/anticipated", (MediaType.MOVIE, "anticipated")),
    ],
)
def test_chart_parse_url(url: str, expected: tuple[MediaType, str]) -> None:
    """Chart URLs name the media type and the chart."""
    assert TraktChartFetcher.parse_url(url) == expected


def test_chart_parse_url_rejects_unknown_chart() -> None:
    """Only the known charts are accepted."""
    with pytest.raises(InvalidListUrlError):
        TraktChartFetcher.parse_url("https://trakt.tv/movies/boxoffice2")


@pytest.mark.asyncio
async def test_popular_chart_is_a_plain_list() -> None:
    """The popular chart returns media without a wrapper."""
    fetcher = TraktChartFetcher(timeout=5)
    session = attach_session(
        fetcher,
        FakeSession(
            FakeResponse(
                payload=[_media("Arcane", 2021, 94605), _media("Dark", 2017, 70523)]
            )
        ),
    )

    items = await fetcher.fetch_items(
        "https://trakt.tv/shows/popular", 1, "client-id"
    )

    assert [item.external_id for item in items] == [94605]
    assert items[0].media_type is MediaType.SHOW
    assert session.calls[0][1] == "https://api.trakt.tv/shows/popular"


@pytest.mark.asyncio
async def test_wrapped_chart_entries_are_unwrapped() -> None:
    """Other charts wrap each movie with statistics."""
    fetcher = TraktChartFetcher(timeout=5)
    attach_session(
        fetcher,
        FakeSession(
            FakeResponse(
                payload=[
                    {"watchers": 120, "movie": _media("Dune", 2021, 438631)},
                    {"watchers": 80, "movie": _media("No id", 2021, None)},
                ]
            )
        ),
    )

    items = await fetcher.fetch_items(
        "https://trakt.tv/movies/trending", 10, "client-id"
    )

    assert [item.external_id for item in items] == [438631]
    assert items[0].year == 2021
