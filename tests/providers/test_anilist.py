"""Tests for the AniList fetcher."""

import pytest

from listseerr.exceptions import InvalidListUrlError, ProviderFetchError
from listseerr.models.media import MediaType
from listseerr.providers import anilist as anilist_module
from listseerr.providers.anilist import ANIME_IDS_URL, AnilistFetcher
from tests.fakes import FakeResponse, FakeSession

ANIME_IDS = [
    {"anilist_id": 21, "themoviedb_id": 37854, "type": "TV"},
    {"anilist_id": 199, "themoviedb_id": 129, "type": "MOVIE"},
    {"anilist_id": 20, "themoviedb_id": 46260, "type": "ONA"},
    {"anilist_id": 5114, "type": "TV"},
    {"anilist_id": 9253, "themoviedb_id": "unknown", "type": "TV"},
    {"mal_id": 1, "themoviedb_id": 30991, "type": "TV"},
]


def _entry(media_id: int, english: str | None, romaji: str, fmt: str, year: int):
    return {
        "mediaId": media_id,
        "status": "PLANNING",
        "media": {
            "id": media_id,
            "title": {"romaji": romaji, "english": english},
            "format": fmt,
            "episodes": None,
            "seasonYear": year,
        },
    }


def _collection(*entries: dict) -> dict:
    return {
        "data": {
            "MediaListCollection": {
                "lists": [
                    {"name": "Planning", "status": "PLANNING", "entries": entries}
                ]
            }
        }
    }


@pytest.fixture
def anilist_session(monkeypatch):
    """Route every AniList fetcher through one fake session."""
    sessions: list[FakeSession] = []

    def _install(*responses: FakeResponse) -> FakeSession:
        session = FakeSession(*responses)
        sessions.append(session)

        async def _get_session(self) -> FakeSession:
            return session

        monkeypatch.setattr(AnilistFetcher, "_get_session", _get_session)
        return session

    anilist_module._load_anime_ids.cache_clear()
    yield _install
    anilist_module._load_anime_ids.cache_clear()


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("anilist:Josh:PLANNING", ("Josh", "PLANNING")),
        ("anilist:josh_123:completed", ("josh_123", "COMPLETED")),
        ("  anilist:Josh:Current  ", ("Josh", "CURRENT")),
    ],
)
def test_parse_url(url: str, expected: tuple[str, str]) -> None:
    """The username and status are extracted, the status upper-cased."""
    assert AnilistFetcher.parse_url(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "anilist:Josh",
        "anilist:Josh:WATCHING",
        "anilist::PLANNING",
        "https://anilist.co/user/Josh/animelist/Planning",
    ],
)
def test_parse_url_rejects_other_urls(url: str) -> None:
    with pytest.raises(InvalidListUrlError):
        AnilistFetcher.parse_url(url)


@pytest.mark.asyncio
async def test_fetch_items_maps_entries_to_tmdb(anilist_session) -> None:
    """Entries are mapped through the id database, unmapped ones are skipped."""
    session = anilist_session(
        FakeResponse(payload=ANIME_IDS),
        FakeResponse(
            payload=_collection(
                _entry(21, "One Piece", "ONE PIECE", "TV", 1999),
                _entry(199, None, "Sen to Chihiro no Kamikakushi", "MOVIE", 2001),
                _entry(5114, "Fullmetal Alchemist", "Hagane", "TV", 2009),
                _entry(20, "Naruto", "NARUTO", "MUSIC", 2002),
                _entry(9253, "Steins;Gate", "STEINS;GATE", "TV", 2011),
            )
        ),
    )

    items = await AnilistFetcher(timeout=5).fetch_items(
        "anilist:Josh:planning", 50, None
    )

    assert [(item.external_id, item.media_type) for item in items] == [
        (37854, MediaType.SHOW),
        (129, MediaType.MOVIE),
    ]
    assert items[0].title == "One Piece"
    assert items[1].title == "Sen to Chihiro no Kamikakushi"
    assert items[1].year == 2001

    (_, ids_url, _), (method, api_url, kwargs) = session.calls
    assert ids_url == ANIME_IDS_URL
    assert (method, api_url) == ("POST", AnilistFetcher.API_URL)
    assert kwargs["json"]["variables"] == {"userName": "Josh", "status": "PLANNING"}


@pytest.mark.asyncio
async def test_id_mapping_is_downloaded_once(anilist_session) -> None:
    """Later fetches reuse the cached id mapping."""
    session = anilist_session(
        FakeResponse(payload=ANIME_IDS),
        FakeResponse(payload=_collection(_entry(21, "One Piece", "OP", "TV", 1999))),
        FakeResponse(payload=_collection(_entry(20, "Naruto", "NARUTO", "ONA", 2002))),
    )
    fetcher = AnilistFetcher(timeout=5)

    first = await fetcher.fetch_items("anilist:Josh:CURRENT", 50, None)
    second = await fetcher.fetch_items("anilist:Josh:COMPLETED", 50, None)

    assert [item.external_id for item in first] == [37854]
    assert [item.external_id for item in second] == [46260]
    assert [call[1] for call in session.calls].count(ANIME_IDS_URL) == 1


@pytest.mark.asyncio
async def test_max_items_limits_list_entries(anilist_session) -> None:
    anilist_session(
        FakeResponse(payload=ANIME_IDS),
        FakeResponse(
            payload=_collection(
                _entry(21, "One Piece", "ONE PIECE", "TV", 1999),
                _entry(20, "Naruto", "NARUTO", "TV", 2002),
            )
        ),
    )

    fetcher = AnilistFetcher(timeout=5)
    items = await fetcher.fetch_items("anilist:Josh:CURRENT", 1, None)

    assert [item.external_id for item in items] == [37854]


@pytest.mark.asyncio
async def test_missing_or_private_list_is_empty(anilist_session) -> None:
    """A user without a visible list yields no items."""
    anilist_session(
        FakeResponse(payload=ANIME_IDS),
        FakeResponse(payload={"data": {"MediaListCollection": None}}),
    )

    fetcher = AnilistFetcher(timeout=5)
    assert await fetcher.fetch_items("anilist:Nobody:CURRENT", 50, None) == []


@pytest.mark.asyncio
async def test_graphql_errors_fail_the_fetch(anilist_session) -> None:
    anilist_session(
        FakeResponse(payload=ANIME_IDS),
        FakeResponse(
            payload={"errors": [{"message": "User not found", "status": 404}]}
        ),
    )

    with pytest.raises(ProviderFetchError, match="User not found"):
        await AnilistFetcher(timeout=5).fetch_items("anilist:Nobody:CURRENT", 50, None)


def test_anilist_needs_no_credential_and_a_larger_budget() -> None:
    """The list and the id mapping are both downloaded within one fetch."""
    fetcher = AnilistFetcher(timeout=5)

    assert not AnilistFetcher.REQUIRES_CREDENTIAL
    assert fetcher.fetch_timeout == 2 * fetcher.MAX_RETRIES * (
        5 + fetcher.MAX_RETRY_WAIT + 1
    )
