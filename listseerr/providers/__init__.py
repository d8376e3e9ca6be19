"""List provider fetchers.

Importing this package registers the built-in fetchers with `provider_registry`.
"""

from listseerr.providers.anilist import AnilistFetcher
from listseerr.providers.base import MediaFetcher, ProviderRegistry, provider_registry
from listseerr.providers.mdblist import MdbListFetcher
from listseerr.providers.stevenlu import StevenLuFetcher
from listseerr.providers.trakt import TraktChartFetcher, TraktListFetcher

__all__ = [
    "AnilistFetcher",
    "MdbListFetcher",
    "MediaFetcher",
    "ProviderRegistry",
    "StevenLuFetcher",
    "TraktChartFetcher",
    "TraktListFetcher",
    "provider_registry",
]
