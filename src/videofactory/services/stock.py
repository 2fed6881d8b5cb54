"""Stock footage lookup across Pexels and Pixabay."""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

import httpx

from ..config import config
from ..errors import ProviderLookupError

logger = logging.getLogger(__name__)

# Fallback query length when keyword extraction fails
_RAW_QUERY_WORDS = 6


class KeywordExtractor(Protocol):
    async def run(self, input_data: str) -> str:
        ...


class StockProvider(Protocol):
    name: str

    async def search(self, query: str, orientation: str) -> Optional[str]:
        ...


@dataclass(frozen=True)
class StockCredentials:
    """API keys for the stock footage providers; empty means not configured."""

    pexels_api_key: str = ""
    pixabay_api_key: str = ""

    @classmethod
    def from_config(cls) -> "StockCredentials":
        return cls(pexels_api_key=config.pexels_api_key, pixabay_api_key=config.pixabay_api_key)

    def __bool__(self) -> bool:
        return bool(self.pexels_api_key or self.pixabay_api_key)


class PexelsProvider:
    """Pexels video search; prefers an SD MP4 rendition for faster handling."""

    name = "pexels"
    SEARCH_URL = "https://api.pexels.com/videos/search"

    def __init__(self, api_key: str, http_client: httpx.AsyncClient) -> None:
        self._api_key = api_key
        self._http = http_client

    async def search(self, query: str, orientation: str) -> Optional[str]:
        response = await self._http.get(
            self.SEARCH_URL,
            params={"query": query, "per_page": 1, "orientation": orientation},
            headers={"Authorization": self._api_key},
        )
        if not response.is_success:
            raise ProviderLookupError(f"Pexels search failed: {response.status_code}")

        videos = response.json().get("videos") or []
        if not videos:
            return None
        return self._pick_file(videos[0].get("video_files") or [])

    @staticmethod
    def _pick_file(files: List[dict]) -> Optional[str]:
        mp4s = [f for f in files if f.get("file_type") == "video/mp4" and f.get("link")]
        for candidate in mp4s:
            if candidate.get("quality") == "sd":
                return candidate["link"]
        return mp4s[0]["link"] if mp4s else None


class PixabayProvider:
    """Pixabay video search; returns the medium rendition of the first hit."""

    name = "pixabay"
    SEARCH_URL = "https://pixabay.com/api/videos/"

    def __init__(self, api_key: str, http_client: httpx.AsyncClient) -> None:
        self._api_key = api_key
        self._http = http_client

    async def search(self, query: str, orientation: str) -> Optional[str]:
        # Pixabay video search has no orientation filter
        response = await self._http.get(
            self.SEARCH_URL,
            params={"key": self._api_key, "q": query, "per_page": 3},
        )
        if not response.is_success:
            raise ProviderLookupError(f"Pixabay search failed: {response.status_code}")

        hits = response.json().get("hits") or []
        if not hits:
            return None
        medium: Any = (hits[0].get("videos") or {}).get("medium") or {}
        return medium.get("url") or None


class StockSourceResolver:
    """Resolve a text query to one playable stock video URL.

    Providers are tried in a fixed order (Pexels, then Pixabay) and the first
    URL wins. A provider that errors is logged and skipped; `resolve` never
    raises, so a failed lookup cannot abort the fallback around it.
    """

    def __init__(
        self,
        keyword_agent: KeywordExtractor,
        http_client: httpx.AsyncClient,
    ) -> None:
        self._keywords = keyword_agent
        self._http = http_client

    def providers_for(self, credentials: StockCredentials) -> List[StockProvider]:
        """Build the configured providers in priority order."""
        providers: List[StockProvider] = []
        if credentials.pexels_api_key:
            providers.append(PexelsProvider(credentials.pexels_api_key, self._http))
        if credentials.pixabay_api_key:
            providers.append(PixabayProvider(credentials.pixabay_api_key, self._http))
        return providers

    async def resolve(
        self,
        query: str,
        credentials: StockCredentials,
        orientation: str = "portrait",
    ) -> Optional[str]:
        """Return the first stock video URL any provider finds for ``query``."""
        providers = self.providers_for(credentials)
        if not providers:
            logger.info("No stock footage credentials configured; skipping lookup")
            return None

        search_query = await self._search_query(query)
        for provider in providers:
            try:
                url = await provider.search(search_query, orientation)
            except Exception as e:
                logger.warning(f"Stock lookup via {provider.name} failed for '{search_query}': {e}")
                continue
            if url:
                logger.info(f"Stock video from {provider.name} for '{search_query}'")
                return url
            logger.debug(f"No {provider.name} match for '{search_query}'")

        return None

    async def _search_query(self, query: str) -> str:
        try:
            keywords = await self._keywords.run(query)
        except Exception as e:
            logger.warning(f"Keyword extraction failed, searching with the raw query: {e}")
            keywords = ""
        return keywords or " ".join(query.split()[:_RAW_QUERY_WORDS])
