import logging
from typing import Any, Dict, List, Optional

import httpx

from market_news.search.base import SearchBackend, SearchBackendError
from market_news.storage.models import SearchHit

logger = logging.getLogger(__name__)


class BraveSearchBackend(SearchBackend):
    """Brave Search REST API. Sem chave configurada o backend fica indisponível."""

    name = "brave"
    BASE_URL = "https://api.search.brave.com/res/v1/web/search"
    TIMEOUT = 15.0
    max_results = 20

    def __init__(self, api_key: Optional[str], transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def _to_hit(result: Dict[str, Any]) -> Optional[SearchHit]:
        url = result.get("url")
        if not url:
            return None
        thumbnail = result.get("thumbnail") or {}
        return SearchHit(
            title=result.get("title") or "",
            url=url,
            description=result.get("description") or "",
            image_url=thumbnail.get("src") or None,
            published_date=result.get("page_age") or None,
        )

    async def search(self, query: str, count: int) -> List[SearchHit]:
        if not self.available:
            raise SearchBackendError("Brave Search API key is not configured")

        params = {"q": query, "count": min(count, self.max_results)}
        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.TIMEOUT, transport=self._transport) as client:
                resp = await client.get(self.BASE_URL, params=params, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise SearchBackendError(f"Brave search API error: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise SearchBackendError(f"Brave search failed: {e}") from e

        results = ((data or {}).get("web") or {}).get("results") or []
        hits = [h for h in (self._to_hit(r) for r in results) if h is not None]
        logger.info(f"Brave returned {len(hits)} results for '{query[:60]}'")
        return hits
