import logging
from typing import Any, Dict, List, Optional

from market_news.config import SearchConfig
from market_news.search.base import SearchBackend, SearchBackendError, ToolCaller
from market_news.storage.models import SearchHit

logger = logging.getLogger(__name__)

SEARCH_TOOL = "firecrawl_search"
SCRAPE_TOOL = "firecrawl_scrape"


def firecrawl_available(config: SearchConfig, tool_caller: Optional[ToolCaller]) -> bool:
    # Backend de dev: nunca em produção, e só com a capacidade de tool call injetada
    return (not config.is_production) and config.search_backend_enabled and tool_caller is not None


class FirecrawlSearchBackend(SearchBackend):
    name = "firecrawl"
    max_results = 10

    def __init__(self, config: SearchConfig, tool_caller: Optional[ToolCaller] = None):
        self.config = config
        self.tool_caller = tool_caller

    @property
    def available(self) -> bool:
        return firecrawl_available(self.config, self.tool_caller)

    @staticmethod
    def _to_hit(item: Dict[str, Any]) -> Optional[SearchHit]:
        url = item.get("url")
        if not url:
            return None
        metadata = item.get("metadata") or {}
        return SearchHit(
            title=item.get("title") or metadata.get("title") or "",
            url=url,
            description=item.get("description") or item.get("summary") or metadata.get("description") or "",
            image_url=item.get("image") or metadata.get("ogImage") or None,
            published_date=item.get("published_date") or metadata.get("publishedTime") or None,
        )

    async def search(self, query: str, count: int) -> List[SearchHit]:
        if not self.available:
            raise SearchBackendError("Firecrawl search is not available in this environment")

        args = {
            "query": query,
            "limit": min(count, self.max_results),
            "scrapeOptions": {
                "formats": ["markdown"],
                "onlyMainContent": True,
                "waitFor": 5000,
            },
        }
        try:
            response = await self.tool_caller(SEARCH_TOOL, args)
        except Exception as e:
            raise SearchBackendError(f"Firecrawl search failed: {e}") from e

        if not isinstance(response, dict) or response.get("error"):
            raise SearchBackendError(f"Firecrawl search returned an error: {response!r}"[:300])

        # resultados vêm em "results" ou, no formato da API do Firecrawl, em "data"
        data = response.get("results") or response.get("data") or []
        hits = [h for h in (self._to_hit(item) for item in data if isinstance(item, dict)) if h is not None]
        logger.info(f"Firecrawl returned {len(hits)} results for '{query[:60]}'")
        return hits
