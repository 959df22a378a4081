import logging
import random
from typing import Dict, List, Optional

from market_news.classifier.news_classifier import NewsClassifier
from market_news.config import NewsSettings
from market_news.mock.mock_generator import MockNewsGenerator
from market_news.search.adapter import SearchAdapter
from market_news.search.base import SearchBackend, ToolCaller
from market_news.search.brave import BraveSearchBackend
from market_news.search.firecrawl import FirecrawlSearchBackend
from market_news.search.scrapers import FirecrawlScraper, HttpScraper, ScrapeChain
from market_news.storage.models import (
    Article,
    Category,
    FilterOptions,
    IndustryEvent,
    NewsSource,
    TrendingTopic,
)
from market_news.storage.repository import JsonNewsRepository, NewsRepository
from market_news.tracker.news_tracker import NewsTracker

logger = logging.getLogger(__name__)


class NewsService:
    """Funções consumidas pela UI/API. Todas resolvem para lista e nunca levantam."""

    def __init__(self, tracker: NewsTracker, repository: NewsRepository):
        self.tracker = tracker
        self.repository = repository

    async def get_news_articles(self, industry: str, options: Optional[FilterOptions] = None) -> List[Article]:
        try:
            return await self.tracker.fetch_articles(industry, options)
        except Exception as e:
            logger.error(f"Error in get_news_articles: {e}")
            return []

    async def get_news_categories(self, industry: str) -> List[Category]:
        try:
            return await self.repository.get_categories(industry.lower())
        except Exception as e:
            logger.error(f"Error fetching news categories: {e}")
            return []

    async def get_news_sources(self, industry: str) -> List[NewsSource]:
        try:
            return await self.repository.get_sources(industry.lower())
        except Exception as e:
            logger.error(f"Error fetching news sources: {e}")
            return []

    async def get_featured_news_articles(self, industry: str, limit: int = 3) -> List[Article]:
        try:
            return await self.repository.get_featured_articles(industry.lower(), limit)
        except Exception as e:
            logger.error(f"Error fetching featured news articles: {e}")
            return []

    async def get_trending_topics(self, industry: str, limit: int = 5) -> List[TrendingTopic]:
        try:
            return await self.repository.get_trending_topics(industry.lower(), limit)
        except Exception as e:
            logger.error(f"Error fetching trending topics: {e}")
            return []

    async def get_upcoming_events(self, industry: str, limit: int = 5) -> List[IndustryEvent]:
        try:
            return await self.repository.get_upcoming_events(industry.lower(), limit)
        except Exception as e:
            logger.error(f"Error fetching upcoming events: {e}")
            return []


def build_service(
    settings: Optional[NewsSettings] = None,
    tool_caller: Optional[ToolCaller] = None,
    repository: Optional[NewsRepository] = None,
    rng: Optional[random.Random] = None,
) -> NewsService:
    """Monta o grafo completo (store, backends, scrapers, tracker) a partir da configuração."""
    settings = settings or NewsSettings.from_env()
    repository = repository or JsonNewsRepository(settings.db_path)

    known: Dict[str, SearchBackend] = {
        "firecrawl": FirecrawlSearchBackend(settings.search, tool_caller),
        "brave": BraveSearchBackend(settings.search.api_key),
    }
    backends = []
    for name in settings.backend_order:
        if name in known:
            backends.append(known[name])
        else:
            logger.warning(f"Unknown search backend '{name}' in configuration; ignoring")

    scrape_chain = ScrapeChain(
        [FirecrawlScraper(settings.search, tool_caller), HttpScraper(settings.scrape_timeout_seconds)],
        timeout=settings.scrape_timeout_seconds,
    )
    tracker = NewsTracker(
        repository=repository,
        adapter=SearchAdapter(backends, settings.search_strategy, rng),
        scrape_chain=scrape_chain,
        classifier=NewsClassifier(),
        mock_generator=MockNewsGenerator(rng),
        settings=settings,
    )
    return NewsService(tracker, repository)
