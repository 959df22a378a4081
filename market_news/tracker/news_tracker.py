import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Set

from market_news.classifier.news_classifier import NewsClassifier
from market_news.config import NewsSettings
from market_news.mock.mock_generator import MockNewsGenerator
from market_news.search.adapter import SearchAdapter, build_search_query
from market_news.search.scrapers import ScrapeChain
from market_news.storage.models import Article, ArticleDetails, FilterOptions, SearchHit
from market_news.storage.repository import NewsRepository
from market_news.utils.date_utils import is_recent, parse_iso, recency_cutoff, utc_now
from market_news.utils.url_utils import resolve_source

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Article"
UNKNOWN_AUTHOR = "Unknown"
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _newest_first(articles: Iterable[Article]) -> List[Article]:
    return sorted(articles, key=lambda a: parse_iso(a.published_date) or _EPOCH, reverse=True)


class NewsTracker:
    """
    Aquisição de notícias em camadas: store -> busca externa + scrape -> mock.
    fetch_articles nunca levanta exceção e nunca devolve mais que `limit` itens.
    """

    def __init__(
        self,
        repository: NewsRepository,
        adapter: SearchAdapter,
        scrape_chain: ScrapeChain,
        classifier: Optional[NewsClassifier] = None,
        mock_generator: Optional[MockNewsGenerator] = None,
        settings: Optional[NewsSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.adapter = adapter
        self.scrape_chain = scrape_chain
        self.classifier = classifier or NewsClassifier()
        self.mock = mock_generator or MockNewsGenerator()
        self.settings = settings or NewsSettings()
        self.clock = clock or utc_now
        self.last_updated: Optional[int] = None

    # ---------- camada 1 + orquestração ----------
    async def fetch_articles(self, industry: str, options: Optional[FilterOptions] = None) -> List[Article]:
        options = options or FilterOptions(limit=self.settings.default_limit)
        limit = options.limit
        if limit <= 0:
            return []
        industry = industry.lower()

        try:
            stored = await self.repository.query_articles(
                industry,
                since=recency_cutoff(self.settings.recency_days, self.clock()),
                limit=limit,
                category=options.category,
                source=options.source,
                search_term=options.search_term,
            )
        except Exception as e:
            logger.warning(f"Store read failed for '{industry}', going to external sources: {e}")
            stored = []

        stored = stored[:limit]
        if len(stored) >= limit:
            return stored

        missing = limit - len(stored)
        logger.info(f"Store returned {len(stored)}/{limit} articles for '{industry}', acquiring {missing} externally")
        acquired = await self._acquire_or_mock(industry, options, missing, {a.url for a in stored})

        result = stored + acquired
        if not result:
            logger.info(f"No stored or external articles for '{industry}', using mock data")
            return self.mock.generate(industry, limit, options.category, options.source)
        if len(result) < limit:
            logger.warning(f"Returning {len(result)}/{limit} articles for '{industry}' (external sources under-filled)")
        return result[:limit]

    async def _acquire_or_mock(self, industry: str, options: FilterOptions, count: int, exclude_urls: Set[str]) -> List[Article]:
        try:
            return await self.acquire_external(industry, options.model_copy(update={"limit": count}), exclude_urls)
        except Exception as e:
            logger.error(f"Error fetching news from external sources: {e}")
            return self.mock.generate(industry, count, options.category, options.source)

    # ---------- camada 2 ----------
    async def acquire_external(
        self,
        industry: str,
        options: FilterOptions,
        exclude_urls: Optional[Set[str]] = None,
    ) -> List[Article]:
        """Busca, raspa, classifica e persiste até `options.limit` artigos recentes."""
        limit = options.limit
        if limit <= 0:
            return []
        industry = industry.lower()
        seen: Set[str] = set(exclude_urls or ())

        query = build_search_query(industry, options.category, options.source, options.search_term)
        # pede a mais o que pode voltar repetido do store
        hits = await self.adapter.search(query, limit + len(seen))
        now = self.clock()

        articles: List[Article] = []
        for hit in hits:
            if len(articles) >= limit:
                break
            if not hit.url or hit.url in seen:
                continue
            seen.add(hit.url)

            details = await self.scrape_chain.details(hit)
            article = self._build_article(hit, details, industry)

            if not is_recent(article.published_date, self.settings.recency_days, now):
                logger.info(f"Skipping article older than {self.settings.recency_days} days: {article.title}")
                continue
            articles.append(article)

        articles = _newest_first(articles)
        if articles:
            try:
                await self.repository.upsert_articles(articles)
            except Exception as e:
                logger.error(f"Error storing articles: {e}")
        return articles

    def _build_article(self, hit: SearchHit, details: Optional[ArticleDetails], industry: str) -> Article:
        details = details or ArticleDetails()
        text = " ".join([hit.title or "", hit.description or "", details.content or ""])
        return Article(
            title=hit.title or UNTITLED,
            summary=details.summary or hit.description or "",
            content=details.content or hit.description or "",
            image_url=details.image_url or hit.image_url or "",
            url=hit.url,
            published_date=self._published(details.published_date or hit.published_date),
            author=details.author or UNKNOWN_AUTHOR,
            source=resolve_source(hit.url),
            category=self.classifier.classify(text, industry),
            industry=industry,
            featured=False,
        )

    def _published(self, raw: Optional[str]) -> str:
        # datas ilegíveis (ex.: "2 days ago" da Brave) viram "agora"
        parsed = parse_iso(raw)
        return (parsed or self.clock()).isoformat()

    # ---------- refresh agendado ----------
    async def refresh(self, industry: str, limit: Optional[int] = None) -> List[Article]:
        """Aquece o store com notícias recentes, sem filtros."""
        options = FilterOptions(limit=self.settings.default_limit if limit is None else limit)
        try:
            articles = await self.acquire_external(industry, options)
        except Exception as e:
            logger.error(f"Refresh failed for '{industry}': {e}")
            return []
        self.last_updated = int(self.clock().timestamp())
        logger.info(f"Refreshed '{industry}': {len(articles)} articles acquired")
        return articles
