import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from market_news.storage.models import (
    Article,
    Category,
    IndustryEvent,
    NewsSource,
    TrendingTopic,
)
from market_news.utils.date_utils import parse_iso, utc_now

logger = logging.getLogger(__name__)

ARTICLES = "news_articles"
CATEGORIES = "news_categories"
SOURCES = "news_sources"
TOPICS = "trending_topics"
EVENTS = "industry_events"
TABLES = (ARTICLES, CATEGORIES, SOURCES, TOPICS, EVENTS)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class StoreError(Exception):
    """Falha de leitura/escrita no store persistido."""


class NewsRepository(ABC):
    @abstractmethod
    async def query_articles(
        self,
        industry: str,
        since: datetime,
        limit: int,
        category: Optional[str] = None,
        source: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> List[Article]:
        ...

    @abstractmethod
    async def upsert_articles(self, articles: Iterable[Article]) -> int:
        """Insere por `url`; URL já existente é ignorada (primeiro a escrever vence)."""

    @abstractmethod
    async def get_featured_articles(self, industry: str, limit: int) -> List[Article]:
        ...

    @abstractmethod
    async def get_categories(self, industry: str) -> List[Category]:
        ...

    @abstractmethod
    async def get_sources(self, industry: str) -> List[NewsSource]:
        ...

    @abstractmethod
    async def get_trending_topics(self, industry: str, limit: int) -> List[TrendingTopic]:
        ...

    @abstractmethod
    async def get_upcoming_events(self, industry: str, limit: int, today: Optional[date] = None) -> List[IndustryEvent]:
        ...

    @abstractmethod
    async def add_records(self, table: str, records: Iterable[Dict[str, Any]]) -> int:
        ...


def _newest_first(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda r: parse_iso(r.get("published_date")) or _EPOCH, reverse=True)


class JsonNewsRepository(NewsRepository):
    """
    Store em arquivo JSON: {tabela: [linhas]}.
    Um asyncio.Lock serializa acesso; I/O de arquivo roda em thread para não travar o loop.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = asyncio.Lock()
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    # ---------- I/O ----------
    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        empty = {t: [] for t in TABLES}
        if not os.path.exists(self.path):
            return empty
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError:
            logger.warning(f"{self.path} está vazio ou corrompido. Recriando do zero.")
            return empty
        except OSError as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e
        if not isinstance(raw, dict):
            logger.warning(f"{self.path} has unexpected layout; starting empty")
            return empty
        for t in TABLES:
            empty[t] = list(raw.get(t) or [])
        return empty

    def _save(self, db: Dict[str, List[Dict[str, Any]]]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(db, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e

    async def _read_table(self, table: str, industry: str) -> List[Dict[str, Any]]:
        async with self._lock:
            db = await asyncio.to_thread(self._load)
        industry = industry.lower()
        return [r for r in db[table] if str(r.get("industry", "")).lower() == industry]

    # ---------- artigos ----------
    async def query_articles(
        self,
        industry: str,
        since: datetime,
        limit: int,
        category: Optional[str] = None,
        source: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> List[Article]:
        rows = await self._read_table(ARTICLES, industry)
        term = search_term.lower() if search_term else None

        selected = []
        for r in rows:
            published = parse_iso(r.get("published_date"))
            if published is None or published < since:
                continue
            if category and r.get("category") != category:
                continue
            if source and r.get("source") != source:
                continue
            if term and term not in (r.get("title") or "").lower() and term not in (r.get("content") or "").lower():
                continue
            selected.append(r)

        return [Article(**r) for r in _newest_first(selected)[:limit]]

    async def upsert_articles(self, articles: Iterable[Article]) -> int:
        articles = list(articles)
        if not articles:
            return 0
        async with self._lock:
            db = await asyncio.to_thread(self._load)
            seen_urls = {r.get("url") for r in db[ARTICLES]}
            inserted = 0
            for article in articles:
                if article.url in seen_urls:
                    continue
                db[ARTICLES].append(article.model_dump())
                seen_urls.add(article.url)
                inserted += 1
            if inserted:
                await asyncio.to_thread(self._save, db)
        logger.info(f"Stored {inserted}/{len(articles)} articles ({len(articles) - inserted} duplicates ignored)")
        return inserted

    async def get_featured_articles(self, industry: str, limit: int) -> List[Article]:
        rows = [r for r in await self._read_table(ARTICLES, industry) if r.get("featured")]
        return [Article(**r) for r in _newest_first(rows)[:limit]]

    # ---------- tabelas de referência ----------
    async def get_categories(self, industry: str) -> List[Category]:
        return [Category(**r) for r in await self._read_table(CATEGORIES, industry)]

    async def get_sources(self, industry: str) -> List[NewsSource]:
        return [NewsSource(**r) for r in await self._read_table(SOURCES, industry)]

    async def get_trending_topics(self, industry: str, limit: int) -> List[TrendingTopic]:
        rows = await self._read_table(TOPICS, industry)
        rows.sort(key=lambda r: r.get("popularity") or 0, reverse=True)
        return [TrendingTopic(**r) for r in rows[:limit]]

    async def get_upcoming_events(self, industry: str, limit: int, today: Optional[date] = None) -> List[IndustryEvent]:
        today_str = (today or utc_now().date()).isoformat()
        rows = [r for r in await self._read_table(EVENTS, industry) if str(r.get("start_date", ""))[:10] >= today_str]
        rows.sort(key=lambda r: str(r.get("start_date", "")))
        return [IndustryEvent(**r) for r in rows[:limit]]

    async def add_records(self, table: str, records: Iterable[Dict[str, Any]]) -> int:
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        records = [dict(r) for r in records]
        async with self._lock:
            db = await asyncio.to_thread(self._load)
            db[table].extend(records)
            await asyncio.to_thread(self._save, db)
        return len(records)
