# market_news/tests/test_news_tracker.py
import asyncio
import random
from datetime import timedelta

from market_news.config import NewsSettings
from market_news.mock.mock_generator import MockNewsGenerator
from market_news.search import SearchAdapter, SearchBackend
from market_news.storage.models import Article, ArticleDetails, FilterOptions, SearchHit
from market_news.storage.repository import JsonNewsRepository, StoreError
from market_news.tracker.news_service import NewsService
from market_news.tracker.news_tracker import NewsTracker
from market_news.utils.date_utils import parse_iso, recency_cutoff, utc_now


def _ago(**kw):
    return (utc_now() - timedelta(**kw)).isoformat()


class FakeBackend(SearchBackend):
    name = "fake"

    def __init__(self, hits):
        self.hits = hits
        self.calls = []

    @property
    def available(self):
        return True

    async def search(self, query, count):
        self.calls.append((query, count))
        return list(self.hits)


class RaisingAdapter:
    async def search(self, query, count):
        raise RuntimeError("search exploded")


class FakeChain:
    def __init__(self, by_url=None):
        self.by_url = by_url or {}
        self.calls = []

    async def details(self, hit):
        self.calls.append(hit.url)
        return self.by_url.get(hit.url)


class BrokenReadRepo(JsonNewsRepository):
    async def query_articles(self, *a, **k):
        raise StoreError("db down")


class BrokenWriteRepo(JsonNewsRepository):
    async def upsert_articles(self, articles):
        raise StoreError("read-only")


class ExplodingRepo(JsonNewsRepository):
    def __getattribute__(self, name):
        if name in ("query_articles", "upsert_articles"):
            raise AssertionError(f"unexpected store access: {name}")
        return super().__getattribute__(name)


def _stored(n, **kw):
    data = dict(
        title=f"Stored {n}",
        url=f"https://stored.com/{n}",
        published_date=_ago(hours=n),
        industry="dental",
        category="Clinical",
    )
    data.update(kw)
    return Article(**data)


def _hit(n, **kw):
    return SearchHit(title=f"Hit {n}", url=f"https://www.dentistrytoday.com/{n}", description=f"desc {n}", **kw)


def _tracker(repo, hits=(), details=None, adapter=None):
    backend = FakeBackend(list(hits))
    tracker = NewsTracker(
        repository=repo,
        adapter=adapter or SearchAdapter([backend]),
        scrape_chain=FakeChain(details),
        mock_generator=MockNewsGenerator(random.Random(5)),
        settings=NewsSettings(backend_order=[]),
    )
    return tracker, backend


def test_store_plus_external_fills_to_limit(repo):
    asyncio.run(repo.upsert_articles([_stored(1), _stored(2), _stored(3)]))
    hits = [
        _hit(1),
        SearchHit(title="Dup", url="https://stored.com/2"),
        _hit(2),
        _hit(3),
        _hit(4),
        _hit(5),
        _hit(6),
    ]
    details = {
        "https://www.dentistrytoday.com/1": ArticleDetails(content="AI software", published_date=_ago(days=1)),
        "https://www.dentistrytoday.com/2": ArticleDetails(published_date=_ago(days=10)),  # velho demais
        "https://www.dentistrytoday.com/3": ArticleDetails(published_date=_ago(days=2), author="Jane Doe"),
        "https://www.dentistrytoday.com/4": ArticleDetails(published_date=_ago(days=3)),
        "https://www.dentistrytoday.com/5": ArticleDetails(published_date=_ago(days=4)),
    }
    tracker, backend = _tracker(repo, hits, details)

    result = asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=7)))

    assert len(result) == 7
    assert [a.title for a in result[:3]] == ["Stored 1", "Stored 2", "Stored 3"]
    acquired = result[3:]
    assert [a.url for a in acquired] == [f"https://www.dentistrytoday.com/{i}" for i in (1, 3, 4, 5)]
    assert len({a.url for a in result}) == 7
    # hit 6 nunca foi raspado: limite atingido antes
    assert "https://www.dentistrytoday.com/6" not in tracker.scrape_chain.calls
    assert acquired[0].category == "Technology"
    assert acquired[0].source == "Dentistrytoday"
    assert acquired[1].author == "Jane Doe"
    assert acquired[2].author == "Unknown"
    assert backend.calls[0][0] == "dental industry news past week"

    # persistidos para a próxima leitura
    stored = asyncio.run(repo.query_articles("dental", recency_cutoff(7), 20))
    assert len(stored) == 7


def test_store_satisfies_limit_without_external(repo):
    asyncio.run(repo.upsert_articles([_stored(i) for i in range(1, 6)]))
    tracker, backend = _tracker(repo, [_hit(1)])
    result = asyncio.run(tracker.fetch_articles("Dental", FilterOptions(limit=3)))
    assert [a.title for a in result] == ["Stored 1", "Stored 2", "Stored 3"]
    assert backend.calls == []


def test_limit_zero_does_no_io(temp_db):
    tracker, backend = _tracker(ExplodingRepo(temp_db), [_hit(1)])
    assert asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=0))) == []
    assert backend.calls == []


def test_nothing_anywhere_returns_mock(repo):
    tracker, _ = _tracker(repo, [])
    result = asyncio.run(tracker.fetch_articles("aesthetic", FilterOptions(limit=4, category="Skincare")))
    assert len(result) == 4
    assert all(a.id.startswith("mock-aesthetic-") for a in result)
    assert {a.category for a in result} == {"Skincare"}


def test_external_error_is_filled_with_mock(repo):
    asyncio.run(repo.upsert_articles([_stored(1, source="IndustryWeekly"), _stored(2, source="IndustryWeekly"), _stored(3)]))
    tracker, _ = _tracker(repo, adapter=RaisingAdapter())
    result = asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=5, source="IndustryWeekly")))
    assert len(result) == 5
    assert [a.title for a in result[:2]] == ["Stored 1", "Stored 2"]
    mocks = result[2:]
    assert [a.id for a in mocks] == ["mock-dental-1", "mock-dental-2", "mock-dental-3"]
    assert {a.source for a in mocks} == {"IndustryWeekly"}


def test_identical_hits_produce_one_article(repo):
    tracker, _ = _tracker(repo, [_hit(1), _hit(1), _hit(2)])
    result = asyncio.run(tracker.acquire_external("dental", FilterOptions(limit=5)))
    assert sorted(a.url for a in result) == [_hit(1).url, _hit(2).url]
    assert tracker.scrape_chain.calls.count(_hit(1).url) == 1


def test_external_empty_keeps_store_rows(repo):
    asyncio.run(repo.upsert_articles([_stored(1), _stored(2)]))
    tracker, _ = _tracker(repo, [])
    result = asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=5)))
    assert [a.title for a in result] == ["Stored 1", "Stored 2"]


def test_store_read_failure_goes_external(temp_db):
    hits = [_hit(i) for i in range(1, 4)]
    tracker, backend = _tracker(BrokenReadRepo(temp_db), hits)
    result = asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=3, search_term="implants")))
    assert {a.url for a in result} == {h.url for h in hits}
    assert backend.calls[0] == ("dental industry news implants past week", 3)


def test_store_write_failure_is_swallowed(temp_db):
    tracker, _ = _tracker(BrokenWriteRepo(temp_db), [_hit(1)])
    result = asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=2)))
    assert [a.url for a in result] == ["https://www.dentistrytoday.com/1"]


def test_hit_only_article_when_scrape_fails(repo):
    hit = _hit(1, image_url="https://img.com/x.png", published_date=_ago(days=1))
    tracker, _ = _tracker(repo, [hit])
    article = asyncio.run(tracker.acquire_external("dental", FilterOptions(limit=1)))[0]
    assert article.summary == article.content == "desc 1"
    assert article.image_url == "https://img.com/x.png"
    assert article.author == "Unknown"
    assert parse_iso(article.published_date) == parse_iso(hit.published_date)


def test_acquired_articles_are_recent_and_sorted(repo):
    hits = [_hit(i) for i in range(1, 5)]
    details = {
        hits[0].url: ArticleDetails(published_date=_ago(days=5)),
        hits[1].url: ArticleDetails(published_date=_ago(days=30)),
        hits[2].url: ArticleDetails(published_date=_ago(hours=1)),
        hits[3].url: ArticleDetails(published_date="not a date"),
    }
    tracker, _ = _tracker(repo, hits, details)
    result = asyncio.run(tracker.acquire_external("dental", FilterOptions(limit=10)))
    cutoff = recency_cutoff(7)
    assert all(parse_iso(a.published_date) >= cutoff for a in result)
    assert hits[1].url not in {a.url for a in result}
    dates = [parse_iso(a.published_date) for a in result]
    assert dates == sorted(dates, reverse=True)


def test_length_never_exceeds_limit(repo):
    asyncio.run(repo.upsert_articles([_stored(i) for i in range(1, 4)]))
    tracker, _ = _tracker(repo, [_hit(i) for i in range(1, 30)])
    for limit in (1, 2, 3, 4, 8, 15):
        result = asyncio.run(tracker.fetch_articles("dental", FilterOptions(limit=limit)))
        assert len(result) <= limit
        assert len({a.url for a in result}) == len(result)


def test_refresh_warms_store(repo):
    tracker, _ = _tracker(repo, [_hit(1), _hit(2)])
    assert tracker.last_updated is None
    asyncio.run(tracker.refresh("dental", limit=5))
    assert tracker.last_updated is not None
    stored = asyncio.run(repo.query_articles("dental", recency_cutoff(7), 10))
    assert len(stored) == 2


def test_service_never_raises(temp_db):
    class DeadRepo(BrokenReadRepo):
        async def get_categories(self, industry):
            raise StoreError("x")

        async def get_sources(self, industry):
            raise StoreError("x")

        async def get_featured_articles(self, industry, limit):
            raise StoreError("x")

        async def get_trending_topics(self, industry, limit):
            raise StoreError("x")

        async def get_upcoming_events(self, industry, limit, today=None):
            raise StoreError("x")

    repo = DeadRepo(temp_db)
    tracker, _ = _tracker(repo, adapter=RaisingAdapter())
    service = NewsService(tracker, repo)

    assert len(asyncio.run(service.get_news_articles("dental", FilterOptions(limit=2)))) == 2
    assert asyncio.run(service.get_news_categories("dental")) == []
    assert asyncio.run(service.get_news_sources("dental")) == []
    assert asyncio.run(service.get_featured_news_articles("dental")) == []
    assert asyncio.run(service.get_trending_topics("dental")) == []
    assert asyncio.run(service.get_upcoming_events("dental")) == []
