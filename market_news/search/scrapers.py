"""
Scrapers de detalhe: SearchHit -> ArticleDetails.

Cada scraper busca a página do hit e entrega markdown (e HTML, se houver) ao
extrator. O ScrapeChain tenta os scrapers em ordem, cada um com timeout
próprio; se todos falharem devolve None e quem chamou monta o artigo só com
os dados do hit.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import httpx
import trafilatura

from market_news.config import SearchConfig
from market_news.extractor.article_extractor import extract_details
from market_news.search.base import ToolCaller
from market_news.search.firecrawl import SCRAPE_TOOL, firecrawl_available
from market_news.storage.models import ArticleDetails, SearchHit

logger = logging.getLogger(__name__)

DEFAULT_SCRAPE_TIMEOUT = 15.0

_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class ScrapeError(Exception):
    """A página não pôde ser obtida ou não tinha conteúdo aproveitável."""


class DetailScraper(ABC):
    name: str = "base"

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    async def scrape(self, hit: SearchHit) -> ArticleDetails:
        pass


class FirecrawlScraper(DetailScraper):
    name = "firecrawl"

    def __init__(self, config: SearchConfig, tool_caller: Optional[ToolCaller] = None):
        self.config = config
        self.tool_caller = tool_caller

    @property
    def available(self) -> bool:
        return firecrawl_available(self.config, self.tool_caller)

    async def scrape(self, hit: SearchHit) -> ArticleDetails:
        if not self.available:
            raise ScrapeError("Firecrawl scrape is not available in this environment")

        args = {"url": hit.url, "formats": ["markdown", "html"], "onlyMainContent": True}
        try:
            response = await self.tool_caller(SCRAPE_TOOL, args)
        except Exception as e:
            raise ScrapeError(f"Firecrawl scrape failed for {hit.url}: {e}") from e

        # a tool pode devolver os campos na raiz ou dentro de "data"
        payload = (response or {}).get("data") or response or {}
        markdown = payload.get("markdown") if isinstance(payload, dict) else None
        if not markdown:
            raise ScrapeError(f"No markdown content for {hit.url}")
        return extract_details(markdown, hit.url, payload.get("html"))


class HttpScraper(DetailScraper):
    """Baixa a página com httpx e converte o corpo principal em markdown com trafilatura."""

    name = "http"

    def __init__(self, timeout: float = DEFAULT_SCRAPE_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def _to_markdown(html: str, url: str) -> Optional[str]:
        return trafilatura.extract(
            html,
            url=url,
            output_format="markdown",
            include_comments=False,
            include_images=True,
            favor_precision=True,
        )

    async def scrape(self, hit: SearchHit) -> ArticleDetails:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(hit.url, headers=_HEADERS, follow_redirects=True)
                resp.raise_for_status()
                html = resp.text
        except httpx.HTTPError as e:
            raise ScrapeError(f"HTTP fetch failed for {hit.url}: {e}") from e

        # parse do trafilatura é CPU; fora do loop
        markdown = await asyncio.to_thread(self._to_markdown, html, hit.url)
        if not markdown:
            raise ScrapeError(f"No extractable content for {hit.url}")
        return extract_details(markdown, hit.url, html)


class ScrapeChain:
    def __init__(self, scrapers: Sequence[DetailScraper], timeout: float = DEFAULT_SCRAPE_TIMEOUT):
        self.scrapers: List[DetailScraper] = list(scrapers)
        self.timeout = timeout

    async def details(self, hit: SearchHit) -> Optional[ArticleDetails]:
        for scraper in self.scrapers:
            if not scraper.available:
                continue
            try:
                return await asyncio.wait_for(scraper.scrape(hit), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Scraper '{scraper.name}' timed out after {self.timeout}s for {hit.url}")
            except ScrapeError as e:
                logger.warning(f"Scraper '{scraper.name}' failed: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error in scraper '{scraper.name}' for {hit.url}: {e}")
        return None
