from .base import SearchBackend, SearchBackendError, ToolCaller
from .brave import BraveSearchBackend
from .firecrawl import FirecrawlSearchBackend
from .adapter import SearchAdapter, build_search_query
from .scrapers import DetailScraper, FirecrawlScraper, HttpScraper, ScrapeChain, ScrapeError

__all__ = [
    "SearchBackend",
    "SearchBackendError",
    "ToolCaller",
    "BraveSearchBackend",
    "FirecrawlSearchBackend",
    "SearchAdapter",
    "build_search_query",
    "DetailScraper",
    "FirecrawlScraper",
    "HttpScraper",
    "ScrapeChain",
    "ScrapeError",
]
