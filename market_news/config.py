import os
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Environment(str, Enum):
    development = "development"
    production = "production"


class SearchStrategy(str, Enum):
    ordered = "ordered"   # tenta os backends em sequência até um trazer resultado
    random = "random"     # sorteia um backend por chamada


DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "storage", "data", "market_news.json")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [p.strip().lower() for p in raw.split(",") if p.strip()]


class SearchConfig(BaseModel):
    """Configuração injetada no adapter de busca (sem flags globais)."""
    environment: Environment = Environment.development
    search_backend_enabled: bool = True  # libera o backend de dev (firecrawl)
    api_key: Optional[str] = None        # chave da Brave Search API

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.production


class NewsSettings(BaseModel):
    search: SearchConfig = Field(default_factory=SearchConfig)
    recency_days: int = Field(default=7, ge=1)
    default_limit: int = Field(default=10, ge=0)
    scrape_timeout_seconds: float = Field(default=15.0, gt=0)
    search_strategy: SearchStrategy = SearchStrategy.ordered
    backend_order: List[str] = Field(default_factory=lambda: ["firecrawl", "brave"])
    db_path: str = DEFAULT_DB_PATH
    refresh_interval_minutes: int = Field(default=60, ge=1)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env: bool = True, dotenv_override: bool = True) -> "NewsSettings":
        """Monta a configuração a partir do ambiente (e do .env, se houver)."""
        if load_env:
            load_dotenv(override=dotenv_override)

        env_name = (os.getenv("MARKET_NEWS_ENV") or "development").strip().lower()
        environment = Environment.production if env_name in ("prod", "production") else Environment.development
        api_key = os.getenv("BRAVE_SEARCH_API_KEY") or os.getenv("VITE_BRAVE_SEARCH_API_KEY") or None

        return cls(
            search=SearchConfig(
                environment=environment,
                search_backend_enabled=_env_bool("FIRECRAWL_ENABLED", True),
                api_key=api_key,
            ),
            recency_days=int(os.getenv("NEWS_RECENCY_DAYS", "7")),
            default_limit=int(os.getenv("NEWS_DEFAULT_LIMIT", "10")),
            scrape_timeout_seconds=float(os.getenv("NEWS_SCRAPE_TIMEOUT", "15")),
            search_strategy=SearchStrategy(os.getenv("NEWS_SEARCH_STRATEGY", "ordered").strip().lower()),
            backend_order=_env_list("NEWS_BACKEND_ORDER", ["firecrawl", "brave"]),
            db_path=os.getenv("NEWS_DB_PATH") or DEFAULT_DB_PATH,
            refresh_interval_minutes=int(os.getenv("NEWS_REFRESH_MINUTES", "60")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
