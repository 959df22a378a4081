import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from market_news.config import NewsSettings
from market_news.storage.models import FilterOptions, Industry
from market_news.tracker.news_service import build_service
from market_news.utils.log_utils import setup_logging

# Carrega configuração (.env + ambiente)
settings = NewsSettings.from_env()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

service = build_service(settings)
session_start_time = int(time.time())

# Scheduler com configurações para evitar empilhamento de jobs
scheduler = AsyncIOScheduler(
    job_defaults={
        "coalesce": True,         # junta execuções atrasadas
        "max_instances": 1,       # não roda dois iguais ao mesmo tempo
        "misfire_grace_time": 30, # 30s de tolerância
    }
)


async def refresh_all_industries():
    total = 0
    for industry in Industry:
        articles = await service.tracker.refresh(industry.value)
        total += len(articles)
    logger.info(f"All industries refreshed ({total} new articles).")
    return {"status": "success", "acquired": total}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Primeira execução imediata para aquecer o store, depois a cada N minutos
    scheduler.add_job(
        refresh_all_industries,
        "interval",
        minutes=settings.refresh_interval_minutes,
        id="refresh_news",
        next_run_time=datetime.now(timezone.utc),
    )
    scheduler.start()
    yield
    scheduler.shutdown(wait=False)


def _ok(items):
    return {"status": "success", "data": [i.model_dump() for i in items]}


#%% APP

app = FastAPI(lifespan=lifespan)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # ajuste se precisar restringir
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Compressão gzip para reduzir payloads de /news/*
app.add_middleware(GZipMiddleware, minimum_size=512)


@app.get("/health")
def health():
    return {"status": "ok", "ts": int(time.time())}


@app.get("/industries")
def get_industries():
    return {"status": "success", "data": [i.value for i in Industry]}


@app.get("/last-update")
def last_update():
    resp = JSONResponse({
        "status": "success",
        "last_update": service.tracker.last_updated or session_start_time,
    })
    resp.headers["Cache-Control"] = "public, max-age=5"
    return resp


@app.get("/news/{industry}/articles")
async def news_articles(
    industry: Industry,
    limit: int = Query(10, ge=0, le=50),
    category: Optional[str] = None,
    source: Optional[str] = None,
    search_term: Optional[str] = None,
):
    options = FilterOptions(limit=limit, category=category, source=source, search_term=search_term)
    return _ok(await service.get_news_articles(industry.value, options))


@app.get("/news/{industry}/categories")
async def news_categories(industry: Industry):
    return _ok(await service.get_news_categories(industry.value))


@app.get("/news/{industry}/sources")
async def news_sources(industry: Industry):
    return _ok(await service.get_news_sources(industry.value))


@app.get("/news/{industry}/featured")
async def news_featured(industry: Industry, limit: int = Query(3, ge=0, le=50)):
    return _ok(await service.get_featured_news_articles(industry.value, limit))


@app.get("/news/{industry}/trending")
async def news_trending(industry: Industry, limit: int = Query(5, ge=0, le=50)):
    return _ok(await service.get_trending_topics(industry.value, limit))


@app.get("/news/{industry}/events")
async def news_events(industry: Industry, limit: int = Query(5, ge=0, le=50)):
    return _ok(await service.get_upcoming_events(industry.value, limit))


# POST
@app.post("/force-update")
async def force_update():
    return await refresh_all_industries()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("market_news.api.main:app", host="0.0.0.0", port=8000, reload=True)
