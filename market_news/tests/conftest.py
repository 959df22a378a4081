# market_news/tests/conftest.py
import random

import pytest

from market_news.config import NewsSettings
from market_news.storage.repository import JsonNewsRepository


@pytest.fixture()
def temp_db(tmp_path):
    # Store em arquivo temporário (ainda não existe: o repositório cria sob demanda)
    return str(tmp_path / "market_news.json")


@pytest.fixture()
def repo(temp_db):
    return JsonNewsRepository(temp_db)


@pytest.fixture()
def settings(temp_db):
    # Sem backends: nenhum teste sai para a rede
    return NewsSettings(db_path=temp_db, backend_order=[])


@pytest.fixture()
def app(monkeypatch, settings):
    # Patches para impedir network/scheduler no startup
    from market_news.api import main as api_main
    from market_news.tracker.news_service import build_service

    # 1) refresh: no-op
    async def fake_refresh():
        return {"status": "success", "acquired": 0}
    monkeypatch.setattr(api_main, "refresh_all_industries", fake_refresh, raising=True)

    # 2) scheduler.start/shutdown: no-op
    class DummyScheduler:
        def add_job(self, *a, **k): pass
        def start(self): pass
        def shutdown(self, wait=False): pass
    monkeypatch.setattr(api_main, "scheduler", DummyScheduler(), raising=True)

    # 3) serviço apontando para o store temporário, mock determinístico
    service = build_service(settings, rng=random.Random(42))
    monkeypatch.setattr(api_main, "service", service, raising=True)

    return api_main.app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    # Usa contexto para garantir lifespan mas com patches aplicados
    with TestClient(app) as c:
        yield c
