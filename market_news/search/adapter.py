import logging
import random
from typing import List, Optional, Sequence

from market_news.config import SearchStrategy
from market_news.search.base import SearchBackend, SearchBackendError
from market_news.storage.models import SearchHit

logger = logging.getLogger(__name__)

RECENCY_HINT = "past week"


def build_search_query(
    industry: str,
    category: Optional[str] = None,
    source: Optional[str] = None,
    search_term: Optional[str] = None,
) -> str:
    """'dental industry news Technology DentistryToday implants past week' (partes vazias são puladas)."""
    parts = [f"{industry} industry news", category, source, search_term, RECENCY_HINT]
    return " ".join(p.strip() for p in parts if p and p.strip())


class SearchAdapter:
    """
    Fachada sobre os backends de busca.
    - ordered: tenta na ordem configurada até algum trazer resultado
    - random: sorteia um backend disponível por chamada (rng injetável)
    Nunca levanta exceção: backend indisponível ou com falha vira [].
    """

    def __init__(
        self,
        backends: Sequence[SearchBackend],
        strategy: SearchStrategy = SearchStrategy.ordered,
        rng: Optional[random.Random] = None,
    ):
        self.backends: List[SearchBackend] = list(backends)
        self.strategy = SearchStrategy(strategy)
        self.rng = rng or random.Random()

    def available_backends(self) -> List[SearchBackend]:
        return [b for b in self.backends if b.available]

    async def _run(self, backend: SearchBackend, query: str, count: int) -> List[SearchHit]:
        try:
            return await backend.search(query, count)
        except SearchBackendError as e:
            logger.warning(f"Search backend '{backend.name}' failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error in search backend '{backend.name}': {e}")
        return []

    async def search(self, query: str, count: int) -> List[SearchHit]:
        if count <= 0:
            return []

        candidates = self.available_backends()
        if not candidates:
            logger.warning("No search backend available; skipping external search")
            return []

        if self.strategy == SearchStrategy.random:
            backend = self.rng.choice(candidates)
            logger.info(f"Using search backend '{backend.name}' (random)")
            return await self._run(backend, query, count)

        for backend in candidates:
            hits = await self._run(backend, query, count)
            if hits:
                logger.info(f"Search backend '{backend.name}' returned {len(hits)} hits")
                return hits
            logger.info(f"Search backend '{backend.name}' returned nothing, trying next")
        return []
