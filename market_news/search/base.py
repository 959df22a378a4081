from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List

from market_news.storage.models import SearchHit

# Capacidade opcional de "tool call" do ambiente de dev: (nome_da_tool, argumentos) -> resposta
ToolCaller = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]


class SearchBackendError(Exception):
    """Falha de um backend de busca (rede, HTTP, payload inesperado)."""


class SearchBackend(ABC):
    name: str = "base"
    max_results: int = 10

    @property
    @abstractmethod
    def available(self) -> bool:
        ...

    @abstractmethod
    async def search(self, query: str, count: int) -> List[SearchHit]:
        pass
