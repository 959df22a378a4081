from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_RECENCY_DAYS = 7

# Formatos aceitos para datas "soltas" extraídas de texto
_TEXT_DATE_FORMATS = (
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y-%m-%d",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return utc_now().isoformat()


def parse_iso(ts: Optional[str]) -> Optional[datetime]:
    """Converte string ISO em datetime com timezone (UTC se vier sem tz)."""
    if not ts:
        return None
    try:
        dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def parse_text_date(text: str) -> Optional[datetime]:
    """Tenta 'January 5, 2024', '5 January 2024', '2024-01-05'... Retorna UTC ou None."""
    cleaned = " ".join(text.replace(",", ", ").split()).replace(" ,", ",")
    for fmt in _TEXT_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def recency_cutoff(days: int = DEFAULT_RECENCY_DAYS, now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) - timedelta(days=days)


def is_recent(published: Optional[str], days: int = DEFAULT_RECENCY_DAYS, now: Optional[datetime] = None) -> bool:
    dt = parse_iso(published)
    if dt is None:
        return False
    return dt >= recency_cutoff(days, now)
