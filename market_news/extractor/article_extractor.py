"""
Extração de campos estruturados (imagem, resumo, data, autor) a partir do
conteúdo bruto de uma página já raspada (markdown e, opcionalmente, HTML).

Nenhum campo ausente é erro: todos têm default.
"""
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from market_news.storage.models import ArticleDetails
from market_news.utils.date_utils import now_iso, parse_text_date
from market_news.utils.url_utils import absolutize

logger = logging.getLogger(__name__)

SUMMARY_MIN_CHARS = 100
SUMMARY_MAX_CHARS = 500
SUMMARY_FALLBACK_CHARS = 200

_MARKDOWN_IMAGE = re.compile(r"!\[.*?\]\((https?://[^)\s]+)\)")

_MONTH_DAY_YEAR = r"([A-Za-z]+\s+\d{1,2},?\s+\d{4})"
# Ordem = prioridade
_DATE_PATTERNS = [
    re.compile(r"published(?:\s+on)?:\s*" + _MONTH_DAY_YEAR, re.IGNORECASE),
    re.compile(r"date:\s*" + _MONTH_DAY_YEAR, re.IGNORECASE),
    re.compile(r"posted(?:\s+on)?:\s*" + _MONTH_DAY_YEAR, re.IGNORECASE),
    re.compile(r"(\d{1,2}\s+[A-Za-z]+\s+\d{4})"),
    re.compile(_MONTH_DAY_YEAR),
    re.compile(r"(\d{4}-\d{2}-\d{2})"),
]

_NAME = r"([A-Za-z][A-Za-z .]*?)"
_NAME_END = r"(?=\s*,|\s+on\b|\s+\||\n|$)"
_AUTHOR_PATTERNS = [
    re.compile(r"\bby\s+" + _NAME + _NAME_END, re.IGNORECASE),
    re.compile(r"\bauthor(?:\s*:|s?)\s+" + _NAME + _NAME_END, re.IGNORECASE),
    re.compile(r"\bwritten by\s+" + _NAME + _NAME_END, re.IGNORECASE),
    re.compile(r"\bcontributor:\s+" + _NAME + _NAME_END, re.IGNORECASE),
]


def _first_group(patterns: List[re.Pattern], text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1)
    return None


def extract_image(content: str, source_url: str, html: Optional[str] = None) -> str:
    soup = BeautifulSoup(html, "html.parser") if html else None
    if soup is not None:
        og_tag = soup.find("meta", attrs={"property": "og:image"})
        if og_tag and og_tag.get("content"):
            return absolutize(og_tag["content"].strip(), source_url)

    md_match = _MARKDOWN_IMAGE.search(content)
    if md_match:
        return md_match.group(1)

    if soup is not None:
        # primeira <img> com src de fato (ignora data-src de lazy-load)
        for img in soup.find_all("img"):
            if img.get("src"):
                return absolutize(img["src"].strip(), source_url)
    return ""


def extract_summary(content: str) -> str:
    if not content:
        return ""
    for paragraph in content.split("\n\n"):
        if SUMMARY_MIN_CHARS < len(paragraph) < SUMMARY_MAX_CHARS and not paragraph.startswith("#"):
            return paragraph
    return content[:SUMMARY_FALLBACK_CHARS].replace("\n", " ") + "..."


def extract_published_date(content: str) -> str:
    # Primeiro padrão com data parseável vence; sem data -> agora
    for pattern in _DATE_PATTERNS:
        for match in pattern.finditer(content):
            parsed = parse_text_date(match.group(1))
            if parsed:
                return parsed.isoformat()
            logger.debug(f"Failed to parse date: {match.group(1)}")
    return now_iso()


def extract_author(content: str) -> str:
    author = _first_group(_AUTHOR_PATTERNS, content)
    return author.strip() if author else ""


def extract_details(raw_markdown: str, source_url: str, raw_html: Optional[str] = None) -> ArticleDetails:
    content = raw_markdown or ""
    return ArticleDetails(
        summary=extract_summary(content),
        content=content,
        image_url=extract_image(content, source_url, raw_html),
        published_date=extract_published_date(content),
        author=extract_author(content),
    )
