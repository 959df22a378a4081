import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "Unknown Source"


def _host(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.hostname:
        raise ValueError(f"Invalid URL: {url!r}")
    return parsed.hostname


def resolve_source(url: str) -> str:
    """Nome legível da fonte a partir do domínio: https://www.dentistrytoday.com/x -> Dentistrytoday."""
    try:
        hostname = _host(url)
    except (TypeError, ValueError) as e:
        logger.debug(f"Could not determine source from URL: {e}")
        return UNKNOWN_SOURCE

    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    parts = hostname.split(".")
    if len(parts) >= 2:
        name = parts[-2]
        return name[:1].upper() + name[1:]
    return hostname


def absolutize(path: str, base_url: str) -> str:
    """Resolve '/img/x.png' contra scheme+host de base_url. Mantém o path se base_url for inválida."""
    if not path or not path.startswith("/"):
        return path
    try:
        parsed = urlparse(base_url)
        hostname = _host(base_url)
    except (TypeError, ValueError) as e:
        logger.warning(f"Error creating absolute URL for {path}: {e}")
        return path
    if path.startswith("//"):
        # protocol-relative (//cdn.site.com/a.png)
        return f"{parsed.scheme}:{path}"
    return f"{parsed.scheme}://{parsed.netloc or hostname}{path}"
