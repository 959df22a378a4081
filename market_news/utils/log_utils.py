import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Bibliotecas barulhentas (scrape de páginas quebradas gera muito ruído)
_NOISY_LOGGERS = ("trafilatura", "httpx", "httpcore", "apscheduler.executors.default")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
