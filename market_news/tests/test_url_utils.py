# market_news/tests/test_url_utils.py
from market_news.utils.url_utils import absolutize, resolve_source


def test_resolve_source():
    assert resolve_source("https://www.dentistrytoday.com/article/1") == "Dentistrytoday"
    assert resolve_source("https://news.medical-news.co.uk/x") == "Co"
    assert resolve_source("https://example.org") == "Example"


def test_resolve_source_single_label_host():
    assert resolve_source("http://localhost:8000/x") == "localhost"


def test_resolve_source_invalid():
    assert resolve_source("not a url") == "Unknown Source"
    assert resolve_source("") == "Unknown Source"


def test_absolutize():
    base = "https://www.site.com/news/a"
    assert absolutize("/img/a.png", base) == "https://www.site.com/img/a.png"
    assert absolutize("//cdn.site.com/a.png", base) == "https://cdn.site.com/a.png"
    assert absolutize("https://other.com/a.png", base) == "https://other.com/a.png"


def test_absolutize_bad_base_keeps_path():
    assert absolutize("/img/a.png", "nonsense") == "/img/a.png"
