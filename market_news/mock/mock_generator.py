import random
import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from market_news.storage.models import Article
from market_news.utils.date_utils import utc_now

DENTAL_CATEGORIES = ["Technology", "Business", "Clinical", "Education", "Research", "Regulation"]
AESTHETIC_CATEGORIES = ["Technology", "Business", "Treatments", "Skincare", "Wellness", "Trends"]

SOURCES = ["DentistryToday", "MedicalNews", "HealthInsider", "IndustryWeekly", "TechMedica", "ClinicalJournal"]
AUTHORS = ["Dr. John Smith", "Sarah Johnson", "Michael Chen", "Emily Rodriguez", "David Wilson"]

TITLE_TEMPLATES = [
    "New [TECH] Revolutionizes [INDUSTRY] Industry",
    "Study Shows [PERCENTAGE]% Increase in [TREATMENT] Effectiveness",
    "Leading [INDUSTRY] Companies Announce Partnership",
    "[COMPANY] Launches Innovative [PRODUCT] for [INDUSTRY] Professionals",
    "Experts Predict [INDUSTRY] Market Growth of [PERCENTAGE]% by 2026",
    "Breakthrough in [TREATMENT] Technology Promises Better Patient Outcomes",
    "Regulatory Changes Impact [INDUSTRY] Practices Nationwide",
    "Survey Reveals Top [INDUSTRY] Trends for 2025",
    "[COMPANY] Acquires [COMPANY] in $[AMOUNT]M Deal",
    "New Research Highlights Benefits of [TREATMENT] Approach",
]

CONTENT_TEMPLATES = [
    "A recent development in [INDUSTRY] technology has shown promising results in clinical trials. Experts believe this could lead to significant improvements in patient care and treatment outcomes. Industry leaders are already investing in this technology, with market analysts predicting widespread adoption within the next two years.",
    "Market research indicates a growing trend in [INDUSTRY] practices, with more professionals adopting new techniques and technologies. Patient satisfaction rates have increased by [PERCENTAGE]%, and treatment times have decreased by [PERCENTAGE]%. This shift represents a significant evolution in how [INDUSTRY] care is delivered.",
    "Regulatory bodies have announced new guidelines for [INDUSTRY] practices, focusing on patient safety and treatment efficacy. These changes will require practitioners to update their protocols and potentially invest in new equipment. Industry associations are providing resources to help professionals adapt to these new requirements.",
    "A landmark study published in the Journal of [INDUSTRY] Medicine has revealed new insights into treatment methodologies. The research, conducted over a three-year period with [NUMBER] participants, demonstrates that innovative approaches can yield better long-term results for patients while reducing recovery time and complications.",
    "Industry leaders gathered at the annual [INDUSTRY] Conference to discuss emerging trends and challenges. Key topics included technological innovation, patient experience enhancement, and sustainable practice management. Attendees were particularly interested in new digital solutions that streamline administrative processes while improving clinical outcomes.",
]

TECHS = ["AI", "Machine Learning", "Digital Scanning", "Robotics", "Cloud Computing"]
DENTAL_TREATMENTS = ["Implant", "Orthodontic", "Periodontal", "Endodontic", "Cosmetic"]
AESTHETIC_TREATMENTS = ["Laser", "Injectable", "Surgical", "Non-invasive", "Dermal"]
COMPANIES = ["MediTech", "HealthPlus", "InnovaCare", "NextGen", "PrimeSolutions"]
PRODUCTS = ["System", "Solution", "Platform", "Device", "Software"]

MOCK_WINDOW_DAYS = 30
FEATURED_COUNT = 2
SUMMARY_CHARS = 150

_PLACEHOLDER = re.compile(r"\[([A-Z]+)\]")


class MockNewsGenerator:
    """
    Gera artigos sintéticos quando não há dado real nenhum.
    Determinístico dado o `rng` e o `clock` injetados (use random.Random(seed) nos testes).
    """

    def __init__(self, rng: Optional[random.Random] = None, clock: Optional[Callable[[], datetime]] = None):
        self.rng = rng or random.Random()
        self.clock = clock or utc_now

    def _fill(self, template: str, industry: str) -> str:
        treatments = DENTAL_TREATMENTS if industry == "dental" else AESTHETIC_TREATMENTS

        # cada ocorrência recebe um sorteio próprio
        def pick(match: re.Match) -> str:
            key = match.group(1)
            if key == "INDUSTRY":
                return industry
            if key == "TECH":
                return self.rng.choice(TECHS)
            if key == "PERCENTAGE":
                return str(self.rng.randint(20, 49))
            if key == "TREATMENT":
                return self.rng.choice(treatments)
            if key == "COMPANY":
                return self.rng.choice(COMPANIES)
            if key == "PRODUCT":
                return self.rng.choice(PRODUCTS)
            if key in ("AMOUNT", "NUMBER"):
                return str(self.rng.randint(100, 999))
            return match.group(0)

        return _PLACEHOLDER.sub(pick, template)

    def generate(
        self,
        industry: str,
        limit: int = 10,
        category: Optional[str] = None,
        source: Optional[str] = None,
    ) -> List[Article]:
        industry = (industry or "").lower()
        categories = DENTAL_CATEGORIES if industry == "dental" else AESTHETIC_CATEGORIES
        now = self.clock()
        # lote por chamada: urls de mock não colidem entre chamadas
        batch = f"{self.rng.getrandbits(32):08x}"

        articles: List[Article] = []
        for i in range(max(limit, 0)):
            article_category = category or self.rng.choice(categories)
            article_source = source or self.rng.choice(SOURCES)
            published = now - timedelta(days=self.rng.randrange(MOCK_WINDOW_DAYS))

            title = self._fill(self.rng.choice(TITLE_TEMPLATES), industry)
            content = self._fill(self.rng.choice(CONTENT_TEMPLATES), industry)
            slug = re.sub(r"[^a-z0-9]", "", article_source.lower()) or "news"

            articles.append(Article(
                id=f"mock-{industry}-{i + 1}",
                title=title,
                summary=content[:SUMMARY_CHARS] + "...",
                content=content,
                image_url="",
                url=f"https://www.{slug}.com/news/{industry}/{batch}-{i + 1}",
                published_date=published.isoformat(),
                author=self.rng.choice(AUTHORS),
                source=article_source,
                category=article_category,
                industry=industry,
                featured=i < FEATURED_COUNT,
            ))
        return articles
