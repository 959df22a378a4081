import re
from typing import Dict, List

GENERAL_CATEGORY = "General"

# Ordem das categorias importa: em empate vence a primeira
DENTAL_CATEGORIES: Dict[str, List[str]] = {
    "Technology": ["technology", "digital", "software", "ai", "artificial intelligence", "machine learning", "innovation", "tech"],
    "Business": ["business", "market", "industry", "revenue", "growth", "acquisition", "merger", "investment"],
    "Clinical": ["clinical", "treatment", "procedure", "patient", "care", "therapy", "diagnosis", "health"],
    "Education": ["education", "training", "course", "certification", "degree", "student", "learning", "school"],
    "Research": ["research", "study", "trial", "investigation", "discovery", "science", "scientific", "development"],
    "Regulation": ["regulation", "compliance", "law", "legal", "fda", "approval", "guideline", "standard"],
}

AESTHETIC_CATEGORIES: Dict[str, List[str]] = {
    "Technology": ["technology", "digital", "software", "ai", "artificial intelligence", "machine learning", "innovation", "tech"],
    "Business": ["business", "market", "industry", "revenue", "growth", "acquisition", "merger", "investment"],
    "Treatments": ["treatment", "procedure", "injection", "filler", "botox", "laser", "surgery", "therapy"],
    "Skincare": ["skin", "skincare", "cream", "serum", "moisturizer", "cleanser", "anti-aging", "wrinkle"],
    "Wellness": ["wellness", "health", "lifestyle", "nutrition", "diet", "exercise", "holistic", "natural"],
    "Trends": ["trend", "popular", "celebrity", "influencer", "social media", "instagram", "tiktok", "viral"],
}


class NewsClassifier:
    """
    Classifica textos de notícia numa taxonomia fixa por indústria.
    Conta ocorrências (palavra inteira, sem diferenciar maiúsculas) das keywords
    de cada categoria; a categoria com maior contagem vence.
    """

    def __init__(self):
        self.taxonomies = {
            "dental": self._compile(DENTAL_CATEGORIES),
            "aesthetic": self._compile(AESTHETIC_CATEGORIES),
        }

    @staticmethod
    def _compile(categories: Dict[str, List[str]]) -> Dict[str, List[re.Pattern]]:
        return {
            name: [re.compile(rf"\b{re.escape(kw)}\b", re.IGNORECASE) for kw in keywords]
            for name, keywords in categories.items()
        }

    def categories_for(self, industry: str) -> List[str]:
        return list(self._taxonomy(industry).keys())

    def _taxonomy(self, industry: str) -> Dict[str, List[re.Pattern]]:
        # Qualquer coisa que não seja dental usa a taxonomia estética
        if (industry or "").lower() == "dental":
            return self.taxonomies["dental"]
        return self.taxonomies["aesthetic"]

    def score(self, text: str, industry: str) -> Dict[str, int]:
        text = text or ""
        return {
            name: sum(len(p.findall(text)) for p in patterns)
            for name, patterns in self._taxonomy(industry).items()
        }

    def classify(self, text: str, industry: str) -> str:
        best, best_count = GENERAL_CATEGORY, 0
        for name, count in self.score(text, industry).items():
            if count > best_count:
                best, best_count = name, count
        return best
