import uuid
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Industry(str, Enum):
    dental = "dental"
    aesthetic = "aesthetic"


def _new_id() -> str:
    return uuid.uuid4().hex


class Article(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    summary: str = ""
    content: str = ""
    image_url: str = ""
    url: str  # chave única (upsert por url)
    published_date: str  # ISO-8601, UTC
    author: str = ""
    source: str = ""
    category: str = "General"
    industry: str
    featured: bool = False

    @field_validator("industry")
    @classmethod
    def _lower_industry(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        # linhas antigas do store podem ter id numérico
        return str(v)


class SearchHit(BaseModel):
    title: str = ""
    url: str
    description: str = ""
    image_url: Optional[str] = None
    published_date: Optional[str] = None


class ArticleDetails(BaseModel):
    summary: str = ""
    content: str = ""
    image_url: str = ""
    published_date: Optional[str] = None
    author: str = ""


class FilterOptions(BaseModel):
    limit: int = Field(default=10, ge=0)
    category: Optional[str] = None
    source: Optional[str] = None
    search_term: Optional[str] = None


# Registros de referência: pertencem ao store, o core só lê
class Category(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    name: str
    industry: str
    description: Optional[str] = None


class NewsSource(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    name: str
    industry: str
    url: Optional[str] = None
    description: Optional[str] = None


class TrendingTopic(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    topic: str
    industry: str
    popularity: int = 0


class IndustryEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    name: str
    industry: str
    start_date: str  # YYYY-MM-DD
    end_date: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None
