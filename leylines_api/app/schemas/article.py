"""
Pydantic schemas for articles.

An article is a named board holding post-it notes.  It carries a list
of tag names (a denormalized reference to ``tags.name``), a version
counter bumped on every update, and a published flag.
"""

from typing import List, Optional

from pydantic import Field, field_validator

from .common import CamelModel, Pagination, clean_text
from .postit import PostItRead


def normalize_tags(value):
    """Trim tag names, drop blanks and collapse duplicates keeping order."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise ValueError("Tags must be provided as an array")
    seen = set()
    tags: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Each tag must be a string")
        name = item.strip()
        if name and name not in seen:
            seen.add(name)
            tags.append(name)
    return tags


class ArticleCreate(CamelModel):
    """Schema for creating an article.

    Every field is optional.  A blank title is replaced with the new
    article's id once it has been stored.
    """

    title: Optional[str] = Field("", description="Board title; defaults to the generated id")
    content: Optional[str] = ""
    summary: Optional[str] = ""
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False

    @field_validator("title", "content", "summary", mode="before")
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v):
        return normalize_tags(v) or []


class ArticleUpdate(CamelModel):
    """Schema for updating an article.

    All fields are optional; only provided values are merged.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

    @field_validator("title", "content", "summary", mode="before")
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v):
        return normalize_tags(v)


class ArticleTags(CamelModel):
    """Body of the add/remove tag endpoints."""

    tags: List[str]

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v):
        return normalize_tags(v)


class ArticleRead(CamelModel):
    """Schema for reading an article."""

    id: int
    title: str
    content: str
    summary: str
    tags: List[str]
    created_at: str
    updated_at: str
    version: int
    is_published: bool


class ArticleList(CamelModel):
    articles: List[ArticleRead]
    pagination: Pagination


class ArticleBoard(CamelModel):
    """All post-its of one article, as loaded by the board page."""

    article_id: int
    article_title: str
    postits: List[PostItRead]
    count: int
