"""
Pydantic schemas for tags.

Tag names are unique ignoring case.  Articles refer to tags by name,
so tag responses can be augmented with how many articles currently
carry that name.
"""

from typing import Optional

from pydantic import field_validator

from .common import CamelModel, clean_text

DEFAULT_TAG_COLOR = "#3B82F6"


class TagCreate(CamelModel):
    """Schema for creating a tag.  ``name`` is required."""

    name: Optional[str] = None
    description: Optional[str] = ""
    color: Optional[str] = None

    @field_validator("name", "description", "color", mode="before")
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)


class TagUpdate(CamelModel):
    """Schema for updating a tag.

    All fields are optional; a blank name or color is ignored.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator("name", "description", "color", mode="before")
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)


class TagRead(CamelModel):
    id: int
    name: str
    description: str
    color: str
    created_at: str
    updated_at: str


class TagWithCount(TagRead):
    article_count: int


class PopularTag(CamelModel):
    """A tag name in use on articles, with its tag record if one exists."""

    name: str
    count: int
    tag_info: Optional[TagRead] = None
