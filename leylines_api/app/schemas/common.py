"""
Shared schema pieces.

``CamelModel`` makes every schema speak camelCase on the wire while
the Python side keeps snake_case attribute names.  Request bodies are
accepted in either form.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class Pagination(CamelModel):
    """Page metadata returned alongside paginated lists."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = (total + limit - 1) // limit if limit else 0
        return cls(page=page, limit=limit, total=total, pages=pages)


class MessageResponse(CamelModel):
    message: str


def clean_text(value):
    """Strip surrounding whitespace from optional text fields."""
    if isinstance(value, str):
        return value.strip()
    return value
