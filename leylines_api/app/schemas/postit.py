"""
Pydantic schemas for post-it notes.

A post-it belongs to exactly one article and is laid out on the board
by its ``position``: top-left corner, size and stacking order.
"""

from typing import List, Optional, Union

from pydantic import Field, field_validator

from .common import CamelModel, Pagination, clean_text

DEFAULT_POSTIT_COLOR = "#FBBF24"
DEFAULT_POSTIT_CONTENT = "New note..."
DEFAULT_WIDTH = 200.0
DEFAULT_HEIGHT = 150.0
DEFAULT_Z_INDEX = 1

# z_index is stored in an SQLite INTEGER column.
MIN_Z_INDEX = -(2**63)
MAX_Z_INDEX = 2**63 - 1


class Position(CamelModel):
    """A fully resolved board position."""

    x: float = 0
    y: float = 0
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    z_index: int = Field(DEFAULT_Z_INDEX, ge=MIN_Z_INDEX, le=MAX_Z_INDEX)


class PositionInput(CamelModel):
    """A position as sent by clients; any field may be left out."""

    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    z_index: Optional[int] = Field(None, ge=MIN_Z_INDEX, le=MAX_Z_INDEX)

    def resolve(self) -> Position:
        """Fill missing fields with the default layout."""
        return Position(**self.model_dump(exclude_none=True))

    def merge_into(self, current: Position) -> Position:
        """Overlay the provided fields on an existing position."""
        return current.model_copy(update=self.model_dump(exclude_none=True))


class PostItCreate(CamelModel):
    """Schema for creating a post-it.

    ``content`` and ``article_id`` are required; the service rejects the
    request when either is missing or blank.
    """

    content: Optional[str] = None
    article_id: Optional[Union[int, str]] = None
    position: Optional[PositionInput] = None
    color: Optional[str] = None

    @field_validator("content", "color", mode="before")
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)


class PostItUpdate(CamelModel):
    """Schema for updating a post-it.

    Blank content and empty colors are ignored; a position is merged
    over the stored one.
    """

    content: Optional[str] = None
    position: Optional[PositionInput] = None
    color: Optional[str] = None

    @field_validator("content", "color", mode="before")
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)


class PositionUpdate(CamelModel):
    """Body of ``PATCH /postits/{id}/position``."""

    position: PositionInput


class BulkPositionItem(CamelModel):
    id: Union[int, str]
    position: PositionInput


class BulkPositionUpdate(CamelModel):
    updates: List[BulkPositionItem]


class BulkUpdateResult(CamelModel):
    """Outcome of a bulk position update.

    ``failed_ids`` lists the ids that were malformed or matched no
    post-it, exactly as they were submitted.
    """

    message: str
    modified_count: int
    failed_ids: List[Union[int, str]] = Field(default_factory=list)


class PostItRead(CamelModel):
    """Schema for reading a post-it."""

    id: int
    article_id: int
    content: str
    position: Position
    color: str
    created_at: str
    updated_at: str


class PostItList(CamelModel):
    postits: List[PostItRead]
    pagination: Pagination
