"""
Tag endpoints for the API.

Static paths (``/popular``, ``/name/{name}``) are declared before the
``/{tag_id}`` routes so they are matched first.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from leylines_api.app.core.errors import NotFoundException
from leylines_api.app.schemas.common import MessageResponse
from leylines_api.app.schemas.tag import PopularTag, TagCreate, TagRead, TagUpdate
from leylines_api.app.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=None)
async def list_tags(
    search: Optional[str] = Query(None),
    sort_by: str = Query("name", alias="sortBy"),
    with_count: bool = Query(False, alias="withCount"),
):
    """List tags.

    With ``withCount=true`` every tag carries ``articleCount`` and the
    search/sort parameters are ignored.
    """
    if with_count:
        return await TagService.list_with_article_count()
    return await TagService.list_tags(search=search or None, sort_by=sort_by)


@router.get("/popular", response_model=List[PopularTag])
async def popular_tags(limit: int = Query(10, ge=1, le=100)) -> List[PopularTag]:
    """Most used tag names, most used first."""
    return await TagService.popular_tags(limit=limit)


@router.get("/name/{name}", response_model=TagRead)
async def get_tag_by_name(name: str) -> TagRead:
    """Look a tag up by name, ignoring case."""
    tag = await TagService.find_by_name(name)
    if tag is None:
        raise NotFoundException("Tag not found")
    return tag


@router.post("", response_model=TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(tag_in: TagCreate) -> TagRead:
    """Create a tag.  Returns 409 when the name exists ignoring case."""
    return await TagService.create_tag(tag_in)


@router.get("/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: str) -> TagRead:
    return await TagService.get_tag(tag_id)


@router.put("/{tag_id}", response_model=TagRead)
async def update_tag(tag_id: str, tag_in: TagUpdate) -> TagRead:
    return await TagService.update_tag(tag_id, tag_in)


@router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag(tag_id: str) -> MessageResponse:
    """Delete a tag and strip its name from every article."""
    await TagService.delete_tag(tag_id)
    return MessageResponse(message="Tag deleted successfully")
