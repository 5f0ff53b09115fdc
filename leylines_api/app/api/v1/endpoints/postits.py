"""
Post-it endpoints for the API.

Besides CRUD these routes serve the board's drag interactions: a
position-only update, bring-to-front and a bulk move.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from leylines_api.app.core.config import settings
from leylines_api.app.schemas.common import MessageResponse
from leylines_api.app.schemas.postit import (
    BulkPositionUpdate,
    BulkUpdateResult,
    PositionUpdate,
    PostItCreate,
    PostItList,
    PostItRead,
    PostItUpdate,
)
from leylines_api.app.services.postit_service import PostItService

router = APIRouter()


@router.get("", response_model=PostItList)
async def list_postits(
    page: int = Query(1, ge=1, le=1_000_000),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    article_id: Optional[str] = Query(None, alias="articleId"),
) -> PostItList:
    """Return a page of post-its in stacking order."""
    return await PostItService.list_postits(
        page=page,
        limit=limit or settings.postit_page_size,
        article_id=article_id,
    )


@router.post("", response_model=PostItRead, status_code=status.HTTP_201_CREATED)
async def create_postit(postit_in: PostItCreate) -> PostItRead:
    """Create a post-it on an existing article.

    Returns 400 when content or articleId is missing and 404 when the
    article does not exist.
    """
    return await PostItService.create_postit(postit_in)


@router.post("/bulk-update-positions", response_model=BulkUpdateResult)
async def bulk_update_positions(body: BulkPositionUpdate) -> BulkUpdateResult:
    """Move many post-its at once.

    Each update is independent.  Ids that are malformed or unknown are
    returned in ``failedIds`` instead of failing the request.
    """
    if not body.updates:
        return BulkUpdateResult(message="No updates provided", modified_count=0)
    modified, failed = await PostItService.bulk_update_positions(body.updates)
    return BulkUpdateResult(
        message=f"{modified} post-its updated successfully",
        modified_count=modified,
        failed_ids=failed,
    )


@router.get("/{postit_id}", response_model=PostItRead)
async def get_postit(postit_id: str) -> PostItRead:
    return await PostItService.get_postit(postit_id)


@router.put("/{postit_id}", response_model=PostItRead)
async def update_postit(postit_id: str, postit_in: PostItUpdate) -> PostItRead:
    return await PostItService.update_postit(postit_id, postit_in)


@router.patch("/{postit_id}/position", response_model=PostItRead)
async def update_postit_position(postit_id: str, body: PositionUpdate) -> PostItRead:
    """Replace the position of a dragged post-it."""
    return await PostItService.update_position(postit_id, body.position)


@router.post("/{postit_id}/bring-to-front", response_model=PostItRead)
async def bring_postit_to_front(postit_id: str) -> PostItRead:
    return await PostItService.bring_to_front(postit_id)


@router.delete("/{postit_id}", response_model=MessageResponse)
async def delete_postit(postit_id: str) -> MessageResponse:
    await PostItService.delete_postit(postit_id)
    return MessageResponse(message="Post-it deleted successfully")
