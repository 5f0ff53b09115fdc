"""
Article endpoints for the API.

These routes expose CRUD for articles (boards), tag membership and the
list of post-its that make up a board.  Service errors are mapped to
HTTP status codes by the handlers in ``core.errors``.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from leylines_api.app.core.config import settings
from leylines_api.app.schemas.article import (
    ArticleBoard,
    ArticleCreate,
    ArticleList,
    ArticleRead,
    ArticleTags,
    ArticleUpdate,
)
from leylines_api.app.schemas.common import MessageResponse
from leylines_api.app.services.article_service import ArticleService
from leylines_api.app.services.postit_service import PostItService

router = APIRouter()


@router.get("", response_model=ArticleList)
async def list_articles(
    page: int = Query(1, ge=1, le=1_000_000),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    tags: Optional[str] = Query(None, description="Comma-separated tag names"),
    search: Optional[str] = Query(None, description="Substring of title or content"),
) -> ArticleList:
    """Return a page of articles, most recently updated first.

    - **tags** keeps articles carrying at least one of the given names.
    - **search** matches title or content ignoring case.
    """
    tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else None
    return await ArticleService.list_articles(
        page=page,
        limit=limit or settings.default_page_size,
        tags=tag_list,
        search=search or None,
    )


@router.post("", response_model=ArticleRead, status_code=status.HTTP_201_CREATED)
async def create_article(article_in: ArticleCreate) -> ArticleRead:
    """Create an article.  A blank title becomes the article's id."""
    return await ArticleService.create_article(article_in)


@router.post("/quick", response_model=ArticleRead, status_code=status.HTTP_201_CREATED)
async def quick_create_article() -> ArticleRead:
    """Create an empty board without a form."""
    return await ArticleService.quick_create()


@router.get("/{article_id}", response_model=ArticleRead)
async def get_article(article_id: str) -> ArticleRead:
    return await ArticleService.get_article(article_id)


@router.put("/{article_id}", response_model=ArticleRead)
async def update_article(article_id: str, article_in: ArticleUpdate) -> ArticleRead:
    """Merge the provided fields; ``version`` goes up by one."""
    return await ArticleService.update_article(article_id, article_in)


@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(article_id: str) -> MessageResponse:
    """Delete an article and every post-it on it."""
    await ArticleService.delete_article(article_id)
    return MessageResponse(message="Article and associated post-its deleted successfully")


@router.post("/{article_id}/tags", response_model=ArticleRead)
async def add_article_tags(article_id: str, body: ArticleTags) -> ArticleRead:
    return await ArticleService.add_tags(article_id, body.tags)


@router.delete("/{article_id}/tags", response_model=ArticleRead)
async def remove_article_tags(article_id: str, body: ArticleTags) -> ArticleRead:
    return await ArticleService.remove_tags(article_id, body.tags)


@router.get("/{article_id}/postits", response_model=ArticleBoard)
async def list_article_postits(article_id: str) -> ArticleBoard:
    """Return the article's title with all of its post-its."""
    article = await ArticleService.get_article(article_id)
    postits = await PostItService.list_for_article(article.id)
    count = await PostItService.count_for_article(article.id)
    return ArticleBoard(
        article_id=article.id,
        article_title=article.title,
        postits=postits,
        count=count,
    )
