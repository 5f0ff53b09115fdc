"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (articles, post-its, tags)
under one prefix.  When a new domain is introduced, include its router
here.
"""

from fastapi import APIRouter

from .endpoints import articles, postits, tags

router = APIRouter()

router.include_router(articles.router, prefix="/articles", tags=["articles"])
router.include_router(postits.router, prefix="/postits", tags=["postits"])
router.include_router(tags.router, prefix="/tags", tags=["tags"])
