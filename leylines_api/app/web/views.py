"""
Board UI pages.

The pages are thin Jinja2 shells: they render the layout and hand the
ids the page is about to ``static/board.js``, which loads and edits all
data through the JSON API.  No page reads the database directly.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from leylines_api.app.core.config import settings
from leylines_api.app.core.db import parse_identifier
from leylines_api.app.schemas.postit import (
    DEFAULT_HEIGHT,
    DEFAULT_POSTIT_COLOR,
    DEFAULT_POSTIT_CONTENT,
    DEFAULT_WIDTH,
)

APP_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(APP_DIR / "templates"))

router = APIRouter(include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Board list with search, quick create and the create form."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"project_name": settings.project_name, "page_size": settings.default_page_size},
    )


@router.get("/articles/{article_id}", response_class=HTMLResponse)
async def board(request: Request, article_id: str):
    """The post-it board of one article."""
    ident = parse_identifier(article_id, "article")
    return templates.TemplateResponse(
        request,
        "board.html",
        {
            "project_name": settings.project_name,
            "article_id": ident,
            "note_content": DEFAULT_POSTIT_CONTENT,
            "note_color": DEFAULT_POSTIT_COLOR,
            "note_width": DEFAULT_WIDTH,
            "note_height": DEFAULT_HEIGHT,
        },
    )


@router.get("/tags", response_class=HTMLResponse)
async def tags(request: Request):
    """Tag manager with per-tag article counts."""
    return templates.TemplateResponse(request, "tags.html", {"project_name": settings.project_name})
