"""
Service layer for articles.

An article is the board that post-it notes live on.  Besides plain
CRUD this module owns two rules:

* an article created without a title is titled after its own id;
* every ``update_article`` call bumps ``version`` by exactly one.

Tags are stored on the article as a JSON array of names.  Deleting an
article removes its post-its in the same transaction.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, List, Optional, Sequence

from leylines_api.app.core.db import (
    dump_list,
    get_connection,
    load_list,
    parse_identifier,
    transaction,
    utc_now,
)
from leylines_api.app.core.errors import NotFoundException
from leylines_api.app.schemas.article import ArticleCreate, ArticleList, ArticleRead, ArticleUpdate
from leylines_api.app.schemas.common import Pagination

logger = logging.getLogger(__name__)

QUICK_SUMMARY = "New post-it board"


class ArticleService:
    """Service class for managing articles."""

    @classmethod
    async def create_article(cls, data: ArticleCreate) -> ArticleRead:
        """Insert a new article and return the stored record.

        When ``title`` is empty the article is renamed to the string form
        of its generated id right after insertion.
        """
        now = utc_now()
        title = (data.title or "").strip()
        with transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO articles (title, content, summary, tags, created_at, updated_at, version, is_published)
                VALUES (?, ?, ?, ?, ?, ?, 1, ?)
                """,
                (
                    title,
                    data.content or "",
                    data.summary or "",
                    dump_list(data.tags),
                    now,
                    now,
                    int(data.is_published),
                ),
            )
            article_id = cursor.lastrowid
            if not title:
                cursor.execute("UPDATE articles SET title = ? WHERE id = ?", (str(article_id), article_id))
        logger.info("Created article %s", article_id)
        return await cls.get_article(article_id)

    @classmethod
    async def quick_create(cls) -> ArticleRead:
        """Create an empty board titled after its id."""
        return await cls.create_article(ArticleCreate(summary=QUICK_SUMMARY))

    @classmethod
    async def list_articles(
        cls,
        page: int = 1,
        limit: int = 10,
        tags: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
    ) -> ArticleList:
        """Return one page of articles, most recently updated first.

        ``tags`` keeps articles carrying at least one of the given names;
        ``search`` is a case-insensitive substring matched against title
        and content.
        """
        where_clauses: List[str] = []
        params: List[Any] = []
        if tags:
            placeholders = ", ".join("?" for _ in tags)
            where_clauses.append(
                f"EXISTS (SELECT 1 FROM json_each(articles.tags) WHERE json_each.value IN ({placeholders}))"
            )
            params.extend(tags)
        if search:
            term = search.casefold()
            where_clauses.append("(instr(casefold(title), ?) > 0 OR instr(casefold(content), ?) > 0)")
            params.extend([term, term])
        where = f" WHERE {' AND '.join(where_clauses)}" if where_clauses else ""

        conn = get_connection()
        total = conn.execute(f"SELECT COUNT(*) FROM articles{where}", tuple(params)).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM articles{where} ORDER BY updated_at DESC, id DESC LIMIT ? OFFSET ?",
            tuple(params) + (limit, (page - 1) * limit),
        ).fetchall()
        return ArticleList(
            articles=[cls._row_to_article(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    @classmethod
    async def find_article(cls, article_id: Any) -> Optional[ArticleRead]:
        """Return the article or ``None`` when it does not exist."""
        ident = parse_identifier(article_id, "article")
        row = get_connection().execute("SELECT * FROM articles WHERE id = ?", (ident,)).fetchone()
        return cls._row_to_article(row) if row else None

    @classmethod
    async def get_article(cls, article_id: Any) -> ArticleRead:
        """Return the article or raise ``NotFoundException``."""
        article = await cls.find_article(article_id)
        if article is None:
            raise NotFoundException("Article not found")
        return article

    @classmethod
    async def update_article(cls, article_id: Any, data: ArticleUpdate) -> ArticleRead:
        """Merge the provided fields into an article.

        ``updated_at`` is refreshed and ``version`` incremented on every
        call, even when nothing else changes.  A blank title re-applies
        the title-from-id rule and blank content is ignored.
        """
        ident = parse_identifier(article_id, "article")
        fields: List[str] = []
        values: List[Any] = []
        if data.title is not None:
            fields.append("title = ?")
            values.append(data.title or str(ident))
        if data.content:
            fields.append("content = ?")
            values.append(data.content)
        if data.summary is not None:
            fields.append("summary = ?")
            values.append(data.summary)
        if data.tags is not None:
            fields.append("tags = ?")
            values.append(dump_list(data.tags))
        if data.is_published is not None:
            fields.append("is_published = ?")
            values.append(int(data.is_published))
        fields.extend(["updated_at = ?", "version = version + 1"])
        values.extend([utc_now(), ident])

        with transaction() as cursor:
            cursor.execute(f"UPDATE articles SET {', '.join(fields)} WHERE id = ?", tuple(values))
            if cursor.rowcount == 0:
                raise NotFoundException("Article not found")
        logger.info("Updated article %s", ident)
        return await cls.get_article(ident)

    @classmethod
    async def delete_article(cls, article_id: Any) -> int:
        """Delete an article together with its post-its.

        Returns the number of post-its removed.
        """
        ident = parse_identifier(article_id, "article")
        with transaction() as cursor:
            cursor.execute("DELETE FROM postits WHERE article_id = ?", (ident,))
            removed_postits = cursor.rowcount
            cursor.execute("DELETE FROM articles WHERE id = ?", (ident,))
            if cursor.rowcount == 0:
                raise NotFoundException("Article not found")
        logger.info("Deleted article %s and %s post-its", ident, removed_postits)
        return removed_postits

    @classmethod
    async def add_tags(cls, article_id: Any, tags: Sequence[str]) -> ArticleRead:
        """Union ``tags`` into the article's tag list."""
        return await cls._change_tags(article_id, tags, add=True)

    @classmethod
    async def remove_tags(cls, article_id: Any, tags: Sequence[str]) -> ArticleRead:
        """Remove every name in ``tags`` from the article's tag list."""
        return await cls._change_tags(article_id, tags, add=False)

    @classmethod
    async def _change_tags(cls, article_id: Any, tags: Sequence[str], add: bool) -> ArticleRead:
        ident = parse_identifier(article_id, "article")
        with transaction() as cursor:
            row = cursor.execute("SELECT tags FROM articles WHERE id = ?", (ident,)).fetchone()
            if not row:
                raise NotFoundException("Article not found")
            current = load_list(row["tags"])
            if add:
                updated = current + [tag for tag in dict.fromkeys(tags) if tag not in current]
            else:
                removed = set(tags)
                updated = [tag for tag in current if tag not in removed]
            cursor.execute(
                "UPDATE articles SET tags = ?, updated_at = ? WHERE id = ?",
                (dump_list(updated), utc_now(), ident),
            )
        logger.info("%s tags %s on article %s", "Added" if add else "Removed", list(tags), ident)
        return await cls.get_article(ident)

    @staticmethod
    def _row_to_article(row: sqlite3.Row) -> ArticleRead:
        """Convert a database row to an ArticleRead schema instance."""
        return ArticleRead(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            summary=row["summary"],
            tags=load_list(row["tags"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            version=row["version"],
            is_published=bool(row["is_published"]),
        )
