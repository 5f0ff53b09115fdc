"""
Service layer for post-it notes.

Post-its are scoped to one article.  Besides CRUD, the service keeps
the board layout: positions are replaced when a note is dragged,
``bring_to_front`` lifts a note above all of its siblings, and a bulk
update moves many notes in one call.

Notes are always listed by ``z_index`` then creation time so that the
board can paint them in stacking order.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, List, Optional, Sequence, Tuple, Union

from leylines_api.app.core.db import get_connection, parse_identifier, transaction, utc_now
from leylines_api.app.core.errors import (
    MalformedIdentifierException,
    NotFoundException,
    ValidationException,
)
from leylines_api.app.schemas.common import Pagination
from leylines_api.app.schemas.postit import (
    DEFAULT_POSTIT_COLOR,
    MAX_Z_INDEX,
    BulkPositionItem,
    Position,
    PositionInput,
    PostItCreate,
    PostItList,
    PostItRead,
    PostItUpdate,
)

logger = logging.getLogger(__name__)

ORDER_BY = "ORDER BY z_index ASC, created_at ASC, id ASC"


class PostItService:
    """Service class for managing post-it notes."""

    @classmethod
    async def create_postit(cls, data: PostItCreate) -> PostItRead:
        """Insert a post-it on an existing article.

        Raises ``ValidationException`` when content or article id are
        missing and ``NotFoundException`` when the article does not
        exist; nothing is stored in either case.
        """
        if not data.content or data.article_id in (None, ""):
            raise ValidationException("Content and articleId are required")
        article_id = parse_identifier(data.article_id, "article")
        position = data.position.resolve() if data.position else Position()
        now = utc_now()
        with transaction() as cursor:
            exists = cursor.execute("SELECT id FROM articles WHERE id = ?", (article_id,)).fetchone()
            if not exists:
                raise NotFoundException("Article not found")
            cursor.execute(
                """
                INSERT INTO postits (article_id, content, pos_x, pos_y, width, height, z_index, color, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    article_id,
                    data.content,
                    position.x,
                    position.y,
                    position.width,
                    position.height,
                    position.z_index,
                    data.color or DEFAULT_POSTIT_COLOR,
                    now,
                    now,
                ),
            )
            postit_id = cursor.lastrowid
        logger.info("Created post-it %s on article %s", postit_id, article_id)
        return await cls.get_postit(postit_id)

    @classmethod
    async def list_postits(
        cls,
        page: int = 1,
        limit: int = 50,
        article_id: Optional[Any] = None,
    ) -> PostItList:
        """Return one page of post-its, optionally for a single article."""
        where = ""
        params: Tuple[Any, ...] = ()
        if article_id not in (None, ""):
            where = " WHERE article_id = ?"
            params = (parse_identifier(article_id, "article"),)
        conn = get_connection()
        total = conn.execute(f"SELECT COUNT(*) FROM postits{where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM postits{where} {ORDER_BY} LIMIT ? OFFSET ?",
            params + (limit, (page - 1) * limit),
        ).fetchall()
        return PostItList(
            postits=[cls._row_to_postit(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    @classmethod
    async def list_for_article(cls, article_id: Any) -> List[PostItRead]:
        """Return every post-it of an article in stacking order."""
        ident = parse_identifier(article_id, "article")
        rows = get_connection().execute(
            f"SELECT * FROM postits WHERE article_id = ? {ORDER_BY}", (ident,)
        ).fetchall()
        return [cls._row_to_postit(row) for row in rows]

    @classmethod
    async def count_for_article(cls, article_id: Any) -> int:
        ident = parse_identifier(article_id, "article")
        row = get_connection().execute("SELECT COUNT(*) FROM postits WHERE article_id = ?", (ident,)).fetchone()
        return row[0]

    @classmethod
    async def find_postit(cls, postit_id: Any) -> Optional[PostItRead]:
        ident = parse_identifier(postit_id, "post-it")
        row = get_connection().execute("SELECT * FROM postits WHERE id = ?", (ident,)).fetchone()
        return cls._row_to_postit(row) if row else None

    @classmethod
    async def get_postit(cls, postit_id: Any) -> PostItRead:
        """Return the post-it or raise ``NotFoundException``."""
        postit = await cls.find_postit(postit_id)
        if postit is None:
            raise NotFoundException("Post-it not found")
        return postit

    @classmethod
    async def update_postit(cls, postit_id: Any, data: PostItUpdate) -> PostItRead:
        """Merge content, position and color into a post-it.

        A provided position is overlaid on the stored one, so a client
        may send only the fields it changed.
        """
        current = await cls.get_postit(postit_id)
        content = data.content or current.content
        color = data.color or current.color
        position = data.position.merge_into(current.position) if data.position else current.position
        await cls._write(current.id, content=content, color=color, position=position)
        logger.info("Updated post-it %s", current.id)
        return await cls.get_postit(current.id)

    @classmethod
    async def update_position(cls, postit_id: Any, position: PositionInput) -> PostItRead:
        """Replace a post-it's position wholesale.

        Width, height and z-index fall back to their defaults when left
        out.
        """
        ident = parse_identifier(postit_id, "post-it")
        resolved = position.resolve()
        with transaction() as cursor:
            if not cls._set_position(cursor, ident, resolved):
                raise NotFoundException("Post-it not found")
        logger.debug("Moved post-it %s to %s", ident, resolved)
        return await cls.get_postit(ident)

    @classmethod
    async def max_z_index(cls, article_id: Any) -> int:
        """Highest z-index on an article's board, 0 when it is empty."""
        ident = parse_identifier(article_id, "article")
        row = get_connection().execute(
            "SELECT MAX(z_index) FROM postits WHERE article_id = ?", (ident,)
        ).fetchone()
        return row[0] if row and row[0] is not None else 0

    @classmethod
    async def bring_to_front(cls, postit_id: Any) -> PostItRead:
        """Stack a post-it above every other note on its board."""
        current = await cls.get_postit(postit_id)
        top = await cls.max_z_index(current.article_id)
        if top >= MAX_Z_INDEX:
            raise ValidationException("Board stacking order is exhausted")
        position = current.position.model_copy(update={"z_index": top + 1})
        with transaction() as cursor:
            cls._set_position(cursor, current.id, position)
        logger.info("Brought post-it %s to front (z-index %s)", current.id, top + 1)
        return await cls.get_postit(current.id)

    @classmethod
    async def bulk_update_positions(
        cls, updates: Sequence[BulkPositionItem]
    ) -> Tuple[int, List[Union[int, str]]]:
        """Apply many position updates in one transaction.

        Updates are independent: an id that is malformed or matches no
        post-it is skipped and reported, the others still apply.
        Returns ``(modified_count, failed_ids)``.
        """
        modified = 0
        failed: List[Union[int, str]] = []
        with transaction() as cursor:
            for update in updates:
                try:
                    ident = parse_identifier(update.id, "post-it")
                except MalformedIdentifierException:
                    failed.append(update.id)
                    continue
                if cls._set_position(cursor, ident, update.position.resolve()):
                    modified += 1
                else:
                    failed.append(update.id)
        if failed:
            logger.warning("Bulk position update skipped ids %s", failed)
        logger.info("Bulk position update modified %s post-its", modified)
        return modified, failed

    @classmethod
    async def delete_postit(cls, postit_id: Any) -> None:
        ident = parse_identifier(postit_id, "post-it")
        with transaction() as cursor:
            cursor.execute("DELETE FROM postits WHERE id = ?", (ident,))
            if cursor.rowcount == 0:
                raise NotFoundException("Post-it not found")
        logger.info("Deleted post-it %s", ident)

    @classmethod
    async def delete_for_article(cls, article_id: Any) -> int:
        """Delete every post-it of an article and return how many went."""
        ident = parse_identifier(article_id, "article")
        with transaction() as cursor:
            cursor.execute("DELETE FROM postits WHERE article_id = ?", (ident,))
            deleted = cursor.rowcount
        logger.info("Deleted %s post-its of article %s", deleted, ident)
        return deleted

    @classmethod
    async def _write(cls, ident: int, content: str, color: str, position: Position) -> None:
        with transaction() as cursor:
            cursor.execute(
                """
                UPDATE postits
                SET content = ?, color = ?, pos_x = ?, pos_y = ?, width = ?, height = ?, z_index = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    content,
                    color,
                    position.x,
                    position.y,
                    position.width,
                    position.height,
                    position.z_index,
                    utc_now(),
                    ident,
                ),
            )
            if cursor.rowcount == 0:
                raise NotFoundException("Post-it not found")

    @staticmethod
    def _set_position(cursor: sqlite3.Cursor, ident: int, position: Position) -> bool:
        cursor.execute(
            """
            UPDATE postits
            SET pos_x = ?, pos_y = ?, width = ?, height = ?, z_index = ?, updated_at = ?
            WHERE id = ?
            """,
            (position.x, position.y, position.width, position.height, position.z_index, utc_now(), ident),
        )
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_postit(row: sqlite3.Row) -> PostItRead:
        """Convert a database row to a PostItRead schema instance."""
        return PostItRead(
            id=row["id"],
            article_id=row["article_id"],
            content=row["content"],
            position=Position(
                x=row["pos_x"],
                y=row["pos_y"],
                width=row["width"],
                height=row["height"],
                z_index=row["z_index"],
            ),
            color=row["color"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
