"""
Service layer for tags.

Tag names are unique ignoring case: the ``tags.name_key`` column holds
the case-folded name under a UNIQUE constraint, and every write checks
it first so the caller gets a ``ConflictException`` with a readable
message.

Articles refer to tags by exact name in their ``tags`` JSON array
rather than through a foreign key.  This service keeps that
denormalized reference consistent: deleting a tag strips its name from
every article, and renaming a tag rewrites it in place.  Neither
cascade touches an article's ``version`` or ``updated_at``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Callable, List, Optional

from leylines_api.app.core.db import (
    dump_list,
    get_connection,
    load_list,
    parse_identifier,
    transaction,
    utc_now,
)
from leylines_api.app.core.errors import ConflictException, NotFoundException, ValidationException
from leylines_api.app.schemas.tag import (
    DEFAULT_TAG_COLOR,
    PopularTag,
    TagCreate,
    TagRead,
    TagUpdate,
    TagWithCount,
)

logger = logging.getLogger(__name__)

# API sort keys mapped to columns.  Text columns sort case-insensitively.
SORT_COLUMNS = {
    "name": "name COLLATE NOCASE",
    "description": "description COLLATE NOCASE",
    "color": "color",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}

ARTICLES_WITH_TAG = (
    "SELECT id, tags FROM articles "
    "WHERE EXISTS (SELECT 1 FROM json_each(articles.tags) WHERE json_each.value = ?)"
)


def name_key(name: str) -> str:
    return name.strip().casefold()


class TagService:
    """Service class for managing tags."""

    @classmethod
    async def create_tag(cls, data: TagCreate) -> TagRead:
        """Insert a new tag.

        Raises ``ValidationException`` for a missing name and
        ``ConflictException`` when the name is taken ignoring case.
        """
        if not data.name:
            raise ValidationException("Tag name is required")
        now = utc_now()
        try:
            with transaction() as cursor:
                if cls._find_by_key(cursor, name_key(data.name)):
                    raise ConflictException("Tag already exists")
                cursor.execute(
                    """
                    INSERT INTO tags (name, name_key, description, color, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data.name,
                        name_key(data.name),
                        data.description or "",
                        data.color or DEFAULT_TAG_COLOR,
                        now,
                        now,
                    ),
                )
                tag_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise ConflictException("Tag already exists") from exc
        logger.info("Created tag %s (%s)", tag_id, data.name)
        return await cls.get_tag(tag_id)

    @classmethod
    async def list_tags(cls, search: Optional[str] = None, sort_by: str = "name") -> List[TagRead]:
        """Return all tags, optionally filtered by a substring.

        ``search`` matches name or description ignoring case.  Unknown
        ``sort_by`` values fall back to sorting by name.
        """
        order = SORT_COLUMNS.get(sort_by, SORT_COLUMNS["name"])
        query = "SELECT * FROM tags"
        params: tuple = ()
        if search:
            term = search.casefold()
            query += " WHERE instr(casefold(name), ?) > 0 OR instr(casefold(description), ?) > 0"
            params = (term, term)
        query += f" ORDER BY {order}, id ASC"
        rows = get_connection().execute(query, params).fetchall()
        return [cls._row_to_tag(row) for row in rows]

    @classmethod
    async def find_tag(cls, tag_id: Any) -> Optional[TagRead]:
        ident = parse_identifier(tag_id, "tag")
        row = get_connection().execute("SELECT * FROM tags WHERE id = ?", (ident,)).fetchone()
        return cls._row_to_tag(row) if row else None

    @classmethod
    async def get_tag(cls, tag_id: Any) -> TagRead:
        """Return the tag or raise ``NotFoundException``."""
        tag = await cls.find_tag(tag_id)
        if tag is None:
            raise NotFoundException("Tag not found")
        return tag

    @classmethod
    async def find_by_name(cls, name: str) -> Optional[TagRead]:
        """Look a tag up by name, ignoring case."""
        row = cls._find_by_key(get_connection().cursor(), name_key(name))
        return cls._row_to_tag(row) if row else None

    @classmethod
    async def update_tag(cls, tag_id: Any, data: TagUpdate) -> TagRead:
        """Update a tag's fields.

        Renaming checks the new name against every other tag ignoring
        case, then rewrites the old name in all article tag lists.
        """
        ident = parse_identifier(tag_id, "tag")
        try:
            with transaction() as cursor:
                row = cursor.execute("SELECT * FROM tags WHERE id = ?", (ident,)).fetchone()
                if not row:
                    raise NotFoundException("Tag not found")
                old_name = row["name"]
                new_name = data.name or old_name
                if new_name != old_name:
                    clash = cls._find_by_key(cursor, name_key(new_name))
                    if clash and clash["id"] != ident:
                        raise ConflictException("Tag name already exists")
                description = data.description if data.description is not None else row["description"]
                color = data.color or row["color"]
                cursor.execute(
                    """
                    UPDATE tags
                    SET name = ?, name_key = ?, description = ?, color = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (new_name, name_key(new_name), description, color, utc_now(), ident),
                )
                if new_name != old_name:
                    renamed = cls._rewrite_article_tags(
                        cursor,
                        old_name,
                        lambda tags: list(dict.fromkeys(new_name if tag == old_name else tag for tag in tags)),
                    )
                    logger.info("Renamed tag %r to %r on %s articles", old_name, new_name, renamed)
        except sqlite3.IntegrityError as exc:
            raise ConflictException("Tag name already exists") from exc
        logger.info("Updated tag %s", ident)
        return await cls.get_tag(ident)

    @classmethod
    async def delete_tag(cls, tag_id: Any) -> int:
        """Delete a tag after removing its name from every article.

        Returns the number of articles that carried the tag.
        """
        ident = parse_identifier(tag_id, "tag")
        with transaction() as cursor:
            row = cursor.execute("SELECT name FROM tags WHERE id = ?", (ident,)).fetchone()
            if not row:
                raise NotFoundException("Tag not found")
            name = row["name"]
            touched = cls._rewrite_article_tags(cursor, name, lambda tags: [tag for tag in tags if tag != name])
            cursor.execute("DELETE FROM tags WHERE id = ?", (ident,))
        logger.info("Deleted tag %s (%s), removed from %s articles", ident, name, touched)
        return touched

    @classmethod
    async def list_with_article_count(cls) -> List[TagWithCount]:
        """Every tag with the number of articles carrying its name."""
        rows = get_connection().execute(
            """
            SELECT tags.*,
                   (SELECT COUNT(*) FROM articles
                    WHERE EXISTS (SELECT 1 FROM json_each(articles.tags) WHERE json_each.value = tags.name)
                   ) AS article_count
            FROM tags
            ORDER BY name COLLATE NOCASE, id ASC
            """
        ).fetchall()
        return [
            TagWithCount(**cls._row_to_tag(row).model_dump(), article_count=row["article_count"])
            for row in rows
        ]

    @classmethod
    async def popular_tags(cls, limit: int = 10) -> List[PopularTag]:
        """The ``limit`` most used tag names, most used first.

        Names are counted from article tag lists, so a name still in use
        after its tag record was removed is reported with no ``tag_info``.
        """
        conn = get_connection()
        rows = conn.execute(
            """
            SELECT json_each.value AS name, COUNT(DISTINCT articles.id) AS count
            FROM articles, json_each(articles.tags)
            GROUP BY json_each.value
            ORDER BY count DESC, name ASC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()
        popular: List[PopularTag] = []
        for row in rows:
            tag_row = conn.execute("SELECT * FROM tags WHERE name = ?", (row["name"],)).fetchone()
            popular.append(
                PopularTag(
                    name=row["name"],
                    count=row["count"],
                    tag_info=cls._row_to_tag(tag_row) if tag_row else None,
                )
            )
        return popular

    @staticmethod
    def _find_by_key(cursor: sqlite3.Cursor, key: str) -> Optional[sqlite3.Row]:
        return cursor.execute("SELECT * FROM tags WHERE name_key = ?", (key,)).fetchone()

    @staticmethod
    def _rewrite_article_tags(
        cursor: sqlite3.Cursor, name: str, rewrite: Callable[[List[str]], List[str]]
    ) -> int:
        """Apply ``rewrite`` to the tag list of every article carrying ``name``."""
        rows = cursor.execute(ARTICLES_WITH_TAG, (name,)).fetchall()
        for row in rows:
            cursor.execute(
                "UPDATE articles SET tags = ? WHERE id = ?",
                (dump_list(rewrite(load_list(row["tags"]))), row["id"]),
            )
        return len(rows)

    @staticmethod
    def _row_to_tag(row: sqlite3.Row) -> TagRead:
        """Convert a database row to a TagRead schema instance."""
        return TagRead(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            color=row["color"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
