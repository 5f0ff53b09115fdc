"""
Tests for the article service: title rule, versioning, tags and cascade.
"""
import time

import pytest

from leylines_api.app.core.errors import MalformedIdentifierException, NotFoundException
from leylines_api.app.schemas.article import ArticleCreate, ArticleUpdate
from leylines_api.app.schemas.postit import PostItCreate
from leylines_api.app.services.article_service import ArticleService
from leylines_api.app.services.postit_service import PostItService

pytestmark = pytest.mark.anyio


async def test_blank_title_becomes_id():
    article = await ArticleService.create_article(ArticleCreate(title="   "))
    assert article.title == str(article.id)
    assert article.version == 1
    assert article.is_published is False


async def test_create_keeps_given_fields():
    article = await ArticleService.create_article(
        ArticleCreate(
            title="  Research  ",
            content="notes",
            summary="short",
            tags=[" ml ", "ml", "", "papers"],
            is_published=True,
        )
    )
    assert article.title == "Research"
    assert article.tags == ["ml", "papers"]
    assert article.is_published is True
    assert article.created_at == article.updated_at


async def test_quick_create():
    article = await ArticleService.quick_create()
    assert article.title == str(article.id)
    assert article.content == ""
    assert article.summary == "New post-it board"
    assert article.tags == []


async def test_update_increments_version_by_one_per_call():
    article = await ArticleService.create_article(ArticleCreate(title="Board"))
    updated = await ArticleService.update_article(article.id, ArticleUpdate(content="a"))
    assert updated.version == 2
    updated = await ArticleService.update_article(article.id, ArticleUpdate())
    assert updated.version == 3
    assert updated.content == "a"
    assert updated.title == "Board"


async def test_update_refreshes_updated_at():
    article = await ArticleService.create_article(ArticleCreate(title="Board"))
    time.sleep(0.01)
    updated = await ArticleService.update_article(article.id, ArticleUpdate(summary="changed"))
    assert updated.updated_at > article.updated_at
    assert updated.created_at == article.created_at


async def test_update_with_blank_title_uses_id():
    article = await ArticleService.create_article(ArticleCreate(title="Board"))
    updated = await ArticleService.update_article(article.id, ArticleUpdate(title=" "))
    assert updated.title == str(article.id)


async def test_update_missing_article():
    with pytest.raises(NotFoundException):
        await ArticleService.update_article(999, ArticleUpdate(title="x"))


async def test_find_article_returns_none_when_absent():
    assert await ArticleService.find_article(42) is None
    with pytest.raises(NotFoundException):
        await ArticleService.get_article("42")


async def test_malformed_id():
    with pytest.raises(MalformedIdentifierException):
        await ArticleService.get_article("abc")
    with pytest.raises(MalformedIdentifierException):
        await ArticleService.get_article("0")


async def test_delete_cascades_postits():
    article = await ArticleService.create_article(ArticleCreate(title="Board"))
    other = await ArticleService.create_article(ArticleCreate(title="Other"))
    for content in ("one", "two"):
        await PostItService.create_postit(PostItCreate(content=content, article_id=article.id))
    await PostItService.create_postit(PostItCreate(content="keep", article_id=other.id))

    removed = await ArticleService.delete_article(article.id)

    assert removed == 2
    assert await PostItService.list_for_article(article.id) == []
    assert len(await PostItService.list_for_article(other.id)) == 1
    with pytest.raises(NotFoundException):
        await ArticleService.get_article(article.id)


async def test_delete_missing_article():
    with pytest.raises(NotFoundException):
        await ArticleService.delete_article(5)


async def test_add_and_remove_tags():
    article = await ArticleService.create_article(ArticleCreate(title="Board", tags=["a"]))
    time.sleep(0.01)
    added = await ArticleService.add_tags(article.id, ["b", "a", "c"])
    assert added.tags == ["a", "b", "c"]
    assert added.version == article.version
    assert added.updated_at > article.updated_at

    removed = await ArticleService.remove_tags(article.id, ["a", "missing"])
    assert removed.tags == ["b", "c"]


async def test_tag_change_on_missing_article():
    with pytest.raises(NotFoundException):
        await ArticleService.add_tags(77, ["x"])
    with pytest.raises(NotFoundException):
        await ArticleService.remove_tags(77, ["x"])


async def test_list_sorted_by_updated_at_desc():
    first = await ArticleService.create_article(ArticleCreate(title="first"))
    second = await ArticleService.create_article(ArticleCreate(title="second"))
    time.sleep(0.01)
    await ArticleService.update_article(first.id, ArticleUpdate(content="bump"))

    result = await ArticleService.list_articles()

    assert [a.id for a in result.articles] == [first.id, second.id]
    assert result.pagination.total == 2
    assert result.pagination.pages == 1


async def test_list_pagination():
    for i in range(5):
        await ArticleService.create_article(ArticleCreate(title=f"board {i}"))
    result = await ArticleService.list_articles(page=2, limit=2)
    assert len(result.articles) == 2
    assert result.pagination.page == 2
    assert result.pagination.limit == 2
    assert result.pagination.total == 5
    assert result.pagination.pages == 3


async def test_list_filters_by_tags_and_search():
    await ArticleService.create_article(ArticleCreate(title="Graph theory", tags=["math"]))
    await ArticleService.create_article(ArticleCreate(title="Cooking", content="GRAPHite pencils", tags=["home"]))
    await ArticleService.create_article(ArticleCreate(title="Gardening", tags=["home", "outdoor"]))

    by_tag = await ArticleService.list_articles(tags=["outdoor", "math"])
    assert sorted(a.title for a in by_tag.articles) == ["Gardening", "Graph theory"]

    by_search = await ArticleService.list_articles(search="graph")
    assert sorted(a.title for a in by_search.articles) == ["Cooking", "Graph theory"]

    both = await ArticleService.list_articles(tags=["home"], search="graph")
    assert [a.title for a in both.articles] == ["Cooking"]


async def test_search_treats_wildcards_literally():
    await ArticleService.create_article(ArticleCreate(title="100% done"))
    await ArticleService.create_article(ArticleCreate(title="1000 things"))
    result = await ArticleService.list_articles(search="0%")
    assert [a.title for a in result.articles] == ["100% done"]


async def test_search_folds_unicode_case():
    await ArticleService.create_article(ArticleCreate(title="Été notes"))
    await ArticleService.create_article(ArticleCreate(title="Winter", content="STRASSE und Straße"))
    await ArticleService.create_article(ArticleCreate(title="Other"))

    for term in ("ÉTÉ", "été"):
        result = await ArticleService.list_articles(search=term)
        assert [a.title for a in result.articles] == ["Été notes"]
    result = await ArticleService.list_articles(search="straße")
    assert [a.title for a in result.articles] == ["Winter"]


async def test_update_ignores_blank_content():
    article = await ArticleService.create_article(ArticleCreate(title="Board", content="keep", summary="old"))
    updated = await ArticleService.update_article(article.id, ArticleUpdate(content="", summary=""))
    assert updated.content == "keep"
    assert updated.summary == ""
    assert updated.version == 2
