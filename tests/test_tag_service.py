"""
Tests for the tag service: case-insensitive uniqueness and the article cascades.
"""
import pytest

from leylines_api.app.core.errors import ConflictException, NotFoundException, ValidationException
from leylines_api.app.schemas.article import ArticleCreate
from leylines_api.app.schemas.tag import TagCreate, TagUpdate
from leylines_api.app.services.article_service import ArticleService
from leylines_api.app.services.tag_service import TagService

pytestmark = pytest.mark.anyio


async def test_create_defaults():
    tag = await TagService.create_tag(TagCreate(name="  Research "))
    assert tag.name == "Research"
    assert tag.description == ""
    assert tag.color == "#3B82F6"


async def test_duplicate_name_ignoring_case_conflicts():
    await TagService.create_tag(TagCreate(name="Research"))
    with pytest.raises(ConflictException):
        await TagService.create_tag(TagCreate(name="research"))
    assert len(await TagService.list_tags()) == 1


async def test_name_required():
    with pytest.raises(ValidationException):
        await TagService.create_tag(TagCreate(name="   "))


async def test_find_by_name_ignores_case():
    tag = await TagService.create_tag(TagCreate(name="Python"))
    found = await TagService.find_by_name("PYTHON")
    assert found is not None
    assert found.id == tag.id
    assert await TagService.find_by_name("rust") is None


async def test_get_missing_tag():
    with pytest.raises(NotFoundException):
        await TagService.get_tag(12)


async def test_list_search_and_sort():
    await TagService.create_tag(TagCreate(name="beta", description="second letter", color="#000000"))
    await TagService.create_tag(TagCreate(name="Alpha", description="first", color="#FFFFFF"))
    await TagService.create_tag(TagCreate(name="gamma", description="LETTER three", color="#888888"))

    assert [t.name for t in await TagService.list_tags()] == ["Alpha", "beta", "gamma"]
    assert [t.name for t in await TagService.list_tags(sort_by="color")] == ["beta", "gamma", "Alpha"]
    assert [t.name for t in await TagService.list_tags(sort_by="nonsense")] == ["Alpha", "beta", "gamma"]
    assert [t.name for t in await TagService.list_tags(search="letter")] == ["beta", "gamma"]
    assert [t.name for t in await TagService.list_tags(search="ALP")] == ["Alpha"]


async def test_rename_conflict_with_other_tag():
    await TagService.create_tag(TagCreate(name="Research"))
    other = await TagService.create_tag(TagCreate(name="Ideas"))
    with pytest.raises(ConflictException):
        await TagService.update_tag(other.id, TagUpdate(name="RESEARCH"))


async def test_rename_changing_case_only_is_allowed():
    tag = await TagService.create_tag(TagCreate(name="research"))
    updated = await TagService.update_tag(tag.id, TagUpdate(name="Research", description="papers"))
    assert updated.name == "Research"
    assert updated.description == "papers"
    assert updated.color == tag.color


async def test_rename_rewrites_article_tags():
    tag = await TagService.create_tag(TagCreate(name="ml"))
    article = await ArticleService.create_article(ArticleCreate(title="Board", tags=["ml", "notes"]))

    await TagService.update_tag(tag.id, TagUpdate(name="machine-learning"))

    stored = await ArticleService.get_article(article.id)
    assert stored.tags == ["machine-learning", "notes"]
    assert stored.version == article.version
    assert stored.updated_at == article.updated_at


async def test_update_missing_tag():
    with pytest.raises(NotFoundException):
        await TagService.update_tag(3, TagUpdate(name="x"))


async def test_delete_removes_name_from_articles_only():
    tag = await TagService.create_tag(TagCreate(name="X"))
    tagged = await ArticleService.create_article(
        ArticleCreate(title="A", content="body", summary="sum", tags=["keep", "X", "x"])
    )
    untouched = await ArticleService.create_article(ArticleCreate(title="B", tags=["other"]))

    touched = await TagService.delete_tag(tag.id)

    assert touched == 1
    after = await ArticleService.get_article(tagged.id)
    assert after.tags == ["keep", "x"]
    assert after.model_dump(exclude={"tags"}) == tagged.model_dump(exclude={"tags"})
    assert (await ArticleService.get_article(untouched.id)).tags == ["other"]
    with pytest.raises(NotFoundException):
        await TagService.get_tag(tag.id)


async def test_delete_missing_tag():
    with pytest.raises(NotFoundException):
        await TagService.delete_tag(99)


async def test_article_counts():
    await TagService.create_tag(TagCreate(name="home"))
    await TagService.create_tag(TagCreate(name="work"))
    await ArticleService.create_article(ArticleCreate(title="A", tags=["home"]))
    await ArticleService.create_article(ArticleCreate(title="B", tags=["home", "work"]))
    await ArticleService.create_article(ArticleCreate(title="C", tags=["HOME"]))

    counts = {t.name: t.article_count for t in await TagService.list_with_article_count()}
    assert counts == {"home": 2, "work": 1}


async def test_popular_tags():
    await TagService.create_tag(TagCreate(name="home", color="#111111"))
    await ArticleService.create_article(ArticleCreate(title="A", tags=["home", "orphan"]))
    await ArticleService.create_article(ArticleCreate(title="B", tags=["home"]))
    await ArticleService.create_article(ArticleCreate(title="C", tags=["zeta"]))

    popular = await TagService.popular_tags(limit=2)

    assert [(p.name, p.count) for p in popular] == [("home", 2), ("orphan", 1)]
    assert popular[0].tag_info is not None
    assert popular[0].tag_info.color == "#111111"
    assert popular[1].tag_info is None


async def test_search_folds_unicode_case():
    await TagService.create_tag(TagCreate(name="Ärger"))
    await TagService.create_tag(TagCreate(name="calm", description="ÖFFENTLICH"))
    assert [t.name for t in await TagService.list_tags(search="ärger")] == ["Ärger"]
    assert [t.name for t in await TagService.list_tags(search="öffent")] == ["calm"]
