"""
Tests for the LeylinesAPI client, driven through the ASGI test client.
"""
import pytest

from leylines_api.client import LeylinesAPI


@pytest.fixture
def api(client):
    return LeylinesAPI("http://testserver/api/", session=client)


def test_info_and_health(api):
    info, error = api.info()
    assert error is None
    assert info["status"] == "running"
    health, error = api.health()
    assert error is None
    assert health["status"] == "OK"


def test_article_round_trip(api):
    board, error = api.create_article({"title": "Plans", "tags": ["a"]})
    assert error is None

    board, error = api.update_article(board["id"], {"summary": "weekly"})
    assert error is None
    assert board["version"] == 2

    board, error = api.add_article_tags(board["id"], ["b"])
    assert board["tags"] == ["a", "b"]
    board, error = api.remove_article_tags(board["id"], ["a"])
    assert board["tags"] == ["b"]

    page, error = api.list_articles(tags=["b"], search="plan")
    assert error is None
    assert [a["id"] for a in page["articles"]] == [board["id"]]

    deleted, error = api.delete_article(board["id"])
    assert deleted is True
    assert error is None


def test_errors_are_returned_not_raised(api):
    data, error = api.get_article(999)
    assert data is None
    assert error == {"status_code": 404, "message": "Article not found"}

    deleted, error = api.delete_postit("nope")
    assert deleted is False
    assert error["status_code"] == 400


def test_postit_operations(api):
    board, _ = api.quick_create_article()
    note, error = api.create_postit(board["id"], "first", position={"x": 1, "y": 2})
    assert error is None
    other, _ = api.create_postit(board["id"], "second", color="#F87171")

    moved, error = api.move_postit(note["id"], {"x": 120, "y": 40, "zIndex": 3})
    assert moved["position"]["zIndex"] == 3

    front, _ = api.bring_to_front(other["id"])
    assert front["position"]["zIndex"] == 4

    result, error = api.bulk_update_positions(
        [{"id": note["id"], "position": {"x": 0, "y": 0}}, {"id": "x", "position": {"x": 0, "y": 0}}]
    )
    assert result["modifiedCount"] == 1
    assert result["failedIds"] == ["x"]

    updated, _ = api.update_postit(note["id"], {"content": "edited"})
    assert updated["content"] == "edited"

    listing, _ = api.list_postits(article_id=board["id"])
    assert listing["pagination"]["total"] == 2

    loaded, _ = api.get_board(board["id"])
    assert loaded["count"] == 2

    deleted, error = api.delete_postit(note["id"])
    assert deleted is True
    fetched, error = api.get_postit(note["id"])
    assert fetched is None
    assert error["status_code"] == 404


def test_tag_operations(api):
    tag, error = api.create_tag("Research", description="papers")
    assert error is None
    _, error = api.create_tag("research")
    assert error == {"status_code": 409, "message": "Tag already exists"}

    found, _ = api.get_tag_by_name("RESEARCH")
    assert found["id"] == tag["id"]

    api.create_article({"title": "A", "tags": ["Research"]})
    counted, _ = api.list_tags(with_count=True)
    assert counted[0]["articleCount"] == 1
    popular, _ = api.popular_tags(limit=5)
    assert popular[0]["name"] == "Research"

    renamed, _ = api.update_tag(tag["id"], {"name": "Reading"})
    assert renamed["name"] == "Reading"
    assert api.get_tag(tag["id"])[0]["name"] == "Reading"

    deleted, _ = api.delete_tag(tag["id"])
    assert deleted is True
    tags, error = api.list_tags()
    assert tags == []
    assert error is None
