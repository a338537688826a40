"""
API tests (REST endpoints).

Checks:
- HTTP status codes
- request and response JSON
- the common error envelope (400, 404, 409, 422)
- API key authentication
"""

import pytest
from httpx import ASGITransport, AsyncClient

from article_tags.main import app


async def _create_article(client: AsyncClient, title: str, tag_names=None) -> dict:
    response = await client.post(
        "/articles", json={"title": title, "tag_names": tag_names or []}
    )
    assert response.status_code == 201
    return response.json()


async def _create_tag(client: AsyncClient, name: str) -> dict:
    response = await client.post("/tags", json={"name": name})
    assert response.status_code == 201
    return response.json()


# ============================================================================
# AUTH AND ROOT
# ============================================================================


@pytest.mark.asyncio
async def test_missing_api_key_rejected(test_client: AsyncClient):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test/api/v1"
    ) as anonymous:
        response = await anonymous.get("/articles")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_wrong_api_key_rejected(test_client: AsyncClient):
    response = await test_client.get("/articles", headers={"X-API-Key": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_root_needs_no_api_key():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["endpoints"]["articles_tags"] == "/api/v1/articles-tags"


# ============================================================================
# ARTICLES API
# ============================================================================


@pytest.mark.asyncio
async def test_create_article(test_client: AsyncClient):
    """Test: POST /articles with tags."""
    response = await test_client.post(
        "/articles",
        json={"title": "Async SQLAlchemy", "body": "Text", "tag_names": ["Python", "ORM"]},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Async SQLAlchemy"
    assert data["published"] is False
    assert [t["name"] for t in data["tags"]] == ["orm", "python"]
    assert "id" in data
    assert "created_at" in data


@pytest.mark.asyncio
async def test_create_article_validation_error(test_client: AsyncClient):
    response = await test_client.post("/articles", json={"title": ""})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "title" in [d["field"] for d in error["details"]]


@pytest.mark.asyncio
async def test_get_article_not_found(test_client: AsyncClient):
    response = await test_client.get("/articles/999")

    assert response.status_code == 404
    assert response.json() == {
        "error": {
            "code": "NOT_FOUND",
            "message": "Article with id 999 not found",
            "details": None,
        }
    }


@pytest.mark.asyncio
async def test_list_articles_filters(test_client: AsyncClient):
    await _create_article(test_client, "Python tips", ["python"])
    await _create_article(test_client, "Go tips", ["go"])
    draft = await _create_article(test_client, "Python draft", ["python"])
    await test_client.put(f"/articles/{draft['id']}", json={"published": True})

    by_tag = (await test_client.get("/articles", params={"tag": "Python"})).json()
    assert [a["title"] for a in by_tag] == ["Python tips", "Python draft"]

    searched = (await test_client.get("/articles", params={"search": "go"})).json()
    assert [a["title"] for a in searched] == ["Go tips"]

    published = (await test_client.get("/articles", params={"published": "true"})).json()
    assert [a["title"] for a in published] == ["Python draft"]


@pytest.mark.asyncio
async def test_many_tagged_articles_read_back(test_client: AsyncClient):
    """Test: every article created in a row comes back with its tags."""
    created = []
    for i in range(10):
        created.append(await _create_article(test_client, f"Post {i}", ["shared", f"own-{i}"]))

    for i, article in enumerate(created):
        assert [t["name"] for t in article["tags"]] == [f"own-{i}", "shared"]

        fetched = await test_client.get(f"/articles/{article['id']}")
        assert fetched.status_code == 200
        assert [t["name"] for t in fetched.json()["tags"]] == [f"own-{i}", "shared"]

        added = await test_client.post(
            f"/articles/{article['id']}/tags", json={"tag_names": ["z"]}
        )
        assert added.status_code == 200
        assert [t["name"] for t in added.json()["tags"]] == [f"own-{i}", "shared", "z"]


@pytest.mark.asyncio
async def test_update_article(test_client: AsyncClient):
    article = await _create_article(test_client, "Old title")

    response = await test_client.put(f"/articles/{article['id']}", json={"title": "New title"})

    assert response.status_code == 200
    assert response.json()["title"] == "New title"


@pytest.mark.asyncio
async def test_article_tag_endpoints(test_client: AsyncClient):
    article = await _create_article(test_client, "Post", ["a"])
    url = f"/articles/{article['id']}/tags"

    added = await test_client.post(url, json={"tag_names": ["b", "a"]})
    assert [t["name"] for t in added.json()["tags"]] == ["a", "b"]

    replaced = await test_client.put(url, json={"tag_names": ["c"]})
    assert [t["name"] for t in replaced.json()["tags"]] == ["c"]

    listed = await test_client.get(url)
    assert [t["name"] for t in listed.json()] == ["c"]

    removed = await test_client.delete(f"{url}/c")
    assert removed.status_code == 200
    assert removed.json()["tags"] == []

    missing = await test_client.delete(f"{url}/c")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_article_removes_links_keeps_tags(test_client: AsyncClient):
    article = await _create_article(test_client, "Post", ["python"])

    response = await test_client.delete(f"/articles/{article['id']}")
    assert response.status_code == 204

    links = (await test_client.get("/articles-tags")).json()
    assert links["total"] == 0
    tags = (await test_client.get("/tags")).json()
    assert [t["name"] for t in tags] == ["python"]


# ============================================================================
# TAGS API
# ============================================================================


@pytest.mark.asyncio
async def test_create_tag_normalized_and_duplicate(test_client: AsyncClient):
    tag = await _create_tag(test_client, "Web Dev")
    assert tag["name"] == "web-dev"

    response = await test_client.post("/tags", json={"name": "web dev"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_delete_tag_in_use(test_client: AsyncClient):
    """Test: DELETE /tags/{id} refuses a tag in use unless force=true."""
    await _create_article(test_client, "Post", ["python"])
    tag_id = (await test_client.get("/tags")).json()[0]["id"]

    refused = await test_client.delete(f"/tags/{tag_id}")
    assert refused.status_code == 400
    assert "force" in refused.json()["error"]["message"]

    forced = await test_client.delete(f"/tags/{tag_id}", params={"force": "true"})
    assert forced.status_code == 204
    assert (await test_client.get(f"/tags/{tag_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_in_use_tag_status_ignores_tag_name(test_client: AsyncClient):
    """Test: refusing to delete a tag named "already" is still a 400."""
    article = await _create_article(test_client, "Post", ["already"])
    tag_id = article["tags"][0]["id"]

    response = await test_client.delete(f"/tags/{tag_id}")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_popular_unused_and_search(test_client: AsyncClient):
    await _create_article(test_client, "One", ["python", "web"])
    await _create_article(test_client, "Two", ["python"])
    await _create_tag(test_client, "idle")

    popular = (await test_client.get("/tags/popular", params={"limit": 2})).json()
    assert [(t["name"], t["usage_count"]) for t in popular] == [("python", 2), ("web", 1)]

    unused = (await test_client.get("/tags/unused")).json()
    assert [t["name"] for t in unused] == ["idle"]

    found = (await test_client.get("/tags/search", params={"q": "YTH"})).json()
    assert [t["name"] for t in found] == ["python"]

    cleanup = await test_client.post("/tags/cleanup")
    assert cleanup.json() == {"deleted_count": 1}


@pytest.mark.asyncio
async def test_tag_articles_stats_and_merge(test_client: AsyncClient):
    first = await _create_article(test_client, "First", ["py"])
    await _create_article(test_client, "Second", ["python"])
    tags = {t["name"]: t["id"] for t in (await test_client.get("/tags")).json()}

    articles = (await test_client.get(f"/tags/{tags['py']}/articles")).json()
    assert [a["id"] for a in articles] == [first["id"]]

    merged = await test_client.post(f"/tags/{tags['py']}/merge/{tags['python']}")
    assert merged.status_code == 200
    assert merged.json()["name"] == "python"

    stats = (await test_client.get(f"/tags/{tags['python']}/stats")).json()
    assert stats["total_articles"] == 2

    same = await test_client.post(f"/tags/{tags['python']}/merge/{tags['python']}")
    assert same.status_code == 400


@pytest.mark.asyncio
async def test_rename_tag(test_client: AsyncClient):
    tag = await _create_tag(test_client, "old")

    response = await test_client.put(f"/tags/{tag['id']}", json={"name": "New Name"})

    assert response.status_code == 200
    assert response.json()["name"] == "new-name"


# ============================================================================
# ARTICLES_TAGS API
# ============================================================================


@pytest.mark.asyncio
async def test_create_and_get_link(test_client: AsyncClient):
    article = await _create_article(test_client, "Post")
    tag = await _create_tag(test_client, "python")

    response = await test_client.post(
        "/articles-tags", json={"article_id": article["id"], "tag_id": tag["id"]}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["article_id"] == article["id"]
    assert data["tag_id"] == tag["id"]
    assert data["display_value"] == article["id"]
    assert data["article"]["title"] == "Post"
    assert data["tag"]["name"] == "python"

    fetched = await test_client.get(f"/articles-tags/{article['id']}/{tag['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == data


@pytest.mark.asyncio
async def test_create_link_errors(test_client: AsyncClient):
    article = await _create_article(test_client, "Post")
    tag = await _create_tag(test_client, "python")

    missing = await test_client.post("/articles-tags", json={"article_id": 999, "tag_id": tag["id"]})
    assert missing.status_code == 404

    invalid = await test_client.post("/articles-tags", json={"article_id": 0, "tag_id": tag["id"]})
    assert invalid.status_code == 422

    body = {"article_id": article["id"], "tag_id": tag["id"]}
    assert (await test_client.post("/articles-tags", json=body)).status_code == 201
    duplicate = await test_client.post("/articles-tags", json=body)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_list_links_page_and_list(test_client: AsyncClient):
    a = await _create_article(test_client, "A", ["x", "y"])
    b = await _create_article(test_client, "B", ["x"])
    tags = {t["name"]: t["id"] for t in (await test_client.get("/tags")).json()}

    page = (await test_client.get("/articles-tags", params={"tag_id": tags["x"]})).json()
    assert page["total"] == 2
    assert [item["article_id"] for item in page["items"]] == [a["id"], b["id"]]

    listing = (await test_client.get("/articles-tags/list")).json()
    assert listing == [
        {"article_id": a["id"], "tag_id": tags["x"], "display_value": a["id"]},
        {"article_id": a["id"], "tag_id": tags["y"], "display_value": a["id"]},
        {"article_id": b["id"], "tag_id": tags["x"], "display_value": b["id"]},
    ]


@pytest.mark.asyncio
async def test_delete_link_keeps_parents(test_client: AsyncClient):
    article = await _create_article(test_client, "Post", ["python"])
    tag_id = article["tags"][0]["id"]

    response = await test_client.delete(f"/articles-tags/{article['id']}/{tag_id}")
    assert response.status_code == 204

    assert (await test_client.get(f"/articles/{article['id']}")).status_code == 200
    assert (await test_client.get(f"/tags/{tag_id}")).status_code == 200

    again = await test_client.delete(f"/articles-tags/{article['id']}/{tag_id}")
    assert again.status_code == 404
