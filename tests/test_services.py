"""
Service tests (business rules).

Checks:
- tag name normalisation and validation
- tagging articles by name, replacing and removing tags
- delete policy: articles cascade to links, tags in use need force
- direct link management by (article_id, tag_id)
"""

import pytest

from article_tags.services import (
    ArticleService,
    ArticlesTagService,
    RecordExistsError,
    RecordNotFoundError,
    TagService,
    clean_tag_name,
    normalize_tag_name,
)


# ============================================================================
# TAG NAMES
# ============================================================================


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Python Programming", "python-programming"),
        ("Web  Dev", "web-dev"),
        ("C++", "c"),
        ("Test_Tag", "test_tag"),
        ("-edge-", "edge"),
    ],
)
def test_normalize_tag_name(raw, expected):
    assert normalize_tag_name(raw) == expected


def test_clean_tag_name_rejects_empty():
    with pytest.raises(ValueError, match="cannot be empty"):
        clean_tag_name("   ")
    with pytest.raises(ValueError, match="empty after normalization"):
        clean_tag_name("+++")
    with pytest.raises(ValueError, match="longer than 50"):
        clean_tag_name("a" * 51)


# ============================================================================
# TAG SERVICE
# ============================================================================


@pytest.mark.asyncio
async def test_create_tag_normalizes_and_rejects_duplicates(test_db):
    service = TagService(test_db)

    tag = await service.create_tag("Python Programming")
    assert tag.name == "python-programming"

    with pytest.raises(RecordExistsError, match="already exists"):
        await service.create_tag("python programming")


@pytest.mark.asyncio
async def test_get_tag_not_found(test_db):
    with pytest.raises(RecordNotFoundError, match="Tag with id 999 not found"):
        await TagService(test_db).get_tag(999)


@pytest.mark.asyncio
async def test_rename_tag(test_db):
    service = TagService(test_db)
    tag = await service.create_tag("python")
    await service.create_tag("golang")

    renamed = await service.rename_tag(tag.id, "Python 3")
    assert renamed.name == "python-3"

    with pytest.raises(ValueError, match="already exists"):
        await service.rename_tag(tag.id, "golang")


@pytest.mark.asyncio
async def test_delete_tag_in_use_requires_force(test_db):
    """Test: a tag still carried by articles is only deleted with force=True."""
    article_service = ArticleService(test_db)
    tag_service = TagService(test_db)
    article = await article_service.create_article("Post", tag_names=["python"])
    tag = await tag_service.get_tag_by_name("python")

    with pytest.raises(ValueError, match="used in 1 articles"):
        await tag_service.delete_tag(tag.id)

    assert await tag_service.delete_tag(tag.id, force=True) is True

    # Links went with the tag, the article stayed
    refreshed = await article_service.get_article(article.id)
    assert refreshed.tags == []


@pytest.mark.asyncio
async def test_delete_unused_tag(test_db):
    service = TagService(test_db)
    tag = await service.create_tag("lonely")

    assert await service.delete_tag(tag.id) is True
    assert await service.get_tag_by_name("lonely") is None


@pytest.mark.asyncio
async def test_delete_refusal_is_not_a_lookup_error(test_db):
    """Test: the refusal is a plain rule violation whatever the tag is called."""
    article_service = ArticleService(test_db)
    tag_service = TagService(test_db)
    await article_service.create_article("Post", tag_names=["already", "not-found"])

    for name in ("already", "not-found"):
        tag = await tag_service.get_tag_by_name(name)
        with pytest.raises(ValueError, match="force") as exc_info:
            await tag_service.delete_tag(tag.id)
        assert not isinstance(exc_info.value, (RecordExistsError, RecordNotFoundError))


@pytest.mark.asyncio
async def test_get_or_create_tag(test_db):
    service = TagService(test_db)
    existing = await service.create_tag("python")

    found = await service.get_or_create_tag("Python")
    created = await service.get_or_create_tag("New Tag")

    assert found.id == existing.id
    assert created.id is not None
    assert created.name == "new-tag"
    assert len(await service.get_all_tags()) == 2


@pytest.mark.asyncio
async def test_merge_tags(test_db):
    """Test: articles move from source to target; an article with both keeps one link."""
    article_service = ArticleService(test_db)
    tag_service = TagService(test_db)
    both = await article_service.create_article("Both", tag_names=["py", "python"])
    only_source = await article_service.create_article("Only py", tag_names=["py"])

    source = await tag_service.get_tag_by_name("py")
    target = await tag_service.get_tag_by_name("python")

    result = await tag_service.merge_tags(source.id, target.id)

    assert result.id == target.id
    assert await tag_service.get_tag_by_name("py") is None
    for article_id in (both.id, only_source.id):
        tags = await article_service.get_article_tags(article_id)
        assert [t.name for t in tags] == ["python"]

    with pytest.raises(ValueError, match="itself"):
        await tag_service.merge_tags(target.id, target.id)


@pytest.mark.asyncio
async def test_cleanup_unused_tags(test_db):
    article_service = ArticleService(test_db)
    tag_service = TagService(test_db)
    await article_service.create_article("Post", tag_names=["used"])
    await tag_service.create_tag("unused-1")
    await tag_service.create_tag("unused-2")

    assert await tag_service.cleanup_unused_tags() == 2
    assert [t.name for t in await tag_service.get_all_tags()] == ["used"]


@pytest.mark.asyncio
async def test_tag_statistics(test_db):
    article_service = ArticleService(test_db)
    tag_service = TagService(test_db)
    await article_service.create_article("Live", published=True, tag_names=["news"])
    await article_service.create_article("Draft", tag_names=["news"])
    tag = await tag_service.get_tag_by_name("news")

    stats = await tag_service.get_tag_statistics(tag.id)

    assert stats == {
        "tag_id": tag.id,
        "tag_name": "news",
        "total_articles": 2,
        "published_articles": 1,
        "draft_articles": 1,
    }


# ============================================================================
# ARTICLE SERVICE
# ============================================================================


@pytest.mark.asyncio
async def test_create_article_with_tags(test_db):
    service = ArticleService(test_db)

    article = await service.create_article(
        "  Async SQLAlchemy  ", body="...", tag_names=["SQL Alchemy", "python", "Python"]
    )

    assert article.title == "Async SQLAlchemy"
    assert [t.name for t in article.tags] == ["python", "sql-alchemy"]


@pytest.mark.asyncio
async def test_create_article_empty_title(test_db):
    with pytest.raises(ValueError, match="title cannot be empty"):
        await ArticleService(test_db).create_article("   ")


@pytest.mark.asyncio
async def test_tags_loaded_for_many_articles_in_one_session(test_db):
    """Test: every returned article has its tags loaded, not just the first ones."""
    service = ArticleService(test_db)

    for i in range(20):
        article = await service.create_article(f"Post {i}", tag_names=["shared", f"own-{i}"])
        assert [t.name for t in article.tags] == [f"own-{i}", "shared"]

    for i, article in enumerate(await service.get_articles(tag="shared")):
        reloaded = await service.get_article(article.id)
        assert [t.name for t in reloaded.tags] == [f"own-{i}", "shared"]
        assert [t.name for t in await service.get_article_tags(article.id)] == [
            f"own-{i}",
            "shared",
        ]

    updated = await service.add_tags(article.id, ["extra"])
    assert [t.name for t in updated.tags] == ["extra", "own-19", "shared"]


@pytest.mark.asyncio
async def test_update_article_ignores_none(test_db):
    service = ArticleService(test_db)
    article = await service.create_article("Title", body="Body")

    updated = await service.update_article(article.id, title=None, published=True)

    assert updated.title == "Title"
    assert updated.body == "Body"
    assert updated.published is True


@pytest.mark.asyncio
async def test_add_tags_skips_existing(test_db):
    service = ArticleService(test_db)
    article = await service.create_article("Post", tag_names=["python"])

    updated = await service.add_tags(article.id, ["Python", "fastapi"])

    assert [t.name for t in updated.tags] == ["fastapi", "python"]


@pytest.mark.asyncio
async def test_remove_tag_keeps_tag(test_db):
    service = ArticleService(test_db)
    article = await service.create_article("Post", tag_names=["python", "web"])

    updated = await service.remove_tag(article.id, "Python")

    assert [t.name for t in updated.tags] == ["web"]
    assert await TagService(test_db).get_tag_by_name("python") is not None

    with pytest.raises(ValueError, match="not found on article"):
        await service.remove_tag(article.id, "python")
    with pytest.raises(ValueError, match="Tag 'missing' not found"):
        await service.remove_tag(article.id, "missing")


@pytest.mark.asyncio
async def test_set_tags_replaces(test_db):
    service = ArticleService(test_db)
    article = await service.create_article("Post", tag_names=["a", "b"])

    updated = await service.set_tags(article.id, ["b", "c"])
    assert [t.name for t in updated.tags] == ["b", "c"]

    cleared = await service.set_tags(article.id, [])
    assert cleared.tags == []


@pytest.mark.asyncio
async def test_delete_article_cascades_links_not_tags(test_db):
    article_service = ArticleService(test_db)
    link_service = ArticlesTagService(test_db)
    article = await article_service.create_article("Post", tag_names=["python"])
    tag = await TagService(test_db).get_tag_by_name("python")

    assert await article_service.delete_article(article.id) is True

    assert await link_service.count_links(article_id=article.id) == 0
    assert (await TagService(test_db).get_tag(tag.id)).name == "python"
    with pytest.raises(ValueError, match="not found"):
        await article_service.get_article(article.id)


@pytest.mark.asyncio
async def test_get_articles_by_tag_name_is_normalized(test_db):
    service = ArticleService(test_db)
    await service.create_article("Tagged", tag_names=["web-dev"])
    await service.create_article("Untagged")

    articles = await service.get_articles(tag="Web Dev")

    assert [a.title for a in articles] == ["Tagged"]


# ============================================================================
# ARTICLES_TAG SERVICE
# ============================================================================


@pytest.mark.asyncio
async def test_tag_article_and_untag(test_db, article_and_tag):
    article, tag = article_and_tag
    service = ArticlesTagService(test_db)

    link = await service.tag_article(article.id, tag.id)

    assert (link.article_id, link.tag_id) == (article.id, tag.id)
    assert link.article.title == "Composite keys"
    assert link.tag.name == "databases"
    assert link.display_value == article.id

    await service.untag_article(article.id, tag.id)
    assert await service.count_links() == 0
    with pytest.raises(ValueError, match="not found"):
        await service.untag_article(article.id, tag.id)


@pytest.mark.asyncio
async def test_tag_article_checks_parents_and_duplicates(test_db, article_and_tag):
    article, tag = article_and_tag
    service = ArticlesTagService(test_db)

    with pytest.raises(ValueError, match="Article with id 999 not found"):
        await service.tag_article(999, tag.id)
    with pytest.raises(ValueError, match="Tag with id 999 not found"):
        await service.tag_article(article.id, 999)

    await service.tag_article(article.id, tag.id)
    with pytest.raises(ValueError, match="already tagged"):
        await service.tag_article(article.id, tag.id)


@pytest.mark.asyncio
async def test_link_list(test_db, article_and_tag):
    article, tag = article_and_tag
    service = ArticlesTagService(test_db)
    await service.tag_article(article.id, tag.id)

    assert await service.get_link_list() == {(article.id, tag.id): article.id}
