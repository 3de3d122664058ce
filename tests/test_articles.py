"""Integration tests for articles API endpoints."""

from typing import Any

import pytest
from httpx import AsyncClient

from herald_service.models import Category, Profile
from tests.helpers import ProfileFactory, headers_for

Account = tuple[Profile, str]


async def write_article(client: AsyncClient, account: Account, **fields: Any) -> dict[str, Any]:
    payload = {"title": "Untitled", "content": "<p>Body text for the story.</p>", **fields}
    response = await client.post("/api/v1/articles", headers=headers_for(account), json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def publish(
    client: AsyncClient, staff: Account, article_id: int, **body: Any
) -> dict[str, Any]:
    response = await client.post(
        f"/api/v1/articles/{article_id}/publish", headers=headers_for(staff), json=body
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestCreateArticle:
    """Tests for POST /api/v1/articles"""

    async def test_author_creates_draft(
        self,
        async_client: AsyncClient,
        author: Account,
        categories: list[Category],
    ) -> None:
        data = await write_article(
            async_client,
            author,
            title="Council approves riverfront park plan",
            content='<p onclick="x()">The council voted <b>5-2</b>.</p><script>bad()</script>',
            category_id=categories[2].id,
            tags=["Riverfront", "Parks", "  "],
        )

        assert data["slug"] == "council-approves-riverfront-park-plan"
        assert data["status"] == "draft"
        assert data["content"] == "<p>The council voted 5-2.</p>"
        assert data["excerpt"] == "The council voted 5-2."
        assert data["read_time_minutes"] == 1
        assert data["author"]["id"] == author[0].id
        assert data["category"]["slug"] == "local-news"
        assert [t["slug"] for t in data["tags"]] == ["parks", "riverfront"]
        assert data["published_at"] is None
        assert data["views"] == 0

    async def test_derived_slug_collisions_get_suffix(
        self, async_client: AsyncClient, author: Account
    ) -> None:
        first = await write_article(async_client, author, title="Same Headline")
        second = await write_article(async_client, author, title="Same Headline")

        assert first["slug"] == "same-headline"
        assert second["slug"] == "same-headline-1"

    async def test_explicit_slug_conflict(self, async_client: AsyncClient, author: Account) -> None:
        await write_article(async_client, author, title="One", slug="taken")

        response = await async_client.post(
            "/api/v1/articles",
            headers=headers_for(author),
            json={"title": "Two", "slug": "taken", "content": "<p>x</p>"},
        )

        assert response.status_code == 409

    async def test_unknown_category(self, async_client: AsyncClient, author: Account) -> None:
        response = await async_client.post(
            "/api/v1/articles",
            headers=headers_for(author),
            json={"title": "T", "content": "<p>x</p>", "category_id": 999},
        )

        assert response.status_code == 400

    async def test_authors_cannot_publish_on_create(
        self, async_client: AsyncClient, author: Account
    ) -> None:
        response = await async_client.post(
            "/api/v1/articles",
            headers=headers_for(author),
            json={"title": "T", "content": "<p>x</p>", "status": "published"},
        )

        assert response.status_code == 422

    async def test_empty_content_after_sanitizing(
        self, async_client: AsyncClient, author: Account
    ) -> None:
        response = await async_client.post(
            "/api/v1/articles",
            headers=headers_for(author),
            json={"title": "T", "content": "<script>alert(1)</script>"},
        )

        assert response.status_code == 422

    async def test_overlong_tag_rejected(self, async_client: AsyncClient, author: Account) -> None:
        response = await async_client.post(
            "/api/v1/articles",
            headers=headers_for(author),
            json={"title": "T", "content": "<p>x</p>", "tags": ["parks", "p" * 101]},
        )

        assert response.status_code == 422

    async def test_tag_at_column_width_accepted(
        self, async_client: AsyncClient, author: Account
    ) -> None:
        data = await write_article(async_client, author, title="T", tags=["p" * 100])

        assert data["tags"][0]["name"] == "p" * 100

    async def test_reader_forbidden(self, async_client: AsyncClient, reader: Account) -> None:
        response = await async_client.post(
            "/api/v1/articles",
            headers=headers_for(reader),
            json={"title": "T", "content": "<p>x</p>"},
        )

        assert response.status_code == 403

    async def test_anonymous_unauthorized(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/v1/articles", json={"title": "T", "content": "<p>x</p>"}
        )

        assert response.status_code == 401


class TestPublicReads:
    """Tests for GET /api/v1/articles and GET /api/v1/articles/{slug}"""

    async def test_drafts_are_hidden(self, async_client: AsyncClient, author: Account) -> None:
        draft = await write_article(async_client, author, title="Secret draft")

        listing = await async_client.get("/api/v1/articles")
        single = await async_client.get(f"/api/v1/articles/{draft['slug']}")

        assert listing.json()["total"] == 0
        assert single.status_code == 404

    async def test_published_listing(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        older = await write_article(async_client, author, title="Older")
        newer = await write_article(async_client, author, title="Newer")
        await publish(async_client, editor, older["id"], published_at="2026-01-01T08:00:00Z")
        await publish(async_client, editor, newer["id"], published_at="2026-02-01T08:00:00Z")

        response = await async_client.get("/api/v1/articles", params={"limit": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["limit"] == 1
        assert data["offset"] == 0
        assert [a["slug"] for a in data["items"]] == ["newer"]

    async def test_filters(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
        categories: list[Category],
    ) -> None:
        tech = await write_article(
            async_client,
            author,
            title="Robot lab opens",
            category_id=categories[0].id,
            tags=["Robotics"],
        )
        sport = await write_article(
            async_client,
            author,
            title="Rugby final",
            content="<p>The Sharks won the final.</p>",
            category_id=categories[1].id,
        )
        for article in (tech, sport):
            await publish(async_client, editor, article["id"])

        by_category = await async_client.get("/api/v1/articles", params={"category": "sports"})
        by_tag = await async_client.get("/api/v1/articles", params={"tag": "robotics"})
        by_search = await async_client.get("/api/v1/articles", params={"search": "SHARKS"})

        assert [a["slug"] for a in by_category.json()["items"]] == ["rugby-final"]
        assert [a["slug"] for a in by_tag.json()["items"]] == ["robot-lab-opens"]
        assert [a["slug"] for a in by_search.json()["items"]] == ["rugby-final"]

    async def test_reads_count_views(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        article = await write_article(async_client, author, title="Popular")
        await publish(async_client, editor, article["id"])

        await async_client.get("/api/v1/articles/popular")
        response = await async_client.get("/api/v1/articles/popular")

        assert response.status_code == 200
        assert response.json()["views"] == 2

    async def test_like_and_share(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        article = await write_article(async_client, author, title="Shared")
        await publish(async_client, editor, article["id"])

        await async_client.post("/api/v1/articles/shared/like")
        liked = await async_client.post("/api/v1/articles/shared/like")
        shared = await async_client.post("/api/v1/articles/shared/share")

        assert liked.json() == {"id": article["id"], "views": 0, "likes": 2, "shares": 0}
        assert shared.json()["shares"] == 1

    async def test_like_unpublished(self, async_client: AsyncClient, author: Account) -> None:
        await write_article(async_client, author, title="Hidden")

        response = await async_client.post("/api/v1/articles/hidden/like")

        assert response.status_code == 404

    async def test_related_articles(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
        categories: list[Category],
    ) -> None:
        tech_id, sports_id = categories[0].id, categories[1].id
        specs = [
            ("Tech one", tech_id),
            ("Tech two", tech_id),
            ("Tech three", tech_id),
            ("Sport one", sports_id),
        ]
        for title, category_id in specs:
            article = await write_article(
                async_client, author, title=title, category_id=category_id
            )
            await publish(async_client, editor, article["id"])

        response = await async_client.get("/api/v1/articles/tech-one/related")

        assert response.status_code == 200
        slugs = [a["slug"] for a in response.json()]
        assert set(slugs[:2]) == {"tech-two", "tech-three"}
        assert slugs[2:] == ["sport-one"]


class TestUpdateArticle:
    """Tests for PATCH /api/v1/articles/{article_id}"""

    async def test_author_updates_own_article(
        self, async_client: AsyncClient, author: Account
    ) -> None:
        article = await write_article(async_client, author, title="Draft", tags=["Old"])

        response = await async_client.patch(
            f"/api/v1/articles/{article['id']}",
            headers=headers_for(author),
            json={
                "title": "Final title",
                "tags": ["New"],
                "content": "<p>" + "word " * 450 + "</p>",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Final title"
        assert data["slug"] == "draft"
        assert [t["slug"] for t in data["tags"]] == ["new"]
        assert data["read_time_minutes"] == 3

    async def test_other_author_forbidden(
        self,
        async_client: AsyncClient,
        author: Account,
        create_profile: ProfileFactory,
    ) -> None:
        article = await write_article(async_client, author)
        other = await create_profile("author")

        response = await async_client.patch(
            f"/api/v1/articles/{article['id']}",
            headers=headers_for(other),
            json={"title": "Hijacked"},
        )

        assert response.status_code == 403

    async def test_staff_can_edit_any_article(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        article = await write_article(async_client, author)

        response = await async_client.patch(
            f"/api/v1/articles/{article['id']}",
            headers=headers_for(editor),
            json={"subtitle": "Edited by the desk"},
        )

        assert response.status_code == 200
        assert response.json()["subtitle"] == "Edited by the desk"

    async def test_slug_conflict(self, async_client: AsyncClient, author: Account) -> None:
        await write_article(async_client, author, title="First")
        second = await write_article(async_client, author, title="Second")

        response = await async_client.patch(
            f"/api/v1/articles/{second['id']}",
            headers=headers_for(author),
            json={"slug": "first"},
        )

        assert response.status_code == 409

    async def test_unknown_article(self, async_client: AsyncClient, editor: Account) -> None:
        response = await async_client.patch(
            "/api/v1/articles/999", headers=headers_for(editor), json={"title": "x"}
        )

        assert response.status_code == 404


class TestPublishArticle:
    """Tests for POST /api/v1/articles/{article_id}/publish"""

    async def test_publish_stamps_time(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        article = await write_article(async_client, author)

        data = await publish(async_client, editor, article["id"])

        assert data["status"] == "published"
        assert data["published_at"] is not None

    @pytest.mark.parametrize("status", ["featured", "archived"])
    async def test_other_statuses(
        self,
        async_client: AsyncClient,
        author: Account,
        admin: Account,
        status: str,
    ) -> None:
        article = await write_article(async_client, author)

        data = await publish(async_client, admin, article["id"], status=status)

        assert data["status"] == status

    async def test_author_cannot_publish(self, async_client: AsyncClient, author: Account) -> None:
        article = await write_article(async_client, author)

        response = await async_client.post(
            f"/api/v1/articles/{article['id']}/publish", headers=headers_for(author), json={}
        )

        assert response.status_code == 403


class TestDeleteArticle:
    """Tests for DELETE /api/v1/articles/{article_id}"""

    async def test_soft_delete(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        article = await write_article(async_client, author, title="Gone soon")
        await publish(async_client, editor, article["id"])

        response = await async_client.delete(
            f"/api/v1/articles/{article['id']}", headers=headers_for(author)
        )
        assert response.status_code == 204

        assert (await async_client.get("/api/v1/articles/gone-soon")).status_code == 404
        assert (await async_client.get("/api/v1/articles")).json()["total"] == 0

        again = await async_client.delete(
            f"/api/v1/articles/{article['id']}", headers=headers_for(author)
        )
        assert again.status_code == 404

    async def test_reader_cannot_delete(
        self,
        async_client: AsyncClient,
        author: Account,
        reader: Account,
    ) -> None:
        article = await write_article(async_client, author)

        response = await async_client.delete(
            f"/api/v1/articles/{article['id']}", headers=headers_for(reader)
        )

        assert response.status_code == 403
