"""Integration tests for category and tag endpoints."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.models import Article, Category, Profile
from tests.helpers import headers_for

Account = tuple[Profile, str]


class TestCategories:
    """Tests for /api/v1/categories"""

    async def test_list_ordered_by_name(
        self, async_client: AsyncClient, categories: list[Category]
    ) -> None:
        response = await async_client.get("/api/v1/categories")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [c["slug"] for c in data["items"]] == ["local-news", "sports", "technology"]
        assert data["items"][1]["keywords"] == ["rugby", "cricket"]

    async def test_get_by_slug(self, async_client: AsyncClient, categories: list[Category]) -> None:
        response = await async_client.get("/api/v1/categories/sports")

        assert response.status_code == 200
        assert response.json()["name"] == "Sports"

    async def test_get_unknown(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/categories/nope")

        assert response.status_code == 404

    async def test_create_derives_slug(self, async_client: AsyncClient, editor: Account) -> None:
        response = await async_client.post(
            "/api/v1/categories",
            headers=headers_for(editor),
            json={"name": "Arts & Culture", "keywords": [" Theatre ", "", "MUSIC"]},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "arts-culture"
        assert data["keywords"] == ["theatre", "music"]
        assert data["color"] == "#3B82F6"

    async def test_create_duplicate(
        self,
        async_client: AsyncClient,
        editor: Account,
        categories: list[Category],
    ) -> None:
        response = await async_client.post(
            "/api/v1/categories", headers=headers_for(editor), json={"name": "Sports"}
        )

        assert response.status_code == 409

    async def test_create_requires_staff(self, async_client: AsyncClient, author: Account) -> None:
        response = await async_client.post(
            "/api/v1/categories", headers=headers_for(author), json={"name": "Weather"}
        )

        assert response.status_code == 403

    async def test_category_articles(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        categories: list[Category],
    ) -> None:
        sports = categories[1]
        db_session.add_all(
            [
                Article(
                    title="Match report",
                    slug="match-report",
                    content="<p>x</p>",
                    status="published",
                    category_id=sports.id,
                ),
                Article(
                    title="Unfinished",
                    slug="unfinished",
                    content="<p>x</p>",
                    status="draft",
                    category_id=sports.id,
                ),
            ]
        )
        await db_session.commit()

        response = await async_client.get("/api/v1/categories/sports/articles")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["slug"] == "match-report"


class TestTags:
    """Tests for /api/v1/tags"""

    async def test_create_and_list(self, async_client: AsyncClient, editor: Account) -> None:
        created = await async_client.post(
            "/api/v1/tags", headers=headers_for(editor), json={"name": "Farmers Market"}
        )
        assert created.status_code == 201
        assert created.json()["slug"] == "farmers-market"

        duplicate = await async_client.post(
            "/api/v1/tags", headers=headers_for(editor), json={"name": "farmers market"}
        )
        assert duplicate.status_code == 409

        listing = await async_client.get("/api/v1/tags")
        assert listing.json()["total"] == 1

    async def test_blank_name(self, async_client: AsyncClient, editor: Account) -> None:
        response = await async_client.post(
            "/api/v1/tags", headers=headers_for(editor), json={"name": "<>"}
        )

        assert response.status_code == 422
