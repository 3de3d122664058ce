"""Integration tests for static page endpoints."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.models import Page, Profile
from tests.helpers import headers_for

Account = tuple[Profile, str]


class TestPublicPages:
    """Tests for GET /api/v1/pages"""

    async def test_menu_order(self, async_client: AsyncClient, db_session: AsyncSession) -> None:
        db_session.add_all(
            [
                Page(title="Contact", slug="contact", is_published=True, is_in_menu=True, menu_order=2),
                Page(title="About", slug="about", is_published=True, is_in_menu=True, menu_order=1),
                Page(title="Drafted", slug="drafted", is_published=False, is_in_menu=True),
                Page(title="Terms", slug="terms", is_published=True, is_in_menu=False),
            ]
        )
        await db_session.commit()

        response = await async_client.get("/api/v1/pages/menu")

        assert response.status_code == 200
        assert response.json() == [
            {"title": "About", "slug": "about", "menu_order": 1},
            {"title": "Contact", "slug": "contact", "menu_order": 2},
        ]

    async def test_unpublished_page_hidden(
        self, async_client: AsyncClient, db_session: AsyncSession
    ) -> None:
        db_session.add(Page(title="Secret", slug="secret", is_published=False))
        await db_session.commit()

        response = await async_client.get("/api/v1/pages/secret")

        assert response.status_code == 404


class TestManagePages:
    """Tests for POST/PATCH /api/v1/pages (staff)"""

    async def test_create_sanitizes(self, async_client: AsyncClient, editor: Account) -> None:
        response = await async_client.post(
            "/api/v1/pages",
            headers=headers_for(editor),
            json={
                "title": "  Newsletter  ",
                "slug": "newsletter",
                "content": '<p onclick="x()">Sign up<script>alert(1)</script></p>',
                "is_published": True,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Newsletter"
        assert data["content"] == "<p>Sign up</p>"
        assert data["page_type"] == "static"

        public = await async_client.get("/api/v1/pages/newsletter")
        assert public.status_code == 200

    async def test_create_duplicate_slug(
        self, async_client: AsyncClient, editor: Account, db_session: AsyncSession
    ) -> None:
        db_session.add(Page(title="About", slug="about"))
        await db_session.commit()

        response = await async_client.post(
            "/api/v1/pages", headers=headers_for(editor), json={"title": "About us", "slug": "about"}
        )

        assert response.status_code == 409

    async def test_invalid_slug(self, async_client: AsyncClient, editor: Account) -> None:
        response = await async_client.post(
            "/api/v1/pages", headers=headers_for(editor), json={"title": "X", "slug": "Not Valid"}
        )

        assert response.status_code == 422

    async def test_requires_staff(self, async_client: AsyncClient, author: Account) -> None:
        response = await async_client.post(
            "/api/v1/pages", headers=headers_for(author), json={"title": "X", "slug": "x"}
        )

        assert response.status_code == 403

    async def test_update(
        self, async_client: AsyncClient, admin: Account, db_session: AsyncSession
    ) -> None:
        page = Page(title="About", slug="about", menu_order=3)
        db_session.add(page)
        await db_session.commit()

        response = await async_client.patch(
            f"/api/v1/pages/{page.id}",
            headers=headers_for(admin),
            json={"is_published": True, "is_in_menu": True, "menu_order": None},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_published"] is True
        assert data["menu_order"] == 3

        menu = await async_client.get("/api/v1/pages/menu")
        assert [item["slug"] for item in menu.json()] == ["about"]

    async def test_update_unknown(self, async_client: AsyncClient, admin: Account) -> None:
        response = await async_client.patch(
            "/api/v1/pages/404", headers=headers_for(admin), json={"title": "X"}
        )

        assert response.status_code == 404
