"""Integration tests for profile API endpoints."""

from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.models import Business, Profile
from tests.helpers import ProfileFactory, auth_headers, headers_for

Account = tuple[Profile, str]


class TestAuthentication:
    """Bearer token handling on /api/v1/profiles/me"""

    async def test_missing_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/profiles/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_invalid_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/profiles/me", headers=auth_headers("bogus"))

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authentication token"


class TestGetMe:
    """Tests for GET /api/v1/profiles/me"""

    async def test_reader(self, async_client: AsyncClient, reader: Account) -> None:
        response = await async_client.get("/api/v1/profiles/me", headers=headers_for(reader))

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["id"] == reader[0].id
        assert data["profile"]["role"] == "user"
        assert data["sections"] == ["personal", "notifications"]
        assert data["notifications"]["email_notifications"] is True
        assert data["notifications"]["marketing_updates"] is False

    async def test_business_owner_sees_businesses(
        self,
        async_client: AsyncClient,
        reader: Account,
        db_session: AsyncSession,
    ) -> None:
        db_session.add(Business(name="Fambri Farms", slug="fambri-farms", owner_id=reader[0].id))
        await db_session.commit()

        response = await async_client.get("/api/v1/profiles/me", headers=headers_for(reader))

        assert "businesses" in response.json()["sections"]

        response = await async_client.get(
            "/api/v1/profiles/me/businesses", headers=headers_for(reader)
        )
        assert response.status_code == 200
        assert [b["slug"] for b in response.json()] == ["fambri-farms"]


class TestUpdateMe:
    """Tests for PATCH /api/v1/profiles/me"""

    async def test_update_personal_info(self, async_client: AsyncClient, author: Account) -> None:
        response = await async_client.patch(
            "/api/v1/profiles/me",
            headers=headers_for(author),
            json={
                "full_name": "  <b>Jane</b> Doe ",
                "username": "jdoe",
                "bio": "Covers the council.",
                "social_links": {"twitter": "https://twitter.com/jdoe", "website": " "},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["full_name"] == "bJane/b Doe"
        assert data["username"] == "jdoe"
        assert data["social_links"] == {"twitter": "https://twitter.com/jdoe"}

    async def test_username_taken(
        self,
        async_client: AsyncClient,
        create_profile: ProfileFactory,
    ) -> None:
        await create_profile("user", username="taken")
        account = await create_profile("user")

        response = await async_client.patch(
            "/api/v1/profiles/me", headers=headers_for(account), json={"username": "taken"}
        )

        assert response.status_code == 409

    async def test_invalid_social_link(self, async_client: AsyncClient, reader: Account) -> None:
        response = await async_client.patch(
            "/api/v1/profiles/me",
            headers=headers_for(reader),
            json={"social_links": {"myspace": "https://myspace.com/x"}},
        )

        assert response.status_code == 422

    async def test_non_http_social_link(self, async_client: AsyncClient, reader: Account) -> None:
        response = await async_client.patch(
            "/api/v1/profiles/me",
            headers=headers_for(reader),
            json={"social_links": {"website": "javascript:alert(1)"}},
        )

        assert response.status_code == 422


class TestNotifications:
    """Tests for PUT /api/v1/profiles/me/notifications"""

    async def test_partial_update_is_merged(
        self, async_client: AsyncClient, reader: Account
    ) -> None:
        headers = headers_for(reader)

        response = await async_client.put(
            "/api/v1/profiles/me/notifications",
            headers=headers,
            json={"marketing_updates": True},
        )
        assert response.status_code == 200
        assert response.json()["marketing_updates"] is True

        response = await async_client.put(
            "/api/v1/profiles/me/notifications",
            headers=headers,
            json={"email_notifications": False},
        )
        data = response.json()
        assert data["marketing_updates"] is True
        assert data["email_notifications"] is False

        me = await async_client.get("/api/v1/profiles/me", headers=headers)
        assert me.json()["notifications"]["marketing_updates"] is True
        assert me.json()["notifications"]["email_notifications"] is False


class TestAvatar:
    """Tests for POST /api/v1/profiles/me/avatar"""

    async def test_upload_replaces_previous(
        self,
        async_client: AsyncClient,
        reader: Account,
        media_dir: Path,
    ) -> None:
        headers = headers_for(reader)

        first = await async_client.post(
            "/api/v1/profiles/me/avatar",
            headers=headers,
            files={"file": ("me.png", b"\x89PNG first", "image/png")},
        )
        assert first.status_code == 200
        first_url = first.json()["avatar_url"]
        assert first_url.startswith("/media/avatars/")
        first_path = media_dir / first_url.removeprefix("/media/")
        assert first_path.exists()

        second = await async_client.post(
            "/api/v1/profiles/me/avatar",
            headers=headers,
            files={"file": ("me.jpg", b"\xff\xd8 second", "image/jpeg")},
        )
        assert second.status_code == 200
        assert second.json()["avatar_url"].endswith(".jpg")
        assert not first_path.exists()

    async def test_failed_save_keeps_previous(
        self,
        async_client: AsyncClient,
        reader: Account,
        media_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        headers = headers_for(reader)
        first = await async_client.post(
            "/api/v1/profiles/me/avatar",
            headers=headers,
            files={"file": ("me.png", b"\x89PNG first", "image/png")},
        )
        first_path = media_dir / first.json()["avatar_url"].removeprefix("/media/")

        async def failing_commit(self: AsyncSession) -> None:
            raise SQLAlchemyError("database unavailable")

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)

        with pytest.raises(SQLAlchemyError):
            await async_client.post(
                "/api/v1/profiles/me/avatar",
                headers=headers,
                files={"file": ("me.jpg", b"\xff\xd8 second", "image/jpeg")},
            )

        assert first_path.exists()
        assert [p.name for p in (media_dir / "avatars").iterdir()] == [first_path.name]

    async def test_rejects_non_image(
        self,
        async_client: AsyncClient,
        reader: Account,
        media_dir: Path,
    ) -> None:
        response = await async_client.post(
            "/api/v1/profiles/me/avatar",
            headers=headers_for(reader),
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 415


class TestMyArticles:
    """Tests for GET /api/v1/profiles/me/articles"""

    async def test_lists_own_articles_in_any_status(
        self,
        async_client: AsyncClient,
        author: Account,
        editor: Account,
    ) -> None:
        for title, account in (("Mine", author), ("Theirs", editor)):
            response = await async_client.post(
                "/api/v1/articles",
                headers=headers_for(account),
                json={"title": title, "content": "<p>Body</p>"},
            )
            assert response.status_code == 201

        response = await async_client.get(
            "/api/v1/profiles/me/articles", headers=headers_for(author)
        )

        assert response.status_code == 200
        data = response.json()
        assert [a["title"] for a in data] == ["Mine"]
        assert data[0]["status"] == "draft"


class TestAdminProfiles:
    """Tests for the admin profile endpoints"""

    async def test_list_requires_admin(self, async_client: AsyncClient, editor: Account) -> None:
        response = await async_client.get("/api/v1/profiles", headers=headers_for(editor))

        assert response.status_code == 403

    async def test_list_filtered_by_role(
        self,
        async_client: AsyncClient,
        admin: Account,
        editor: Account,
        reader: Account,
    ) -> None:
        response = await async_client.get(
            "/api/v1/profiles", headers=headers_for(admin), params={"role": "editor"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == editor[0].id

    async def test_change_role(
        self,
        async_client: AsyncClient,
        admin: Account,
        reader: Account,
    ) -> None:
        response = await async_client.put(
            f"/api/v1/profiles/{reader[0].id}/role",
            headers=headers_for(admin),
            json={"role": "author"},
        )

        assert response.status_code == 200
        assert response.json()["role"] == "author"

        me = await async_client.get("/api/v1/profiles/me", headers=headers_for(reader))
        assert "content" in me.json()["sections"]

    async def test_admin_cannot_demote_self(
        self, async_client: AsyncClient, admin: Account
    ) -> None:
        response = await async_client.put(
            f"/api/v1/profiles/{admin[0].id}/role",
            headers=headers_for(admin),
            json={"role": "user"},
        )

        assert response.status_code == 400

    async def test_change_role_unknown_profile(
        self, async_client: AsyncClient, admin: Account
    ) -> None:
        response = await async_client.put(
            "/api/v1/profiles/9999/role", headers=headers_for(admin), json={"role": "author"}
        )

        assert response.status_code == 404
