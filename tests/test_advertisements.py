"""Integration tests for advertisement API endpoints."""

from datetime import timedelta
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.database import utc_now
from herald_service.models import Advertisement, Business, Profile
from tests.helpers import headers_for

Account = tuple[Profile, str]


@pytest.fixture
async def shop(db_session: AsyncSession, author: Account) -> Business:
    """Business owned by the ``author`` profile."""
    business = Business(
        name="Corner Bakery",
        slug="corner-bakery",
        website_url="https://bakery.example.com/",
        owner_id=author[0].id,
    )
    db_session.add(business)
    await db_session.commit()
    return business


def ad_payload(business: Business, **fields: Any) -> dict[str, Any]:
    return {
        "business_id": business.id,
        "title": "Fresh sourdough daily",
        "image_url": "https://bakery.example.com/banner.jpg",
        "link_url": "https://bakery.example.com/",
        "position": "sidebar",
        "start_date": (utc_now() - timedelta(hours=1)).isoformat(),
        **fields,
    }


async def add_ad(db: AsyncSession, business: Business, **fields: Any) -> Advertisement:
    values = {
        "business_id": business.id,
        "title": "Bread sale",
        "image_url": "https://bakery.example.com/sale.jpg",
        "position": "header",
        "status": "active",
        "start_date": utc_now() - timedelta(days=1),
        **fields,
    }
    ad = Advertisement(**values)
    db.add(ad)
    await db.commit()
    return ad


class TestPlaceAdvertisement:
    """Tests for POST /api/v1/advertisements"""

    async def test_owner_ad_waits_for_approval(
        self, async_client: AsyncClient, author: Account, shop: Business
    ) -> None:
        response = await async_client.post(
            "/api/v1/advertisements",
            headers=headers_for(author),
            json=ad_payload(shop, title="  Fresh sourdough daily  "),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending_approval"
        assert data["title"] == "Fresh sourdough daily"
        assert data["impressions"] == 0

        public = await async_client.get("/api/v1/advertisements")
        assert public.json()["total"] == 0

    async def test_staff_ad_is_active(
        self, async_client: AsyncClient, editor: Account, shop: Business
    ) -> None:
        response = await async_client.post(
            "/api/v1/advertisements", headers=headers_for(editor), json=ad_payload(shop)
        )

        assert response.status_code == 201
        assert response.json()["status"] == "active"

        public = await async_client.get("/api/v1/advertisements")
        assert [ad["id"] for ad in public.json()["items"]] == [response.json()["id"]]

    async def test_owner_cannot_set_status(
        self, async_client: AsyncClient, author: Account, shop: Business
    ) -> None:
        response = await async_client.post(
            "/api/v1/advertisements",
            headers=headers_for(author),
            json=ad_payload(shop, status="active"),
        )

        assert response.status_code == 403

    async def test_other_profile_forbidden(
        self, async_client: AsyncClient, reader: Account, shop: Business
    ) -> None:
        response = await async_client.post(
            "/api/v1/advertisements", headers=headers_for(reader), json=ad_payload(shop)
        )

        assert response.status_code == 403

    async def test_unknown_business(
        self, async_client: AsyncClient, editor: Account, shop: Business
    ) -> None:
        response = await async_client.post(
            "/api/v1/advertisements",
            headers=headers_for(editor),
            json=ad_payload(shop, business_id=shop.id + 100),
        )

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "fields",
        [
            {"position": "popup"},
            {"title": ""},
            {"title": "x" * 101},
            {"image_url": "not-a-url"},
            {"description": "d" * 501},
        ],
    )
    async def test_validation(
        self,
        async_client: AsyncClient,
        author: Account,
        shop: Business,
        fields: dict[str, Any],
    ) -> None:
        response = await async_client.post(
            "/api/v1/advertisements", headers=headers_for(author), json=ad_payload(shop, **fields)
        )

        assert response.status_code == 422

    async def test_end_before_start(
        self, async_client: AsyncClient, author: Account, shop: Business
    ) -> None:
        start = utc_now()
        response = await async_client.post(
            "/api/v1/advertisements",
            headers=headers_for(author),
            json=ad_payload(
                shop,
                start_date=start.isoformat(),
                end_date=(start - timedelta(days=1)).isoformat(),
            ),
        )

        assert response.status_code == 422

    async def test_anonymous_unauthorized(
        self, async_client: AsyncClient, shop: Business
    ) -> None:
        response = await async_client.post("/api/v1/advertisements", json=ad_payload(shop))

        assert response.status_code == 401


class TestServing:
    """Tests for GET /api/v1/advertisements and the counters"""

    async def test_only_running_ads_listed(
        self, async_client: AsyncClient, db_session: AsyncSession, shop: Business
    ) -> None:
        now = utc_now()
        running = await add_ad(db_session, shop, end_date=now + timedelta(days=5))
        sidebar = await add_ad(db_session, shop, position="sidebar")
        await add_ad(db_session, shop, start_date=now + timedelta(days=1))
        await add_ad(db_session, shop, end_date=now - timedelta(hours=1))
        await add_ad(db_session, shop, status="paused")

        response = await async_client.get("/api/v1/advertisements")

        assert response.status_code == 200
        assert {ad["id"] for ad in response.json()["items"]} == {running.id, sidebar.id}

        header = await async_client.get("/api/v1/advertisements", params={"position": "header"})
        assert [ad["id"] for ad in header.json()["items"]] == [running.id]

    async def test_counters(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        author: Account,
        shop: Business,
    ) -> None:
        ad = await add_ad(db_session, shop)

        for _ in range(2):
            response = await async_client.post(f"/api/v1/advertisements/{ad.id}/impression")
            assert response.status_code == 204
        click = await async_client.post(f"/api/v1/advertisements/{ad.id}/click")
        assert click.status_code == 204

        listing = await async_client.get(
            f"/api/v1/advertisements/business/{shop.id}", headers=headers_for(author)
        )
        stats = listing.json()["items"][0]
        assert stats["impressions"] == 2
        assert stats["clicks"] == 1

    async def test_counters_ignore_stopped_ads(
        self, async_client: AsyncClient, db_session: AsyncSession, shop: Business
    ) -> None:
        ad = await add_ad(db_session, shop, status="paused")

        impression = await async_client.post(f"/api/v1/advertisements/{ad.id}/impression")
        click = await async_client.post("/api/v1/advertisements/999/click")

        assert impression.status_code == 404
        assert click.status_code == 404


class TestManageAdvertisement:
    """Tests for PATCH/DELETE /api/v1/advertisements/{id}"""

    async def test_owner_edits_staff_approves(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        author: Account,
        editor: Account,
        shop: Business,
    ) -> None:
        ad = await add_ad(db_session, shop, status="pending_approval")
        url = f"/api/v1/advertisements/{ad.id}"

        edited = await async_client.patch(
            url, headers=headers_for(author), json={"title": "Half-price rolls", "position": None}
        )
        assert edited.status_code == 200
        assert edited.json()["title"] == "Half-price rolls"
        assert edited.json()["position"] == "header"

        approve = {"status": "active"}
        refused = await async_client.patch(url, headers=headers_for(author), json=approve)
        assert refused.status_code == 403

        approved = await async_client.patch(url, headers=headers_for(editor), json=approve)
        assert approved.status_code == 200
        assert approved.json()["status"] == "active"

    async def test_update_schedule_checked(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        author: Account,
        shop: Business,
    ) -> None:
        ad = await add_ad(db_session, shop)

        response = await async_client.patch(
            f"/api/v1/advertisements/{ad.id}",
            headers=headers_for(author),
            json={"end_date": (utc_now() - timedelta(days=30)).isoformat()},
        )

        assert response.status_code == 422

    async def test_delete(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        author: Account,
        reader: Account,
        shop: Business,
    ) -> None:
        ad = await add_ad(db_session, shop)
        url = f"/api/v1/advertisements/{ad.id}"

        forbidden = await async_client.delete(url, headers=headers_for(reader))
        deleted = await async_client.delete(url, headers=headers_for(author))
        missing = await async_client.delete(url, headers=headers_for(author))

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        assert missing.status_code == 404

    async def test_business_listing_restricted(
        self, async_client: AsyncClient, reader: Account, shop: Business
    ) -> None:
        response = await async_client.get(
            f"/api/v1/advertisements/business/{shop.id}", headers=headers_for(reader)
        )

        assert response.status_code == 403
