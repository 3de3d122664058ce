"""Tests for demo data seeding, bulk clearing and profile helpers."""

from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import authenticate
from herald_service.models import (
    Advertisement,
    Article,
    Business,
    Category,
    Media,
    Page,
    Profile,
    Tag,
    article_tags,
)
from herald_service.seeding import (
    UserExistsError,
    clear_all,
    clear_articles,
    clear_businesses,
    create_user,
    list_users,
    rotate_token,
    seed_all,
    verify_user,
)
from herald_service.storage import save_file


async def count(db: AsyncSession, table) -> int:  # type: ignore[no-untyped-def]
    return await db.scalar(select(func.count()).select_from(table)) or 0


class TestSeedAll:
    async def test_seed_empty_database(self, db_session: AsyncSession) -> None:
        report = await seed_all(db_session)
        await db_session.commit()

        assert report.created == {
            "categories": 6,
            "profiles": 8,
            "businesses": 4,
            "advertisements": 4,
            "articles": 3,
            "pages": 1,
        }
        assert report.skipped == {}
        assert len(report.tokens) == 8
        assert await count(db_session, Tag) == 9

    async def test_seed_is_idempotent(self, db_session: AsyncSession) -> None:
        await seed_all(db_session)
        await db_session.commit()

        report = await seed_all(db_session)
        await db_session.commit()

        assert report.created == {}
        assert report.skipped["articles"] == 3
        assert report.tokens == {}
        assert await count(db_session, Article) == 3

    async def test_seeded_relationships(self, db_session: AsyncSession) -> None:
        await seed_all(db_session)
        await db_session.commit()

        article = await db_session.scalar(
            select(Article)
            .where(Article.slug == "local-high-school-robotics-team-wins-regional-championship")
            .execution_options(populate_existing=True)
        )
        assert article is not None
        assert article.status == "published"
        assert article.author is not None
        assert article.author.email == "michael.rodriguez@example.com"
        assert article.category is not None
        assert article.category.slug == "community"
        assert {tag.slug for tag in article.tags} == {"education", "robotics", "students"}

        business = await db_session.scalar(
            select(Business)
            .where(Business.slug == "paddle-power")
            .execution_options(populate_existing=True)
        )
        assert business is not None
        assert business.owner is not None
        assert business.owner.email == "admin@paddlepower.co.za"

        page = await db_session.scalar(select(Page).where(Page.slug == "newsletter"))
        assert page is not None
        assert page.is_published is True

    async def test_seeded_advertisements(self, db_session: AsyncSession) -> None:
        await seed_all(db_session)
        await db_session.commit()

        ads = (await db_session.scalars(select(Advertisement).order_by(Advertisement.id))).all()

        assert [ad.position for ad in ads] == ["header", "sidebar", "content", "footer"]
        assert all(ad.is_running() for ad in ads)
        assert ads[0].title == "Fambri Farms - Special Offer"
        assert ads[0].link_url == "https://fambrifarms.co.za/"

    async def test_seeded_tokens_authenticate(self, db_session: AsyncSession) -> None:
        report = await seed_all(db_session)
        await db_session.commit()

        profile = await authenticate(db_session, report.tokens["jody.beggs@example.com"])

        assert profile is not None
        assert profile.role == "admin"


class TestClear:
    async def test_clear_articles_keeps_tags(self, db_session: AsyncSession) -> None:
        await seed_all(db_session)
        await db_session.commit()

        report = await clear_articles(db_session)
        await db_session.commit()

        assert report.deleted["articles"] == 3
        assert report.deleted["article_tags"] == 9
        assert await count(db_session, Article) == 0
        assert await count(db_session, article_tags) == 0
        assert await count(db_session, Tag) == 9

    async def test_clear_businesses(self, db_session: AsyncSession) -> None:
        await seed_all(db_session)
        await db_session.commit()

        report = await clear_businesses(db_session)
        await db_session.commit()

        assert report.deleted == {"advertisements": 4, "businesses": 4}
        assert await count(db_session, Business) == 0
        assert await count(db_session, Advertisement) == 0

    async def test_clear_all_keeps_profiles(self, db_session: AsyncSession) -> None:
        await seed_all(db_session)
        await db_session.commit()

        report = await clear_all(db_session)
        await db_session.commit()

        assert report.deleted["categories"] == 6
        assert report.deleted["pages"] == 1
        assert "profiles" not in report.deleted
        assert report.total == 3 + 9 + 4 + 4 + 6 + 1 + 9
        assert await count(db_session, Category) == 0
        assert await count(db_session, Profile) == 8

    async def test_clear_all_profiles_and_files(
        self,
        db_session: AsyncSession,
        media_dir: Path,
    ) -> None:
        await seed_all(db_session)
        key = save_file(b"\x89PNG", "images", "image/png")
        db_session.add(
            Media(
                filename=key,
                original_filename="logo.png",
                file_url=f"/media/{key}",
                mime_type="image/png",
            )
        )
        await db_session.commit()
        assert (media_dir / key).exists()

        report = await clear_all(db_session, include_profiles=True)
        await db_session.commit()

        assert report.deleted["profiles"] == 8
        assert report.deleted["media"] == 1
        assert not (media_dir / key).exists()
        assert await count(db_session, Profile) == 0


class TestUsers:
    async def test_create_user(self, db_session: AsyncSession) -> None:
        profile, token = await create_user(
            db_session, "  New.Writer@Example.com ", full_name="New Writer", role="author"
        )
        await db_session.commit()

        assert profile.email == "new.writer@example.com"
        assert profile.is_verified is True
        authenticated = await authenticate(db_session, token)
        assert authenticated is not None
        assert authenticated.id == profile.id

    async def test_create_duplicate_user(self, db_session: AsyncSession) -> None:
        await create_user(db_session, "dup@example.com")

        with pytest.raises(UserExistsError):
            await create_user(db_session, "DUP@example.com")

    async def test_unknown_role(self, db_session: AsyncSession) -> None:
        with pytest.raises(ValueError, match="Unknown role"):
            await create_user(db_session, "x@example.com", role="overlord")

    async def test_list_users_limit(self, db_session: AsyncSession) -> None:
        for n in range(3):
            await create_user(db_session, f"user{n}@example.com")
        await db_session.commit()

        users = await list_users(db_session, limit=2)

        assert len(users) == 2

    async def test_verify_user(self, db_session: AsyncSession) -> None:
        await create_user(db_session, "pending@example.com", verified=False)

        profile = await verify_user(db_session, "pending@example.com")

        assert profile is not None
        assert profile.is_verified is True
        assert await verify_user(db_session, "missing@example.com") is None

    async def test_rotate_token(self, db_session: AsyncSession) -> None:
        _, old_token = await create_user(db_session, "rotate@example.com")
        await db_session.commit()

        new_token = await rotate_token(db_session, "rotate@example.com")
        await db_session.commit()

        assert new_token is not None
        assert new_token != old_token
        assert await authenticate(db_session, old_token) is None
        assert await authenticate(db_session, new_token) is not None
        assert await rotate_token(db_session, "missing@example.com") is None
