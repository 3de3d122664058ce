"""Tests for token handling and role-based profile sections."""

from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import (
    authenticate,
    generate_token,
    hash_token,
    issue_token,
    profile_sections,
)
from herald_service.models import Business, Profile
from tests.helpers import ProfileFactory


def test_hash_token_is_sha256_hex() -> None:
    digest = hash_token("secret")

    assert len(digest) == 64
    assert digest == hash_token("secret")
    assert digest != hash_token("other")


def test_generated_tokens_are_unique() -> None:
    assert generate_token() != generate_token()


def test_issue_token_replaces_hash() -> None:
    profile = Profile(email="a@example.com")

    first = issue_token(profile)
    first_hash = profile.token_hash
    second = issue_token(profile)

    assert first != second
    assert profile.token_hash == hash_token(second)
    assert profile.token_hash != first_hash


async def test_authenticate(create_profile: ProfileFactory, db_session: AsyncSession) -> None:
    profile, token = await create_profile("author")

    found = await authenticate(db_session, token)

    assert found is not None
    assert found.id == profile.id
    assert await authenticate(db_session, "not-a-token") is None


class TestProfileSections:
    async def test_reader(self, create_profile: ProfileFactory, db_session: AsyncSession) -> None:
        profile, _ = await create_profile("user")

        assert await profile_sections(db_session, profile) == ["personal", "notifications"]

    async def test_author(self, create_profile: ProfileFactory, db_session: AsyncSession) -> None:
        profile, _ = await create_profile("author")

        assert await profile_sections(db_session, profile) == [
            "personal",
            "content",
            "notifications",
        ]

    async def test_admin(self, create_profile: ProfileFactory, db_session: AsyncSession) -> None:
        profile, _ = await create_profile("admin")

        assert await profile_sections(db_session, profile) == [
            "personal",
            "content",
            "admin",
            "notifications",
        ]

    async def test_subscriber(
        self, create_profile: ProfileFactory, db_session: AsyncSession
    ) -> None:
        profile, _ = await create_profile("premium_subscriber")

        assert await profile_sections(db_session, profile) == [
            "personal",
            "subscriber",
            "notifications",
        ]

    async def test_business_owner(
        self, create_profile: ProfileFactory, db_session: AsyncSession
    ) -> None:
        profile, _ = await create_profile("user")
        db_session.add(Business(name="Paddle Power", slug="paddle-power", owner_id=profile.id))
        await db_session.commit()

        assert await profile_sections(db_session, profile) == [
            "personal",
            "businesses",
            "notifications",
        ]
