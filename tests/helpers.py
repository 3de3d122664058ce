"""Shared helpers for API tests."""

from collections.abc import Awaitable, Callable

from herald_service.models import Profile

ProfileFactory = Callable[..., Awaitable[tuple[Profile, str]]]


def auth_headers(token: str) -> dict[str, str]:
    """Bearer authorization header for a profile token."""
    return {"Authorization": f"Bearer {token}"}


def headers_for(account: tuple[Profile, str]) -> dict[str, str]:
    """Headers for a ``(profile, token)`` fixture value."""
    return auth_headers(account[1])
