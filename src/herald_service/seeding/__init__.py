"""Demo data seeding and maintenance commands.

Usage:
    from herald_service.seeding import seed_all

    async with AsyncSessionLocal() as db:
        report = await seed_all(db)
        await db.commit()
"""

from .maintenance import ClearReport, clear_all, clear_articles, clear_businesses
from .sample_data import SeedReport, seed_all
from .users import UserExistsError, create_user, list_users, rotate_token, verify_user

__all__ = [
    # Seeding
    "SeedReport",
    "seed_all",
    # Maintenance
    "ClearReport",
    "clear_all",
    "clear_articles",
    "clear_businesses",
    # Users
    "UserExistsError",
    "create_user",
    "list_users",
    "rotate_token",
    "verify_user",
]
