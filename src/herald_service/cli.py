"""Command-line entry point for database setup, RSS ingestion and demo data.

Usage:
    herald init-db
    herald rss-setup [--status]
    herald rss-fetch
    herald import-url https://example.com/story [--author EMAIL] [--category SLUG]
    herald seed
    herald clear {articles,businesses,all} [--include-profiles]
    herald create-user EMAIL [--name NAME] [--role ROLE] [--username NAME]
    herald list-users [--limit N]
    herald verify-user EMAIL
    herald rotate-token EMAIL

Each command runs in one session and commits on success. Exit status is 1
when the command fails.
"""

import argparse
import asyncio
import sys
from collections.abc import Callable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.config import settings
from herald_service.database import AsyncSessionLocal, create_all, engine
from herald_service.extraction import ExtractionError, import_article_from_url
from herald_service.logging_config import (
    configure_logging,
    configure_sqlalchemy_logging,
    get_logger,
)
from herald_service.models import USER_ROLES
from herald_service.rss import format_status_table, run, setup_rss_feeds
from herald_service.rss.setup import list_sources
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

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="herald",
        description="Herald news service administration",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all tables (development; use alembic in production)")
    sub.add_parser("rss-fetch", help="Import new items from every due RSS source")

    setup = sub.add_parser("rss-setup", help="Add suggested RSS feeds for each category")
    setup.add_argument(
        "--status",
        "-s",
        action="store_true",
        help="Only show the current sources",
    )

    import_url = sub.add_parser("import-url", help="Scrape pages and store them as articles")
    import_url.add_argument("urls", nargs="+", metavar="URL")
    import_url.add_argument("--author", help="Email of the profile credited as author")
    import_url.add_argument("--category", help="Category slug (default: a news category)")

    sub.add_parser("seed", help="Create sample categories, users, businesses and articles")

    clear = sub.add_parser("clear", help="Delete content")
    clear.add_argument("target", choices=["articles", "businesses", "all"])
    clear.add_argument(
        "--include-profiles",
        action="store_true",
        help="With 'all', delete profiles as well",
    )

    create = sub.add_parser("create-user", help="Create a profile and print its API token")
    create.add_argument("email")
    create.add_argument("--name", dest="full_name", help="Full name")
    create.add_argument("--role", choices=USER_ROLES, default="user")
    create.add_argument("--username")
    create.add_argument(
        "--unverified",
        action="store_true",
        help="Leave the email unconfirmed",
    )

    users = sub.add_parser("list-users", help="Show recently created profiles")
    users.add_argument("--limit", type=int, default=10)

    verify = sub.add_parser("verify-user", help="Mark a profile's email as confirmed")
    verify.add_argument("email")

    rotate = sub.add_parser("rotate-token", help="Issue a new API token for a profile")
    rotate.add_argument("email")

    return parser


async def _rss_setup(db: AsyncSession, status_only: bool) -> int:
    if not status_only:
        report = await setup_rss_feeds(db)
        await db.commit()
        if not report.categories:
            print("No categories found. Run 'herald seed' or create categories first.")
            return 1
        print(f"Created {len(report.created)} sources, {len(report.skipped)} already existed")
        for name in report.without_suggestions:
            print(f"  No feed suggestions for category: {name}")

    print(format_status_table(await list_sources(db)))
    return 0


async def _rss_fetch(db: AsyncSession) -> int:
    summary = await run(db)
    await db.commit()
    print(
        f"Processed {summary.sources_processed}/{summary.sources_due} sources: "
        f"{summary.new_articles} new articles, {summary.errors} errors"
    )
    return 1 if summary.sources_due and summary.sources_failed == summary.sources_due else 0


async def _import_urls(
    db: AsyncSession,
    urls: Sequence[str],
    author: str | None,
    category: str | None,
) -> int:
    failed = 0
    for url in urls:
        try:
            result = await import_article_from_url(
                db, url, author_email=author, category_slug=category
            )
        except ExtractionError as e:
            logger.error("import_failed", url=url, error=str(e))
            await db.rollback()
            failed += 1
            continue

        await db.commit()
        if result.created:
            print(f"Imported {url} -> {result.slug}")
        else:
            print(f"Skipped {url} ({result.reason})")

    return 1 if failed == len(urls) else 0


async def _seed(db: AsyncSession) -> int:
    report = await seed_all(db)
    await db.commit()

    for kind, count in report.created.items():
        print(f"Created {count} {kind}")
    for kind, count in report.skipped.items():
        print(f"Skipped {count} existing {kind}")
    if report.tokens:
        print("\nAPI tokens (shown once):")
        for email, token in report.tokens.items():
            print(f"  {email}: {token}")
    return 0


async def _clear(db: AsyncSession, target: str, include_profiles: bool) -> int:
    if target == "articles":
        report = await clear_articles(db)
    elif target == "businesses":
        report = await clear_businesses(db)
    else:
        report = await clear_all(db, include_profiles=include_profiles)
    await db.commit()

    for table, count in report.deleted.items():
        print(f"{table:<22} {count:>6} deleted")
    return 0


async def _create_user(db: AsyncSession, args: argparse.Namespace) -> int:
    try:
        profile, token = await create_user(
            db,
            args.email,
            full_name=args.full_name,
            role=args.role,
            username=args.username,
            verified=not args.unverified,
        )
    except UserExistsError as e:
        print(str(e))
        return 1
    await db.commit()

    print(f"Created {profile.email} (id={profile.id}, role={profile.role})")
    print(f"API token (shown once): {token}")
    return 0


async def _list_users(db: AsyncSession, limit: int) -> int:
    profiles = await list_users(db, limit=limit)
    if not profiles:
        print("No users found")
        return 0

    for profile in profiles:
        verified = "verified" if profile.is_verified else "unverified"
        print(
            f"{profile.id:>5}  {profile.email:<40} {profile.role:<20} {verified:<11} "
            f"{profile.created_at:%Y-%m-%d %H:%M}"
        )
    return 0


async def _verify_user(db: AsyncSession, email: str) -> int:
    profile = await verify_user(db, email)
    if profile is None:
        print(f"User {email} not found")
        return 1
    await db.commit()
    print(f"User {profile.email} is verified")
    return 0


async def _rotate_token(db: AsyncSession, email: str) -> int:
    token = await rotate_token(db, email)
    if token is None:
        print(f"User {email} not found")
        return 1
    await db.commit()
    print(f"New API token for {email} (shown once): {token}")
    return 0


async def run_command(
    args: argparse.Namespace,
    session_factory: SessionFactory = AsyncSessionLocal,
) -> int:
    """Execute a parsed command and return its exit status."""
    if args.command == "init-db":
        await create_all()
        print("Tables created")
        return 0

    async with session_factory() as db:
        if args.command == "rss-setup":
            return await _rss_setup(db, args.status)
        if args.command == "rss-fetch":
            return await _rss_fetch(db)
        if args.command == "import-url":
            return await _import_urls(db, args.urls, args.author, args.category)
        if args.command == "seed":
            return await _seed(db)
        if args.command == "clear":
            return await _clear(db, args.target, args.include_profiles)
        if args.command == "create-user":
            return await _create_user(db, args)
        if args.command == "list-users":
            return await _list_users(db, args.limit)
        if args.command == "verify-user":
            return await _verify_user(db, args.email)
        if args.command == "rotate-token":
            return await _rotate_token(db, args.email)

    raise ValueError(f"Unknown command: {args.command}")


async def _main(args: argparse.Namespace) -> int:
    try:
        return await run_command(args)
    finally:
        await engine.dispose()


def main(argv: Sequence[str] | None = None) -> None:
    """Console script entry point."""
    args = build_parser().parse_args(argv)

    configure_logging(settings.log_level, settings.json_logs)
    configure_sqlalchemy_logging(settings.sqlalchemy_log_level)

    try:
        exit_code = asyncio.run(_main(args))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
    except Exception as e:
        logger.exception("command_failed", command=args.command, error=str(e))
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
