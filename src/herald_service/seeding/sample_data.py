"""Demo content: categories, users, businesses, adverts, articles and the newsletter page.

Every seeder is idempotent: rows are matched by slug (or email for
profiles) and existing rows are left untouched.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.content import estimate_reading_time, extract_excerpt
from herald_service.database import utc_now
from herald_service.models import (
    AD_POSITIONS,
    Advertisement,
    Article,
    Business,
    Category,
    Page,
    Profile,
)
from herald_service.rss.processor import get_or_create_tags

from .users import create_user, get_profile_by_email

logger = logging.getLogger(__name__)


CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Local News",
        "slug": "local-news",
        "description": "News from Hartbeespoort and the surrounding area",
        "color": "#3B82F6",
        "keywords": ["council", "municipality", "residents", "police", "roads"],
    },
    {
        "name": "Business",
        "slug": "business",
        "description": "Local businesses, openings and the economy",
        "color": "#10B981",
        "keywords": ["economy", "market", "company", "startup", "retail"],
    },
    {
        "name": "Community",
        "slug": "community",
        "description": "Events, schools and people making a difference",
        "color": "#F59E0B",
        "keywords": ["school", "charity", "volunteer", "festival", "church"],
    },
    {
        "name": "Sports",
        "slug": "sports",
        "description": "Local clubs, schools and national teams",
        "color": "#EF4444",
        "keywords": ["rugby", "cricket", "soccer", "match", "tournament"],
    },
    {
        "name": "Technology",
        "slug": "technology",
        "description": "Gadgets, software and the digital economy",
        "color": "#8B5CF6",
        "keywords": ["software", "internet", "robotics", "ai", "startup"],
    },
    {
        "name": "Entertainment",
        "slug": "entertainment",
        "description": "Music, film, food and things to do",
        "color": "#EC4899",
        "keywords": ["music", "film", "concert", "restaurant", "theatre"],
    },
]

TEST_USERS: list[dict[str, Any]] = [
    {
        "email": "mark.grey@example.com",
        "full_name": "Mark Grey",
        "role": "admin",
        "bio": "Site administrator and article author",
    },
    {
        "email": "jody.beggs@example.com",
        "full_name": "Jody Beggs",
        "role": "admin",
        "bio": "Site administrator",
    },
    {
        "email": "sarah.mitchell@example.com",
        "full_name": "Sarah Mitchell",
        "username": "smitchell",
        "role": "editor",
        "bio": "Managing editor",
    },
    {
        "email": "michael.rodriguez@example.com",
        "full_name": "Michael Rodriguez",
        "username": "mrodriguez",
        "role": "author",
        "bio": "Community reporter",
    },
    {
        "email": "admin@fambrifarms.co.za",
        "full_name": "Fambri Farms Admin",
        "role": "user",
        "bio": "Business owner - Fambri Farms",
    },
    {
        "email": "admin@paddlepower.co.za",
        "full_name": "Paddle Power Admin",
        "role": "user",
        "bio": "Business owner - Paddle Power",
    },
    {
        "email": "admin@rustyfeather.co.za",
        "full_name": "Rusty Feather Admin",
        "role": "user",
        "bio": "Business owner - The Rusty Feather",
    },
    {
        "email": "admin@interweb-solutions.co.za",
        "full_name": "Interweb Solutions Admin",
        "role": "user",
        "bio": "Business owner - Interweb Solutions",
    },
]


def _weekly_hours(open_time: str, close_time: str, closed: tuple[str, ...] = ()) -> dict[str, Any]:
    days = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    return {
        day: {"closed": True} if day in closed else {"open": open_time, "close": close_time}
        for day in days
    }


BUSINESSES: list[dict[str, Any]] = [
    {
        "owner_email": "admin@fambrifarms.co.za",
        "name": "Fambri Farms",
        "slug": "fambri-farms",
        "description": (
            "Family owned and run farm specializing in fine herbs and vegetables, "
            "situated at the foot of the Magaliesburg mountain range in Hartbeespoort."
        ),
        "long_description": (
            "Back in 2014 a run-down old farm was acquired by someone who saw potential "
            "in it. Production started on a small scale: ten beds became twenty, twenty "
            "became sixty, until production reached two hectares and Fambri Farms was "
            "formed in 2016."
        ),
        "industry": "Agriculture & Fresh Produce",
        "website_url": "https://fambrifarms.co.za/",
        "phone": "+27 84 504 8586",
        "email": "info@fambrifarms.co.za",
        "address": "BR1601, Hartbeeshoek Road",
        "city": "Broederstroom",
        "state": "North West",
        "zip_code": "0260",
        "services": [
            "Fresh Herbs",
            "Vegetables",
            "Animal Feed",
            "Sustainable Farming",
            "Pomegranate Orchard",
            "Coriander",
            "Chives",
            "Lettuce Varieties",
            "Swiss Chard",
            "Rocket",
        ],
        "business_hours": _weekly_hours("07:00", "17:00", closed=("sunday",)),
        "social_links": {"website": "https://fambrifarms.co.za/"},
        "rating": 4.9,
        "review_count": 28,
        "is_verified": True,
        "seo_title": "Fambri Farms - Fresh Herbs & Vegetables in Hartbeespoort",
    },
    {
        "owner_email": "admin@paddlepower.co.za",
        "name": "Paddle Power",
        "slug": "paddle-power",
        "description": (
            "Adventure company offering river rafting, hiking, abseiling and "
            "teambuilding activities on the beautiful Crocodile River."
        ),
        "long_description": (
            "On the banks of the Crocodile River, where wildlife, nature and wonder are "
            "ready and waiting to show you and your family the thrill of the outdoors. "
            "Less than 40 minutes from Pretoria and Joburg."
        ),
        "industry": "Adventure Tourism",
        "website_url": "https://paddlepower.co.za/",
        "phone": "071 559 3081",
        "email": "info@paddlepower.co.za",
        "address": "Farm 237, Crocodile Rd, Entrance T-junction R512 & R104, Broederstroom",
        "city": "Hartbeespoort",
        "state": "North West",
        "zip_code": "0216",
        "services": ["River Rafting", "Hiking", "Abseiling", "Teambuilding", "Restaurant"],
        "business_hours": _weekly_hours("08:00", "17:00"),
        "social_links": {"website": "https://paddlepower.co.za/"},
        "rating": 4.8,
        "review_count": 45,
        "is_verified": True,
        "seo_title": "Paddle Power - Adventure Activities in Hartbeespoort",
    },
    {
        "owner_email": "admin@rustyfeather.co.za",
        "name": "The Rusty Feather",
        "slug": "the-rusty-feather",
        "description": (
            "A hidden gem and local favourite - rustic bistro, bar, adventure hub, and "
            "library on the waterfront of the Crocodile River."
        ),
        "long_description": (
            "Old bones rejuvenated into a relaxed, rustic bistro, bar, adventure hub and "
            "honesty library on the waterfront of the Crocodile River. Dog friendly."
        ),
        "industry": "Restaurant & Adventure Tourism",
        "website_url": "https://rustyfeather.co.za/",
        "phone": "079 980 7743",
        "email": "hello@rustyfeather.co.za",
        "address": "Farm 237, Crocodile Rd",
        "city": "Broederstroom, Hartbeespoort",
        "state": "North West",
        "zip_code": "0216",
        "services": ["Bistro", "Bar", "Craft Beer", "Hiking Trails", "Outdoor Cinema", "Library"],
        "business_hours": _weekly_hours("09:00", "21:00", closed=("monday",)),
        "social_links": {"website": "https://rustyfeather.co.za/"},
        "rating": 4.7,
        "review_count": 62,
        "is_verified": True,
        "seo_title": "The Rusty Feather - Bistro & Adventure Hub on the Crocodile River",
    },
    {
        "owner_email": "admin@interweb-solutions.co.za",
        "name": "Interweb Solutions",
        "slug": "interweb-solutions",
        "description": (
            "Professional web application development services for modern businesses "
            "and startups."
        ),
        "long_description": (
            "A web development company specializing in modern web applications, IoT "
            "solutions and digital transformation services."
        ),
        "industry": "Technology",
        "website_url": "https://interweb-solutions.co.za",
        "phone": "0725235515",
        "email": "info@interweb-solutions.co.za",
        "address": "Hartbeespoort",
        "city": "Hartbeespoort",
        "state": "North West",
        "zip_code": "0216",
        "services": [
            "Web Applications",
            "IoT Solutions",
            "E-commerce",
            "API Development",
            "Digital Strategy",
        ],
        "business_hours": _weekly_hours("08:00", "17:00", closed=("saturday", "sunday")),
        "social_links": {"website": "https://interweb-solutions.co.za"},
        "rating": 5.0,
        "review_count": 12,
        "is_verified": True,
        "seo_title": "Interweb Solutions - Web Application & IoT Development",
    },
]

SAMPLE_ARTICLES: list[dict[str, Any]] = [
    {
        "title": "Local High School Robotics Team Wins Regional Championship",
        "slug": "local-high-school-robotics-team-wins-regional-championship",
        "subtitle": "Riverside High's \"TechTitans\" defeat 47 teams to advance to state finals",
        "category_slug": "community",
        "author_email": "michael.rodriguez@example.com",
        "tags": ["Education", "Robotics", "Students"],
        "days_ago": 1,
        "content": (
            "<p>The Riverside High robotics team, the TechTitans, took first place at the "
            "regional championship on Saturday, beating 47 teams from across the province.</p>"
            "<h2>Months of preparation</h2>"
            "<p>The twelve-member team spent every afternoon since February designing, "
            "building and programming their robot in the school workshop.</p>"
            "<blockquote>We failed a lot before we got it right, and that is the point.</blockquote>"
            "<p>The team now advances to the state finals next month.</p>"
        ),
    },
    {
        "title": "New Downtown Development Project Breaks Ground",
        "slug": "new-downtown-development-project-breaks-ground",
        "subtitle": "Mixed-use complex will bring 200 apartments and retail space to city center",
        "category_slug": "business",
        "author_email": "sarah.mitchell@example.com",
        "tags": ["Development", "Housing", "Economy"],
        "days_ago": 3,
        "content": (
            "<p>Construction started this week on a mixed-use development that will add "
            "200 apartments and ground-floor retail space to the town centre.</p>"
            "<p>The project is expected to create around 300 construction jobs and open "
            "in phases over the next two years.</p>"
            "<ul><li>200 apartments</li><li>4,000 square metres of retail</li>"
            "<li>Public plaza and parking</li></ul>"
        ),
    },
    {
        "title": "Local Restaurant Wins State Sustainability Award",
        "slug": "local-restaurant-wins-state-sustainability-award",
        "subtitle": "Farm Fork Cafe recognized for innovative eco-friendly practices",
        "category_slug": "business",
        "author_email": "mark.grey@example.com",
        "tags": ["Sustainability", "Food", "Awards"],
        "days_ago": 5,
        "content": (
            "<p>Farm Fork Cafe received the provincial sustainability award for cutting "
            "food waste by 80 percent and sourcing most of its produce from farms within "
            "30 kilometres.</p>"
            "<p>The cafe composts all kitchen scraps and runs entirely on solar power "
            "during the day.</p>"
        ),
    },
]

NEWSLETTER_PAGE: dict[str, Any] = {
    "title": "Newsletter",
    "slug": "newsletter",
    "page_type": "custom",
    "meta_title": "Newsletter - Stay Informed with The Riverside Herald",
    "meta_description": "Sign up for local news, business updates and community events.",
    "meta_keywords": ["newsletter", "local news", "subscribe"],
    "content": (
        "<h2>Stay informed</h2>"
        "<p>Get the week's local news, new businesses and community events delivered "
        "to your inbox every Friday morning.</p>"
        "<ul><li>Weekly digest of top stories</li><li>Breaking news alerts</li>"
        "<li>Business directory highlights</li></ul>"
    ),
    "is_published": True,
    "is_in_menu": True,
    "menu_order": 10,
}


DEFAULT_AD_IMAGE = "https://images.unsplash.com/photo-1556742044-3c52d6e88c62?w=800&h=400&fit=crop"
MAX_SEEDED_ADS = 8


@dataclass
class SeedReport:
    """What a seeding run created; ``tokens`` maps new users' emails to API tokens."""

    created: dict[str, int] = field(default_factory=dict)
    skipped: dict[str, int] = field(default_factory=dict)
    tokens: dict[str, str] = field(default_factory=dict)

    def count(self, kind: str, created: bool) -> None:
        bucket = self.created if created else self.skipped
        bucket[kind] = bucket.get(kind, 0) + 1


async def _slug_exists(db: AsyncSession, model: type, slug: str) -> bool:
    result = await db.execute(select(model.id).where(model.slug == slug))
    return result.scalar_one_or_none() is not None


async def seed_categories(db: AsyncSession, report: SeedReport) -> None:
    for data in CATEGORIES:
        if await _slug_exists(db, Category, data["slug"]):
            report.count("categories", created=False)
            continue
        db.add(Category(**data))
        report.count("categories", created=True)
    await db.flush()


async def seed_users(db: AsyncSession, report: SeedReport) -> None:
    for data in TEST_USERS:
        if await get_profile_by_email(db, data["email"]) is not None:
            report.count("profiles", created=False)
            continue
        profile, token = await create_user(db, **data)
        report.tokens[profile.email] = token
        report.count("profiles", created=True)


async def seed_businesses(db: AsyncSession, report: SeedReport) -> None:
    for data in BUSINESSES:
        values = dict(data)
        owner_email = values.pop("owner_email")
        if await _slug_exists(db, Business, values["slug"]):
            report.count("businesses", created=False)
            continue

        owner = await get_profile_by_email(db, owner_email)
        if owner is None:
            logger.warning(f"Owner {owner_email} not found; {values['name']} has no owner")
        db.add(Business(**values, owner_id=owner.id if owner else None))
        report.count("businesses", created=True)
    await db.flush()


async def seed_advertisements(db: AsyncSession, report: SeedReport) -> None:
    """One running 30-day ad per seeded business, cycling through positions."""
    now = utc_now()
    slugs = [data["slug"] for data in BUSINESSES]
    result = await db.execute(select(Business).where(Business.slug.in_(slugs)))
    businesses = sorted(result.scalars().all(), key=lambda b: slugs.index(b.slug))

    for index, business in enumerate(businesses[:MAX_SEEDED_ADS]):
        title = f"{business.name} - Special Offer"
        existing = await db.execute(
            select(Advertisement.id).where(
                Advertisement.business_id == business.id, Advertisement.title == title
            )
        )
        if existing.scalar_one_or_none() is not None:
            report.count("advertisements", created=False)
            continue

        db.add(
            Advertisement(
                business_id=business.id,
                title=title,
                description=f"Visit {business.name} for quality service and great deals!",
                image_url=business.logo_url or DEFAULT_AD_IMAGE,
                link_url=business.website_url,
                position=AD_POSITIONS[index % len(AD_POSITIONS)],
                status="active",
                start_date=now,
                end_date=now + timedelta(days=30),
            )
        )
        report.count("advertisements", created=True)
    await db.flush()


async def seed_articles(db: AsyncSession, report: SeedReport) -> None:
    now = utc_now()
    for data in SAMPLE_ARTICLES:
        values = dict(data)
        category_slug = values.pop("category_slug")
        author_email = values.pop("author_email")
        tag_names = values.pop("tags")
        days_ago = values.pop("days_ago")

        if await _slug_exists(db, Article, values["slug"]):
            report.count("articles", created=False)
            continue

        result = await db.execute(select(Category).where(Category.slug == category_slug))
        category = result.scalar_one_or_none()
        author = await get_profile_by_email(db, author_email)

        article = Article(
            **values,
            excerpt=extract_excerpt(values["content"]),
            status="published",
            author_id=author.id if author else None,
            category_id=category.id if category else None,
            published_at=now - timedelta(days=days_ago),
            read_time_minutes=estimate_reading_time(values["content"]),
            article_metadata={"source": "seed"},
        )
        article.tags = await get_or_create_tags(db, tag_names)
        db.add(article)
        report.count("articles", created=True)
    await db.flush()


async def seed_pages(db: AsyncSession, report: SeedReport) -> None:
    if await _slug_exists(db, Page, NEWSLETTER_PAGE["slug"]):
        report.count("pages", created=False)
        return

    result = await db.execute(
        select(Profile).where(Profile.role == "admin").order_by(Profile.id).limit(1)
    )
    admin = result.scalar_one_or_none()
    admin_id = admin.id if admin else None
    db.add(Page(**NEWSLETTER_PAGE, created_by=admin_id, updated_by=admin_id))
    report.count("pages", created=True)
    await db.flush()


async def seed_all(db: AsyncSession) -> SeedReport:
    """Run every seeder in dependency order."""
    report = SeedReport()
    await seed_categories(db, report)
    await seed_users(db, report)
    await seed_businesses(db, report)
    await seed_advertisements(db, report)
    await seed_articles(db, report)
    await seed_pages(db, report)

    logger.info(f"Seeding finished: created={report.created}, skipped={report.skipped}")
    return report
