"""FastAPI routers for API endpoints."""

from .admin import router as admin_router
from .advertisements import router as advertisements_router
from .articles import router as articles_router
from .businesses import router as businesses_router
from .categories import router as categories_router
from .categories import tags_router
from .health import router as health_router
from .media import galleries_router
from .media import router as media_router
from .pages import router as pages_router
from .profiles import router as profiles_router
from .rss import router as rss_router

__all__ = [
    "admin_router",
    "advertisements_router",
    "articles_router",
    "businesses_router",
    "categories_router",
    "galleries_router",
    "health_router",
    "media_router",
    "pages_router",
    "profiles_router",
    "rss_router",
    "tags_router",
]
