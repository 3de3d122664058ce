"""Pydantic schemas for API request/response validation."""

from .admin import CancelTaskResponse, StartIngestionResponse, TaskStatusResponse
from .advertisement import (
    AdvertisementListResponse,
    AdvertisementResponse,
    CreateAdvertisementRequest,
    UpdateAdvertisementRequest,
)
from .article import (
    ArticleListResponse,
    ArticleResponse,
    ArticleStatus,
    CreateArticleRequest,
    EngagementResponse,
    PublishArticleRequest,
    UpdateArticleRequest,
)
from .business import (
    BusinessListResponse,
    BusinessResponse,
    CreateBusinessRequest,
    IndustryListResponse,
    UpdateBusinessRequest,
)
from .category import (
    CategoryListResponse,
    CategoryResponse,
    CategorySummary,
    CreateCategoryRequest,
    CreateTagRequest,
    TagListResponse,
    TagResponse,
)
from .health import HealthResponse
from .media import (
    CreateGalleryRequest,
    GalleryItemRequest,
    GalleryItemResponse,
    GalleryResponse,
    MediaResponse,
    UpdateMediaRequest,
)
from .page import CreatePageRequest, MenuItem, PageResponse, UpdatePageRequest
from .profile import (
    AuthorSummary,
    ChangeRoleRequest,
    MeResponse,
    NotificationPreferences,
    ProfileListResponse,
    ProfileResponse,
    UpdateNotificationsRequest,
    UpdateProfileRequest,
)
from .rss import (
    CreateRSSSourceRequest,
    RSSFetchLogListResponse,
    RSSFetchLogResponse,
    RSSSourceListResponse,
    RSSSourceResponse,
    UpdateRSSSourceRequest,
)

__all__ = [
    # Health
    "HealthResponse",
    # Article
    "ArticleListResponse",
    "ArticleResponse",
    "ArticleStatus",
    "CreateArticleRequest",
    "EngagementResponse",
    "PublishArticleRequest",
    "UpdateArticleRequest",
    # Business
    "BusinessListResponse",
    "BusinessResponse",
    "CreateBusinessRequest",
    "IndustryListResponse",
    "UpdateBusinessRequest",
    # Advertisement
    "AdvertisementListResponse",
    "AdvertisementResponse",
    "CreateAdvertisementRequest",
    "UpdateAdvertisementRequest",
    # Category / Tag
    "CategoryListResponse",
    "CategoryResponse",
    "CategorySummary",
    "CreateCategoryRequest",
    "CreateTagRequest",
    "TagListResponse",
    "TagResponse",
    # Page
    "CreatePageRequest",
    "MenuItem",
    "PageResponse",
    "UpdatePageRequest",
    # Profile
    "AuthorSummary",
    "ChangeRoleRequest",
    "MeResponse",
    "NotificationPreferences",
    "ProfileListResponse",
    "ProfileResponse",
    "UpdateNotificationsRequest",
    "UpdateProfileRequest",
    # Media
    "CreateGalleryRequest",
    "GalleryItemRequest",
    "GalleryItemResponse",
    "GalleryResponse",
    "MediaResponse",
    "UpdateMediaRequest",
    # RSS
    "CreateRSSSourceRequest",
    "RSSFetchLogListResponse",
    "RSSFetchLogResponse",
    "RSSSourceListResponse",
    "RSSSourceResponse",
    "UpdateRSSSourceRequest",
    # Admin
    "CancelTaskResponse",
    "StartIngestionResponse",
    "TaskStatusResponse",
]
