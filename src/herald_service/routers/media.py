"""Media upload and gallery API endpoints.

Design Decisions:

1. Images Only:
   - Uploads accept JPEG, PNG, WebP and GIF up to ``max_upload_size_mb``;
     anything else is rejected with 415 / 413 before touching disk

2. Visibility:
   - Public media and galleries are readable by anyone; private ones only
     by their owner and staff (others get 404, not 403, so private ids do
     not leak)

3. Deletion:
   - Deleting a media row also removes the stored file; gallery items
     referencing it are removed by the database cascade
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.auth import get_current_profile, get_optional_profile
from herald_service.content import create_slug, sanitize_text
from herald_service.database import get_db
from herald_service.models import Gallery, GalleryItem, Media, Profile
from herald_service.rss.processor import unique_slug
from herald_service.schemas.media import (
    CreateGalleryRequest,
    GalleryItemRequest,
    GalleryResponse,
    MediaResponse,
    UpdateMediaRequest,
)
from herald_service.storage import delete_file, public_url, read_image_upload, save_file

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/media",
    tags=["media"],
)

galleries_router = APIRouter(
    prefix="/api/v1/galleries",
    tags=["galleries"],
)

UPLOAD_FOLDER = "uploads"


def _is_owner_or_staff(owner_id: int | None, profile: Profile | None) -> bool:
    return profile is not None and (profile.is_staff or owner_id == profile.id)


async def get_media_or_404(
    media_id: int,
    db: AsyncSession,
    profile: Profile | None = None,
) -> Media:
    """Fetch media visible to ``profile`` or raise 404."""
    media = await db.get(Media, media_id)
    if media is None or not (media.is_public or _is_owner_or_staff(media.uploaded_by, profile)):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Media with id {media_id} not found",
        )
    return media


@router.post(
    "",
    response_model=MediaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image",
    responses={
        400: {"description": "Missing filename or empty file"},
        401: {"description": "Not authenticated"},
        413: {"description": "File too large"},
        415: {"description": "Unsupported file type"},
    },
)
async def upload_media(
    file: UploadFile = File(..., description="Image to upload"),
    alt_text: str | None = Form(default=None, max_length=500),
    caption: str | None = Form(default=None, max_length=2000),
    credits: str | None = Form(default=None, max_length=200),
    is_public: bool = Form(default=True),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> MediaResponse:
    """Store an uploaded image and record its metadata.

    Args:
        file: Multipart image
        alt_text: Alternative text
        caption: Caption shown with the image
        credits: Photographer / source credit
        is_public: Whether anonymous readers can see it
        profile: Uploader
        db: Database session

    Returns:
        Created media metadata
    """
    content = await read_image_upload(file)
    mime_type = file.content_type or "application/octet-stream"

    try:
        key = save_file(content, UPLOAD_FOLDER, mime_type)
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save file: {e}",
        ) from e

    media = Media(
        filename=key,
        original_filename=file.filename or key,
        file_url=public_url(key),
        media_type="image",
        mime_type=mime_type,
        file_size=len(content),
        alt_text=sanitize_text(alt_text) if alt_text else None,
        caption=sanitize_text(caption) if caption else None,
        credits=sanitize_text(credits) if credits else None,
        uploaded_by=profile.id,
        is_public=is_public,
    )
    db.add(media)
    try:
        await db.commit()
    except SQLAlchemyError:
        delete_file(key)
        raise
    await db.refresh(media)

    logger.info(f"Media {media.id} uploaded by profile {profile.id} ({len(content)} bytes)")
    return MediaResponse.model_validate(media)


@router.get(
    "/{media_id}",
    response_model=MediaResponse,
    summary="Get media metadata",
    responses={404: {"description": "Media not found"}},
)
async def get_media(
    media_id: int,
    profile: Profile | None = Depends(get_optional_profile),
    db: AsyncSession = Depends(get_db),
) -> MediaResponse:
    return MediaResponse.model_validate(await get_media_or_404(media_id, db, profile))


@router.patch(
    "/{media_id}",
    response_model=MediaResponse,
    summary="Update media metadata",
    responses={
        403: {"description": "Not the uploader"},
        404: {"description": "Media not found"},
    },
)
async def update_media(
    media_id: int,
    data: UpdateMediaRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> MediaResponse:
    media = await get_media_or_404(media_id, db, profile)
    if not _is_owner_or_staff(media.uploaded_by, profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only modify your own uploads",
        )

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(media, field, value)

    await db.flush()
    await db.refresh(media)
    return MediaResponse.model_validate(media)


@router.delete(
    "/{media_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete media",
    description="Removes the row and the stored file. Only the uploader or staff.",
    responses={
        403: {"description": "Not the uploader"},
        404: {"description": "Media not found"},
    },
)
async def delete_media(
    media_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Response:
    media = await get_media_or_404(media_id, db, profile)
    if not _is_owner_or_staff(media.uploaded_by, profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own uploads",
        )

    key = media.filename
    await db.delete(media)
    # Commit before unlinking the stored file
    await db.commit()
    delete_file(key)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Galleries
# =============================================================================


async def get_gallery_or_404(
    gallery_id: int,
    db: AsyncSession,
    profile: Profile | None = None,
) -> Gallery:
    """Fetch a gallery (items reloaded in sort order) or raise 404."""
    result = await db.execute(
        select(Gallery)
        .where(Gallery.id == gallery_id)
        .execution_options(populate_existing=True)
    )
    gallery = result.scalar_one_or_none()
    if gallery is None or not (gallery.is_public or _is_owner_or_staff(gallery.created_by, profile)):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Gallery with id {gallery_id} not found",
        )
    return gallery


def ensure_can_manage_gallery(gallery: Gallery, profile: Profile) -> None:
    if not _is_owner_or_staff(gallery.created_by, profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own galleries",
        )


@galleries_router.post(
    "",
    response_model=GalleryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a gallery",
    responses={401: {"description": "Not authenticated"}},
)
async def create_gallery(
    data: CreateGalleryRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> GalleryResponse:
    slug = await unique_slug(db, create_slug(data.name) or "gallery", model=Gallery)
    gallery = Gallery(
        name=data.name,
        slug=slug,
        description=data.description,
        is_public=data.is_public,
        created_by=profile.id,
    )
    db.add(gallery)
    await db.flush()

    return GalleryResponse.model_validate(await get_gallery_or_404(gallery.id, db, profile))


@galleries_router.get(
    "/{gallery_id}",
    response_model=GalleryResponse,
    summary="Get a gallery with its items",
    responses={404: {"description": "Gallery not found"}},
)
async def get_gallery(
    gallery_id: int,
    profile: Profile | None = Depends(get_optional_profile),
    db: AsyncSession = Depends(get_db),
) -> GalleryResponse:
    return GalleryResponse.model_validate(await get_gallery_or_404(gallery_id, db, profile))


@galleries_router.post(
    "/{gallery_id}/items",
    response_model=GalleryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add media to a gallery",
    description="Appends after the last item unless ``sort_order`` is given.",
    responses={
        403: {"description": "Not the gallery owner"},
        404: {"description": "Gallery or media not found"},
    },
)
async def add_gallery_item(
    gallery_id: int,
    data: GalleryItemRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> GalleryResponse:
    gallery = await get_gallery_or_404(gallery_id, db, profile)
    ensure_can_manage_gallery(gallery, profile)
    await get_media_or_404(data.media_id, db, profile)

    sort_order = data.sort_order
    if sort_order is None:
        result = await db.execute(
            select(func.max(GalleryItem.sort_order)).where(GalleryItem.gallery_id == gallery.id)
        )
        last = result.scalar()
        sort_order = 0 if last is None else last + 1

    db.add(
        GalleryItem(
            gallery_id=gallery.id,
            media_id=data.media_id,
            caption=data.caption,
            sort_order=sort_order,
            is_featured=data.is_featured,
        )
    )
    await db.flush()

    return GalleryResponse.model_validate(await get_gallery_or_404(gallery.id, db, profile))


@galleries_router.delete(
    "/{gallery_id}/items/{item_id}",
    response_model=GalleryResponse,
    summary="Remove an item from a gallery",
    responses={
        403: {"description": "Not the gallery owner"},
        404: {"description": "Gallery or item not found"},
    },
)
async def remove_gallery_item(
    gallery_id: int,
    item_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> GalleryResponse:
    gallery = await get_gallery_or_404(gallery_id, db, profile)
    ensure_can_manage_gallery(gallery, profile)

    item = await db.get(GalleryItem, item_id)
    if item is None or item.gallery_id != gallery.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item {item_id} not found in gallery {gallery_id}",
        )

    await db.delete(item)
    await db.flush()

    return GalleryResponse.model_validate(await get_gallery_or_404(gallery.id, db, profile))
