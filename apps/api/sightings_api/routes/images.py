"""Attachment read endpoint."""

from fastapi import APIRouter, Depends, Response

from sightings_api.storage.service import StorageService, get_storage_service

router = APIRouter(prefix="/api", tags=["images"])


@router.get("/image/{key:path}")
def get_image(key: str, storage: StorageService = Depends(get_storage_service)):
    """Serve attachment bytes with their stored content type."""
    stored = storage.get_object(key)
    return Response(content=stored.data, media_type=stored.content_type)
