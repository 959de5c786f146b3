"""Public sighting endpoints: intake and the approved feed."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from sightings_api.dependencies import get_feed, get_lifecycle
from sightings_api.errors import ValidationError
from sightings_api.feed.assembler import FeedAssembler
from sightings_api.feed.schemas import PublicFeed
from sightings_api.intake.validator import PhotoUpload, validate_submission
from sightings_api.moderation.lifecycle import SightingLifecycle
from sightings_api.settings import get_settings
from sightings_api.utils import metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sightings"])

FORM_FIELDS = ("title", "description", "name", "email", "suspicious_meter", "consent")


async def _read_photos(entries: list, max_bytes: int) -> list:
    """Turn ``photos`` form entries into validator input.

    Reads at most one byte past the limit, enough for the validator to
    recognise an oversized file.
    """
    photos = []
    for entry in entries[:1]:
        if isinstance(entry, UploadFile):
            data = await entry.read(max_bytes + 1)
            photos.append(
                PhotoUpload(content_type=entry.content_type or "", data=data, filename=entry.filename)
            )
        else:
            photos.append(entry)
    return photos


@router.post("/sightings", status_code=status.HTTP_201_CREATED)
async def create_sighting(
    request: Request,
    lifecycle: SightingLifecycle = Depends(get_lifecycle),
):
    """Submit a sighting for moderation."""
    if "multipart/form-data" not in request.headers.get("content-type", ""):
        raise ValidationError("Use multipart/form-data")

    settings = get_settings()
    form = await request.form()
    try:
        fields = {}
        for name in FORM_FIELDS:
            value = form.get(name)
            fields[name] = value if isinstance(value, str) else None
        photos = await _read_photos(form.getlist("photos"), settings.max_photo_bytes)
    finally:
        await form.close()

    try:
        submission = validate_submission(fields, photos, max_photo_bytes=settings.max_photo_bytes)
    except ValidationError:
        metrics.submissions_rejected.inc()
        raise

    if submission.dropped_reason:
        metrics.attachments_dropped.labels(reason=submission.dropped_reason).inc()
        logger.info("Attachment dropped", extra={"reason": submission.dropped_reason})

    sighting_id = await run_in_threadpool(lifecycle.create, submission)
    return {"ok": True, "id": sighting_id}


@router.get("/sightings", response_model=PublicFeed)
def list_approved(
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    feed: FeedAssembler = Depends(get_feed),
):
    """Approved sightings, newest approval first."""
    return PublicFeed(items=feed.public_feed(limit, offset))
