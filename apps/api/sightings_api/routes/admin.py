"""Operator routes: moderation queue, approve, reject and the moderation page.

Authentication is enforced by ``AdminAuthMiddleware`` before these run.
"""

from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from sightings_api.dependencies import get_feed, get_lifecycle
from sightings_api.feed.assembler import FeedAssembler
from sightings_api.feed.schemas import ModerationQueue
from sightings_api.moderation.lifecycle import SightingLifecycle

router = APIRouter(prefix="/api/admin", tags=["admin"])
ui_router = APIRouter(tags=["admin"])

ADMIN_PAGE = Path(__file__).resolve().parent.parent / "static" / "admin.html"


@lru_cache()
def _admin_page() -> str:
    return ADMIN_PAGE.read_text(encoding="utf-8")


@router.get("/pending", response_model=ModerationQueue)
def list_pending(feed: FeedAssembler = Depends(get_feed)):
    """Pending sightings, oldest first."""
    return ModerationQueue(items=feed.moderation_queue())


@router.post("/approve/{sighting_id}")
def approve(sighting_id: str, lifecycle: SightingLifecycle = Depends(get_lifecycle)):
    """Approve a pending sighting; ``changes`` is 0 when nothing moved."""
    changes = lifecycle.approve(sighting_id)
    return {"ok": True, "changes": changes}


@router.post("/reject/{sighting_id}")
def reject(sighting_id: str, lifecycle: SightingLifecycle = Depends(get_lifecycle)):
    """Delete a sighting and its attachments."""
    lifecycle.reject(sighting_id)
    return {"ok": True}


@ui_router.get("/deymod", response_class=HTMLResponse, include_in_schema=False)
def moderation_page():
    """Moderation page."""
    return HTMLResponse(_admin_page())
