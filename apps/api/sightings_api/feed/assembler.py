"""Read-only projections of sightings: public feed and moderation queue."""

from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

from sightings_api.feed.schemas import PendingSightingItem, PublicSightingItem
from sightings_api.intake.validator import ANONYMOUS
from sightings_api.models import Sighting
from sightings_api.moderation.state import Approved
from sightings_api.services.records import SightingRecords
from sightings_api.settings import get_settings

IMAGE_PATH = "/api/image/"


def epoch_millis(value: datetime) -> int:
    """Naive UTC datetime to Unix epoch milliseconds."""
    return int(value.replace(tzinfo=timezone.utc).timestamp() * 1000)


def attachment_url(key: str) -> str:
    """Fetchable reference for an attachment key."""
    return IMAGE_PATH + quote(key, safe="")


def _parse_int(raw: Any, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return default


class FeedAssembler:
    """Builds the paginated public feed and the moderation queue."""

    def __init__(self, records: SightingRecords):
        settings = get_settings()
        self.records = records
        self.default_limit = settings.feed_default_limit
        self.max_limit = settings.feed_max_limit

    def page_bounds(self, limit: Optional[Any], offset: Optional[Any]) -> tuple[int, int]:
        """Clamp raw paging parameters: limit into [1, max], offset to >= 0."""
        limit = min(self.max_limit, max(1, _parse_int(limit, self.default_limit)))
        offset = max(0, _parse_int(offset, 0))
        return limit, offset

    def public_feed(self, limit: Optional[Any] = None, offset: Optional[Any] = None) -> list[PublicSightingItem]:
        """Approved sightings, most recently approved first."""
        limit, offset = self.page_bounds(limit, offset)
        return [self._public_item(s) for s in self.records.list_approved(limit, offset)]

    def moderation_queue(self) -> list[PendingSightingItem]:
        """Pending sightings, oldest first."""
        return [self._pending_item(s) for s in self.records.list_pending()]

    @staticmethod
    def _public_item(sighting: Sighting) -> PublicSightingItem:
        state = sighting.state
        if not isinstance(state, Approved):
            raise ValueError(f"Sighting {sighting.id} is not approved")
        keys = list(sighting.attachment_keys or [])
        return PublicSightingItem(
            id=sighting.id,
            title=sighting.title,
            description=sighting.description,
            name=sighting.reporter_name or ANONYMOUS,
            suspicious_meter=sighting.suspicion_level,
            photos=keys,
            photo_urls=[attachment_url(k) for k in keys],
            submitted_at=epoch_millis(sighting.submitted_at),
            approved_at=epoch_millis(state.at),
        )

    @staticmethod
    def _pending_item(sighting: Sighting) -> PendingSightingItem:
        keys = list(sighting.attachment_keys or [])
        return PendingSightingItem(
            id=sighting.id,
            title=sighting.title,
            description=sighting.description,
            name=sighting.reporter_name,
            email=sighting.reporter_email,
            suspicious_meter=sighting.suspicion_level,
            photos=keys,
            photo_urls=[attachment_url(k) for k in keys],
            submitted_at=epoch_millis(sighting.submitted_at),
            status=sighting.state.name,
        )
