"""Moderation lifecycle: create, approve, reject and expire sightings.

The lifecycle owns the consistency between the record store and the blob
store. Attachments are written before the record that references them and
deleted only after the record is gone, and only by the caller whose delete
actually removed the row. The one residue this allows is an attachment
whose record write failed; such objects are never referenced and expire
through the bucket lifecycle rule.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from sightings_api.errors import StorageError
from sightings_api.intake.validator import NewSighting
from sightings_api.models import STATUS_PENDING, Sighting
from sightings_api.services.records import SightingRecords
from sightings_api.settings import get_settings
from sightings_api.storage.service import StorageService
from sightings_api.utils import metrics

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the record store keeps datetimes."""
    return datetime.utcnow()


@dataclass(frozen=True)
class ExpiryResult:
    """Outcome of one expiry pass."""

    expired: int
    attachments_deleted: int
    cutoff: datetime


class SightingLifecycle:
    """State machine for a sighting: absent -> pending -> approved -> absent."""

    def __init__(
        self,
        records: SightingRecords,
        storage: StorageService,
        clock: Callable[[], datetime] = utcnow,
        pending_ttl: Optional[timedelta] = None,
        purge_attachments_on_expire: Optional[bool] = None,
    ):
        settings = get_settings()
        self.records = records
        self.storage = storage
        self.clock = clock
        self.pending_ttl = pending_ttl or timedelta(hours=settings.pending_ttl_hours)
        if purge_attachments_on_expire is None:
            purge_attachments_on_expire = settings.purge_attachments_on_expire
        self.purge_attachments_on_expire = purge_attachments_on_expire

    def create(self, submission: NewSighting) -> str:
        """Store a validated submission as a pending sighting and return its id.

        Raises:
            StorageError: If the attachment or the record cannot be written
        """
        sighting_id = str(uuid.uuid4())
        attachment_keys = []

        if submission.photo is not None:
            key = StorageService.build_object_key(sighting_id, len(attachment_keys))
            self.storage.put_object(key, submission.photo.data, submission.photo.content_type)
            attachment_keys.append(key)

        sighting = Sighting(
            id=sighting_id,
            title=submission.title,
            description=submission.description,
            reporter_name=submission.reporter_name,
            reporter_email=submission.reporter_email,
            suspicion_level=submission.suspicion_level,
            attachment_keys=attachment_keys,
            submitted_at=self.clock(),
            status=STATUS_PENDING,
        )
        try:
            self.records.insert(sighting)
        except StorageError:
            if attachment_keys:
                metrics.orphaned_attachments.inc(len(attachment_keys))
                logger.warning(
                    "Record write failed after attachment upload; attachment orphaned",
                    extra={"sighting_id": sighting_id, "attachment_keys": attachment_keys},
                )
            raise

        metrics.submissions_created.labels(with_photo=str(bool(attachment_keys)).lower()).inc()
        logger.info("Sighting submitted", extra={"sighting_id": sighting_id})
        return sighting_id

    def approve(self, sighting_id: str) -> int:
        """Approve a pending sighting.

        Returns:
            Rows changed: 1 on approval, 0 if the sighting is unknown or
            already approved
        """
        changes = self.records.approve_if_pending(sighting_id, self.clock())
        metrics.moderation_actions.labels(
            action="approve", outcome="changed" if changes else "unchanged"
        ).inc()
        logger.info("Sighting approve", extra={"sighting_id": sighting_id, "changes": changes})
        return changes

    def reject(self, sighting_id: str) -> bool:
        """Delete a sighting and its attachments.

        Attachment keys are read before the delete. Attachments are removed
        only if this call deleted the row; a concurrent deleter owns the
        cleanup otherwise.

        Returns:
            True if this call removed the sighting
        """
        sighting = self.records.get(sighting_id)
        if sighting is None:
            metrics.moderation_actions.labels(action="reject", outcome="unchanged").inc()
            return False
        attachment_keys = list(sighting.attachment_keys or [])

        deleted = self.records.delete(sighting_id)
        if not deleted:
            metrics.moderation_actions.labels(action="reject", outcome="unchanged").inc()
            return False

        metrics.moderation_actions.labels(action="reject", outcome="changed").inc()
        logger.info(
            "Sighting rejected",
            extra={"sighting_id": sighting_id, "attachment_keys": attachment_keys},
        )
        self._delete_attachments(sighting_id, attachment_keys)
        return True

    def expire(self, now: Optional[datetime] = None) -> ExpiryResult:
        """Remove pending sightings older than the pending TTL."""
        cutoff = (now or self.clock()) - self.pending_ttl
        expired = 0
        attachments_deleted = 0

        # Snapshot before deleting: each commit expires the loaded instances
        candidates = [
            (sighting.id, list(sighting.attachment_keys or []))
            for sighting in self.records.pending_submitted_before(cutoff)
        ]
        for sighting_id, attachment_keys in candidates:
            # Guarded by status so an approval that lands first survives
            if not self.records.delete(sighting_id, only_pending=True):
                continue
            expired += 1
            if not (self.purge_attachments_on_expire and attachment_keys):
                continue
            try:
                self._delete_attachments(sighting_id, attachment_keys)
            except StorageError:
                # Already logged; the bucket lifecycle rule still reclaims them
                continue
            attachments_deleted += len(attachment_keys)

        if expired:
            metrics.sightings_expired.inc(expired)
        logger.info(
            "Expired pending sightings",
            extra={
                "expired": expired,
                "attachments_deleted": attachments_deleted,
                "cutoff": cutoff.isoformat(),
            },
        )
        return ExpiryResult(expired=expired, attachments_deleted=attachments_deleted, cutoff=cutoff)

    def _delete_attachments(self, sighting_id: str, keys: Iterable[str]) -> None:
        failed = []
        for key in keys:
            try:
                self.storage.delete_object(key)
            except StorageError:
                failed.append(key)
        if failed:
            logger.error(
                "Failed to delete attachments of removed sighting",
                extra={"sighting_id": sighting_id, "attachment_keys": failed},
            )
            raise StorageError(f"Failed to delete attachments of sighting {sighting_id}")
