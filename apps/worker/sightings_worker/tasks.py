"""Celery tasks for scheduled lifecycle operations."""

import logging
from typing import Optional

from celery import Task
from sqlalchemy.orm import Session

from sightings_api.db.session import get_db
from sightings_api.moderation.lifecycle import SightingLifecycle
from sightings_api.services.records import SightingRecords
from sightings_api.storage.service import get_storage_service
from sightings_worker.celery_app import celery_app

logger = logging.getLogger(__name__)


class DatabaseTask(Task):
    """Task with database session."""

    _db: Optional[Session] = None

    @property
    def db(self) -> Session:
        """Get database session."""
        if self._db is None:
            self._db = next(get_db())
        return self._db

    def after_return(self, *args, **kwargs):
        """Close database session after task."""
        if self._db:
            self._db.close()
            self._db = None


@celery_app.task(base=DatabaseTask, bind=True)
def expire_pending_sightings(self):
    """Remove pending sightings that were never moderated in time."""
    lifecycle = SightingLifecycle(SightingRecords(self.db), get_storage_service())
    result = lifecycle.expire()
    logger.info(
        "Expiry task finished",
        extra={"task": "expire_pending_sightings", "expired": result.expired},
    )
    return {
        "expired": result.expired,
        "attachments_deleted": result.attachments_deleted,
        "cutoff": result.cutoff.isoformat(),
    }
