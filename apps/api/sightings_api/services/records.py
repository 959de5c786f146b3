"""Record store access for sightings."""

from datetime import datetime
from typing import Optional

from sqlalchemy import case

from sightings_api.models import STATUS_APPROVED, STATUS_PENDING, Sighting
from sightings_api.services.base import BaseService


class SightingRecords(BaseService):
    """Queries and guarded writes against the ``sightings`` table.

    Every write commits immediately: the lifecycle relies on a write being
    durable before it touches the blob store.
    """

    def get(self, sighting_id: str) -> Optional[Sighting]:
        """Point lookup by id."""
        with self._store_errors("lookup"):
            return self.db.query(Sighting).filter(Sighting.id == sighting_id).first()

    def insert(self, sighting: Sighting) -> Sighting:
        """Persist a new sighting."""
        with self._store_errors("insert"):
            self.db.add(sighting)
            self.db.commit()
        return sighting

    def approve_if_pending(self, sighting_id: str, now: datetime) -> int:
        """Move a pending sighting to approved.

        Compare-and-set on ``status``; returns the number of rows changed.
        ``approved_at`` never precedes ``submitted_at`` even under clock skew.
        """
        with self._store_errors("approve"):
            changes = (
                self.db.query(Sighting)
                .filter(Sighting.id == sighting_id, Sighting.status == STATUS_PENDING)
                .update(
                    {
                        Sighting.status: STATUS_APPROVED,
                        Sighting.approved_at: case(
                            (Sighting.submitted_at > now, Sighting.submitted_at),
                            else_=now,
                        ),
                    },
                    synchronize_session=False,
                )
            )
            self.db.commit()
        return changes

    def delete(self, sighting_id: str, only_pending: bool = False) -> int:
        """Delete a sighting; returns 1 only for the caller that removed the row."""
        with self._store_errors("delete"):
            query = self.db.query(Sighting).filter(Sighting.id == sighting_id)
            if only_pending:
                query = query.filter(Sighting.status == STATUS_PENDING)
            deleted = query.delete(synchronize_session=False)
            self.db.commit()
        return deleted

    def pending_submitted_before(self, cutoff: datetime) -> list[Sighting]:
        """Pending sightings older than ``cutoff``."""
        with self._store_errors("scan"):
            return (
                self.db.query(Sighting)
                .filter(Sighting.status == STATUS_PENDING, Sighting.submitted_at < cutoff)
                .order_by(Sighting.submitted_at.asc())
                .all()
            )

    def list_approved(self, limit: int, offset: int) -> list[Sighting]:
        """Approved sightings, most recently approved first."""
        with self._store_errors("scan"):
            return (
                self.db.query(Sighting)
                .filter(Sighting.status == STATUS_APPROVED)
                .order_by(Sighting.approved_at.desc(), Sighting.id.asc())
                .limit(limit)
                .offset(offset)
                .all()
            )

    def list_pending(self) -> list[Sighting]:
        """Pending sightings, oldest first."""
        with self._store_errors("scan"):
            return (
                self.db.query(Sighting)
                .filter(Sighting.status == STATUS_PENDING)
                .order_by(Sighting.submitted_at.asc(), Sighting.id.asc())
                .all()
            )
