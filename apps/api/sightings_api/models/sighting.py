"""Sighting model: the only entity the service stores."""

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Index, Integer, String, Text

from sightings_api.db.base import Base
from sightings_api.moderation.state import Approved, ModerationState, Pending

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"


class Sighting(Base):
    """A user-submitted sighting report awaiting or past moderation."""

    __tablename__ = "sightings"

    id = Column(String(36), primary_key=True)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=False)
    reporter_name = Column("name", String(80), nullable=True)
    reporter_email = Column("email", String(120), nullable=True)
    suspicion_level = Column("suspicious_meter", Integer, nullable=False)
    attachment_keys = Column("photos_json", JSON, nullable=False, default=list)
    submitted_at = Column(DateTime, nullable=False)
    approved_at = Column(DateTime, nullable=True)
    status = Column(String(16), nullable=False, default=STATUS_PENDING)

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved')", name="ck_sightings_status"),
        CheckConstraint(
            "(status = 'pending' AND approved_at IS NULL) OR "
            "(status = 'approved' AND approved_at IS NOT NULL AND approved_at >= submitted_at)",
            name="ck_sightings_approval",
        ),
        CheckConstraint("suspicious_meter BETWEEN 1 AND 10", name="ck_sightings_meter"),
        Index("idx_sightings_status", "status"),
        Index("idx_sightings_approved", "approved_at"),
        Index("idx_sightings_submitted", "submitted_at"),
    )

    @property
    def state(self) -> ModerationState:
        """Moderation state as a tagged value."""
        if self.status == STATUS_APPROVED:
            return Approved(at=self.approved_at)
        return Pending()

    def __repr__(self) -> str:
        return f"<Sighting {self.id} status={self.status}>"
