"""Database models - import all models here for Alembic discovery."""

from sightings_api.models.sighting import STATUS_APPROVED, STATUS_PENDING, Sighting

__all__ = [
    "Sighting",
    "STATUS_PENDING",
    "STATUS_APPROVED",
]
