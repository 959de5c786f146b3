"""Base service class for record store access."""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sightings_api.errors import StorageError

logger = logging.getLogger(__name__)


class BaseService:
    """Base service holding a request-scoped session."""

    def __init__(self, db: Session):
        """Initialize service with a database session."""
        self.db = db

    @contextmanager
    def _store_errors(self, operation: str):
        """Translate database failures into StorageError, rolling back first."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Record store {operation} failed: {e}")
            raise StorageError(f"Record store {operation} failed") from e
