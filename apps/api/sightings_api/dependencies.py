"""FastAPI dependencies wiring request sessions to the domain services."""

from fastapi import Depends
from sqlalchemy.orm import Session

from sightings_api.db.session import get_db
from sightings_api.feed.assembler import FeedAssembler
from sightings_api.moderation.lifecycle import SightingLifecycle
from sightings_api.services.records import SightingRecords
from sightings_api.storage.service import StorageService, get_storage_service


def get_records(db: Session = Depends(get_db)) -> SightingRecords:
    return SightingRecords(db)


def get_lifecycle(
    records: SightingRecords = Depends(get_records),
    storage: StorageService = Depends(get_storage_service),
) -> SightingLifecycle:
    return SightingLifecycle(records, storage)


def get_feed(records: SightingRecords = Depends(get_records)) -> FeedAssembler:
    return FeedAssembler(records)
