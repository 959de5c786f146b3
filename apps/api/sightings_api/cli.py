"""CLI commands for the Sightings API."""

import click

from sightings_api.db.base import Base
from sightings_api.db.session import SessionLocal, engine
from sightings_api.moderation.lifecycle import SightingLifecycle
from sightings_api.services.records import SightingRecords
from sightings_api.storage.service import get_storage_service


@click.group()
def cli():
    """Sightings API CLI."""
    pass


@cli.command("init-db")
def init_db():
    """Create database tables (development; use Alembic elsewhere)."""
    import sightings_api.models  # noqa: F401

    Base.metadata.create_all(engine)
    click.echo("✓ Tables created.")


@cli.command()
def expire():
    """Remove pending sightings older than the pending TTL."""
    db = SessionLocal()
    try:
        lifecycle = SightingLifecycle(SightingRecords(db), get_storage_service())
        result = lifecycle.expire()
        click.echo(
            f"✓ Expired {result.expired} sighting(s), "
            f"deleted {result.attachments_deleted} attachment(s) "
            f"(cutoff {result.cutoff.isoformat()})."
        )
    finally:
        db.close()


if __name__ == "__main__":
    cli()
