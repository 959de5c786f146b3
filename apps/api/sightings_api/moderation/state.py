"""Explicit moderation states.

A sighting is either ``Pending`` or ``Approved(at)``; rejected and expired
sightings no longer exist. Reading the approval time through ``Approved``
means an approved sighting can never be observed without one.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class Pending:
    """Awaiting a moderation decision."""

    name: str = "pending"


@dataclass(frozen=True)
class Approved:
    """Visible in the public feed since ``at``."""

    at: datetime
    name: str = "approved"


ModerationState = Union[Pending, Approved]
