"""Response models for the public feed and the moderation queue."""

from typing import Optional

from pydantic import BaseModel, Field


class PublicSightingItem(BaseModel):
    """Approved sighting as shown to the public. Carries no email."""

    id: str
    title: str
    description: str
    name: str
    suspicious_meter: int
    photos: list[str] = Field(default_factory=list)
    photo_urls: list[str] = Field(default_factory=list)
    submitted_at: int = Field(..., description="Unix epoch milliseconds")
    approved_at: int = Field(..., description="Unix epoch milliseconds")


class PendingSightingItem(BaseModel):
    """Pending sighting as shown to the operator."""

    id: str
    title: str
    description: str
    name: Optional[str] = None
    email: Optional[str] = None
    suspicious_meter: int
    photos: list[str] = Field(default_factory=list)
    photo_urls: list[str] = Field(default_factory=list)
    submitted_at: int = Field(..., description="Unix epoch milliseconds")
    status: str


class PublicFeed(BaseModel):
    """Public feed page."""

    items: list[PublicSightingItem]


class ModerationQueue(BaseModel):
    """Pending sightings awaiting a decision."""

    items: list[PendingSightingItem]
