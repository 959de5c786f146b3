"""Submission validation for new sightings.

Validation is pure: it trims, truncates and coerces the submitted form
fields, decides which attachment (if any) is kept, and raises
``ValidationError`` for submissions that cannot be accepted. Nothing is
written anywhere until a ``NewSighting`` has been produced.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from sightings_api.errors import ValidationError

TITLE_MAX = 120
DESCRIPTION_MAX = 5000
NAME_MAX = 80
EMAIL_MAX = 120

ANONYMOUS = "Anonymous"

SUSPICION_MIN = 1
SUSPICION_MAX = 10

CONSENT_VALUES = frozenset({"on", "true"})

ALLOWED_PHOTO_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
MAX_PHOTO_BYTES = 1 * 1024 * 1024

DROPPED_UNSUPPORTED_TYPE = "unsupported_type"
DROPPED_TOO_LARGE = "too_large"


@dataclass(frozen=True)
class PhotoUpload:
    """An uploaded file as received by the intake endpoint."""

    content_type: str
    data: bytes
    filename: Optional[str] = None


@dataclass(frozen=True)
class NewSighting:
    """A submission that passed validation, ready to be created."""

    title: str
    description: str
    reporter_name: str
    reporter_email: Optional[str]
    suspicion_level: int
    photo: Optional[PhotoUpload] = None
    dropped_reason: Optional[str] = None


def _text(value: Any, limit: int) -> str:
    if value is None:
        return ""
    return str(value).strip()[:limit]


def parse_suspicion_level(raw: Any) -> int:
    """Coerce ``raw`` into [1, 10]; blank or non-numeric input counts as 1."""
    text = "" if raw is None else str(raw).strip()
    if not text:
        return SUSPICION_MIN
    try:
        value = float(text)
    except ValueError:
        return SUSPICION_MIN
    if math.isnan(value):
        return SUSPICION_MIN
    return int(min(SUSPICION_MAX, max(SUSPICION_MIN, value)))


def has_consent(raw: Any) -> bool:
    """Consent counts only when it equals one of the affirmative sentinels."""
    return isinstance(raw, str) and raw in CONSENT_VALUES


def select_photo(
    photos: Sequence[Union[PhotoUpload, str]],
    max_bytes: int = MAX_PHOTO_BYTES,
) -> tuple[Optional[PhotoUpload], Optional[str]]:
    """Pick the attachment to keep.

    Only the first entry is considered. Plain-text entries are ignored;
    unsupported types and oversized files are dropped without error.

    Returns:
        The kept photo (or None) and the reason it was dropped (or None)
    """
    for entry in photos[:1]:
        if not isinstance(entry, PhotoUpload):
            continue
        content_type = (entry.content_type or "").strip().lower()
        if content_type not in ALLOWED_PHOTO_TYPES:
            return None, DROPPED_UNSUPPORTED_TYPE
        if len(entry.data) > max_bytes:
            return None, DROPPED_TOO_LARGE
        return PhotoUpload(content_type=content_type, data=entry.data, filename=entry.filename), None
    return None, None


def validate_submission(
    fields: Mapping[str, Any],
    photos: Sequence[Union[PhotoUpload, str]] = (),
    max_photo_bytes: int = MAX_PHOTO_BYTES,
) -> NewSighting:
    """
    Validate a raw intake form.

    Args:
        fields: Form fields (``title``, ``description``, ``name``, ``email``,
            ``suspicious_meter``, ``consent``)
        photos: Entries submitted under ``photos``
        max_photo_bytes: Largest attachment kept

    Returns:
        The validated submission

    Raises:
        ValidationError: If title or description is blank, or consent is missing
    """
    title = _text(fields.get("title"), TITLE_MAX)
    description = _text(fields.get("description"), DESCRIPTION_MAX)
    name = _text(fields.get("name"), NAME_MAX) or ANONYMOUS
    email = _text(fields.get("email"), EMAIL_MAX) or None
    suspicion_level = parse_suspicion_level(fields.get("suspicious_meter"))

    if not title or not description:
        raise ValidationError("Missing title/description")
    if not has_consent(fields.get("consent")):
        raise ValidationError("Consent required")

    photo, dropped_reason = select_photo(photos, max_photo_bytes)

    return NewSighting(
        title=title,
        description=description,
        reporter_name=name,
        reporter_email=email,
        suspicion_level=suspicion_level,
        photo=photo,
        dropped_reason=dropped_reason,
    )
