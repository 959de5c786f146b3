"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

# Request metrics
request_duration = Histogram(
    "sightings_request_duration_seconds",
    "HTTP request duration",
    ["method", "status"],
)

# Intake metrics
submissions_created = Counter(
    "sightings_submissions_total",
    "Sightings accepted for moderation",
    ["with_photo"],
)

submissions_rejected = Counter(
    "sightings_submissions_invalid_total",
    "Submissions refused by validation",
)

attachments_dropped = Counter(
    "sightings_attachments_dropped_total",
    "Attachments silently dropped at intake",
    ["reason"],
)

# Lifecycle metrics
moderation_actions = Counter(
    "sightings_moderation_actions_total",
    "Moderation transitions",
    ["action", "outcome"],
)

sightings_expired = Counter(
    "sightings_expired_total",
    "Pending sightings removed by expiry",
)

orphaned_attachments = Counter(
    "sightings_orphaned_attachments_total",
    "Attachments left without a record after a failed write",
)
