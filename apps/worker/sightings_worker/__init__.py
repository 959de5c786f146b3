"""Background worker for scheduled sighting maintenance."""
