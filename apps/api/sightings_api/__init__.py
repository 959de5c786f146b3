"""Sightings moderation API."""
