"""Birds domain: record and location models."""

from birdatlas.birds.models import BirdRecord, LocationData, LocationEntry, TeamMember

__all__ = ["BirdRecord", "LocationData", "LocationEntry", "TeamMember"]
