"""Map marker extraction.

Locations are dropped from the map when their coordinate is not finite, is
out of range, or is exactly (0, 0), which the data uses for "not set".
"""

import math
from collections.abc import Iterable
from typing import NamedTuple

from birdatlas.birds.models import BirdRecord, LocationData


class MapMarker(NamedTuple):
    latitude: float
    longitude: float
    bird_id: int
    bird_name: str
    label: str = ""
    image: str | None = None


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    if latitude == 0 and longitude == 0:
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def extract_markers(records: Iterable[BirdRecord]) -> list[MapMarker]:
    """One marker per valid location, carrying the bird's first image."""
    markers: list[MapMarker] = []
    for bird in records:
        image = bird.primary_image
        for entry in bird.locations:
            if not is_valid_coordinate(entry.latitude, entry.longitude):
                continue
            markers.append(
                MapMarker(
                    latitude=entry.latitude,
                    longitude=entry.longitude,
                    bird_id=bird.id,
                    bird_name=bird.display_name,
                    label=entry.location,
                    image=image,
                )
            )
    return markers


def markers_from_locations(locations: Iterable[LocationData]) -> list[MapMarker]:
    """Markers for the backend's flat (bird name, coordinate) listing."""
    return [
        MapMarker(
            latitude=item.latitude,
            longitude=item.longitude,
            bird_id=0,
            bird_name=item.bird_name,
        )
        for item in locations
        if is_valid_coordinate(item.latitude, item.longitude)
    ]
