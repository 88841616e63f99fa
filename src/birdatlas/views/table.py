"""Flattening of bird records into table rows, one per sighting location."""

from collections.abc import Iterable
from typing import NamedTuple

from birdatlas.birds.models import BirdRecord, LocationEntry
from birdatlas.views.zones import hemisphere, zone

_NO_LOCATION = LocationEntry()


class TableRow(NamedTuple):
    """One (bird, location) pair with the bird's fields repeated on each row."""

    bird_id: int
    bird_name: str
    arabic_name: str
    english_name: str
    scientific_name: str
    local_name: str
    description: str
    notes: str
    location_index: int
    latitude: float
    longitude: float
    location: str
    governorate: str
    mountain_name: str
    valley_name: str
    location_notes: str
    hemisphere: str
    zone: str
    image: str
    has_audio: bool

    @property
    def row_id(self) -> str:
        return f"{self.bird_name}-{self.location_index}"

    @property
    def has_location(self) -> bool:
        return self.location_index >= 0


def _row(bird: BirdRecord, index: int, entry: LocationEntry) -> TableRow:
    located = index >= 0 and entry.has_coordinate
    return TableRow(
        bird_id=bird.id,
        bird_name=bird.display_name,
        arabic_name=bird.arabic_name,
        english_name=bird.english_name,
        scientific_name=bird.scientific_name,
        local_name=bird.local_name,
        description=bird.description,
        notes=bird.notes,
        location_index=index,
        latitude=entry.latitude,
        longitude=entry.longitude,
        location=entry.location,
        governorate=entry.governorate,
        mountain_name=entry.mountain_name,
        valley_name=entry.valley_name,
        location_notes=entry.notes,
        hemisphere=hemisphere(entry.latitude).value if located else "",
        zone=zone(entry.latitude).value if located else "",
        image=bird.primary_image or "",
        has_audio=bird.audio_file is not None,
    )


def flatten(records: Iterable[BirdRecord]) -> list[TableRow]:
    """Project birds to rows.

    A bird with no locations yields a single row with zero coordinates and
    ``location_index == -1`` so it stays visible in list views.
    """
    rows: list[TableRow] = []
    for bird in records:
        if not bird.locations:
            rows.append(_row(bird, -1, _NO_LOCATION))
            continue
        rows.extend(_row(bird, index, entry) for index, entry in enumerate(bird.locations))
    return rows
