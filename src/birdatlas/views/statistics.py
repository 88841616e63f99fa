"""Summary statistics over bird records."""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from birdatlas.birds.models import BirdRecord
from birdatlas.views.markers import is_valid_coordinate
from birdatlas.views.zones import ClimateZone, Hemisphere, hemisphere, zone


class BirdLocationCount(BaseModel):
    bird_name: str
    count: int


class AtlasStatistics(BaseModel):
    """Counts shown on the statistics page."""

    total_birds: int = 0
    total_locations: int = 0
    mapped_locations: int = 0
    birds_with_audio: int = 0
    birds_with_images: int = 0
    total_images: int = 0
    locations_by_bird: list[BirdLocationCount] = Field(default_factory=list)
    locations_by_zone: dict[str, int] = Field(default_factory=dict)
    locations_by_hemisphere: dict[str, int] = Field(default_factory=dict)
    locations_by_governorate: dict[str, int] = Field(default_factory=dict)

    @property
    def average_locations(self) -> float:
        if not self.total_birds:
            return 0.0
        return round(self.total_locations / self.total_birds, 2)


def compute_statistics(records: Iterable[BirdRecord]) -> AtlasStatistics:
    """Aggregate counts.

    Zone and hemisphere counts only include locations that would appear on
    the map. ``locations_by_bird`` is sorted by count, highest first, then by
    name.
    """
    birds = list(records)
    zones: Counter[str] = Counter({z.value: 0 for z in ClimateZone})
    hemispheres: Counter[str] = Counter({h.value: 0 for h in Hemisphere})
    governorates: Counter[str] = Counter()
    mapped = 0

    for bird in birds:
        for entry in bird.locations:
            if entry.governorate:
                governorates[entry.governorate] += 1
            if not is_valid_coordinate(entry.latitude, entry.longitude):
                continue
            mapped += 1
            zones[zone(entry.latitude).value] += 1
            hemispheres[hemisphere(entry.latitude).value] += 1

    per_bird = sorted(
        (
            BirdLocationCount(bird_name=bird.display_name, count=len(bird.locations))
            for bird in birds
        ),
        key=lambda item: (-item.count, item.bird_name),
    )

    return AtlasStatistics(
        total_birds=len(birds),
        total_locations=sum(len(bird.locations) for bird in birds),
        mapped_locations=mapped,
        birds_with_audio=sum(1 for bird in birds if bird.audio_file),
        birds_with_images=sum(1 for bird in birds if bird.sub_images),
        total_images=sum(len(bird.sub_images) for bird in birds),
        locations_by_bird=per_bird,
        locations_by_zone=dict(zones),
        locations_by_hemisphere=dict(hemispheres),
        locations_by_governorate=dict(governorates.most_common()),
    )
