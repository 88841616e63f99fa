"""Search and species filtering over bird records."""

import re
from collections.abc import Iterable

from birdatlas.birds.models import BirdRecord

ALL_SPECIES = "الكل"

_TATWEEL = "\u0640"
_SPACES_AND_DASHES = re.compile(r"[\s-]+")


def normalize_bird_name(name: str) -> str:
    """Canonical form for comparing bird names typed in different ways.

    Drops Arabic tatweel, whitespace and dashes, and a trailing ``sub``
    suffix.
    """
    if not name:
        return ""
    normalized = _SPACES_AND_DASHES.sub("", name.strip().replace(_TATWEEL, ""))
    if normalized.lower().endswith("sub"):
        normalized = normalized[:-3]
    return normalized


def same_bird(first: str, second: str) -> bool:
    return normalize_bird_name(first) == normalize_bird_name(second)


def matches(bird: BirdRecord, term: str) -> bool:
    """Case-insensitive substring match on the key and every name field."""
    needle = term.strip().casefold()
    if not needle:
        return True
    names = (bird.name, bird.arabic_name, bird.english_name, bird.scientific_name, bird.local_name)
    return any(needle in name.casefold() for name in names if name)


def search(records: Iterable[BirdRecord], term: str) -> list[BirdRecord]:
    return [bird for bird in records if matches(bird, term)]


def species_options(records: Iterable[BirdRecord]) -> list[str]:
    """Filter choices: "all" followed by the sorted distinct display names."""
    names = {bird.display_name for bird in records if bird.locations and bird.display_name}
    return [ALL_SPECIES, *sorted(names)]


def filter_species(records: Iterable[BirdRecord], species: str) -> list[BirdRecord]:
    if not species or species == ALL_SPECIES:
        return list(records)
    return [bird for bird in records if same_bird(bird.display_name, species)]
