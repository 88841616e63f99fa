"""Latitude classification into hemisphere and climate zone."""

from enum import StrEnum


class Hemisphere(StrEnum):
    NORTH = "north"
    SOUTH = "south"


class ClimateZone(StrEnum):
    TROPICAL = "tropical"
    TEMPERATE = "temperate"
    SUBPOLAR = "subpolar"
    POLAR = "polar"


TROPIC_LIMIT = 23.5
SUBTROPIC_LIMIT = 35.0
TEMPERATE_LIMIT = 50.0
POLAR_CIRCLE = 66.5

# Lower bound (inclusive) of each band on absolute latitude, highest first.
# The subtropical band 23.5-35 is reported as temperate.
ZONE_BANDS: tuple[tuple[float, ClimateZone], ...] = (
    (POLAR_CIRCLE, ClimateZone.POLAR),
    (TEMPERATE_LIMIT, ClimateZone.SUBPOLAR),
    (SUBTROPIC_LIMIT, ClimateZone.TEMPERATE),
    (TROPIC_LIMIT, ClimateZone.TEMPERATE),
    (0.0, ClimateZone.TROPICAL),
)


def hemisphere(latitude: float) -> Hemisphere:
    """North for latitude >= 0, south otherwise."""
    return Hemisphere.NORTH if latitude >= 0 else Hemisphere.SOUTH


def zone(latitude: float) -> ClimateZone:
    """Classify a latitude by its absolute value."""
    magnitude = abs(latitude)
    for lower_bound, band in ZONE_BANDS:
        if magnitude >= lower_bound:
            return band
    return ClimateZone.TROPICAL
