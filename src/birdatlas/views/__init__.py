"""Pure projections of bird records for tables, maps, search and statistics."""

from birdatlas.views.markers import MapMarker, extract_markers, is_valid_coordinate
from birdatlas.views.search import search
from birdatlas.views.statistics import AtlasStatistics, compute_statistics
from birdatlas.views.table import TableRow, flatten
from birdatlas.views.zones import ClimateZone, Hemisphere, hemisphere, zone

__all__ = [
    "AtlasStatistics",
    "ClimateZone",
    "Hemisphere",
    "MapMarker",
    "TableRow",
    "compute_statistics",
    "extract_markers",
    "flatten",
    "hemisphere",
    "is_valid_coordinate",
    "search",
    "zone",
]
