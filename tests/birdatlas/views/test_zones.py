"""Tests for latitude classification."""

import pytest

from birdatlas.views.zones import ClimateZone, Hemisphere, hemisphere, zone


class TestHemisphere:
    """Test hemisphere classification."""

    @pytest.mark.parametrize(
        "latitude,expected",
        [
            pytest.param(0.0, Hemisphere.NORTH, id="equator-is-north"),
            pytest.param(23.6, Hemisphere.NORTH, id="north"),
            pytest.param(-0.01, Hemisphere.SOUTH, id="just-south"),
        ],
    )
    def test_hemisphere(self, latitude, expected):
        """Should put the equator in the northern hemisphere."""
        assert hemisphere(latitude) == expected


class TestZone:
    """Test climate zone bands."""

    @pytest.mark.parametrize(
        "latitude,expected",
        [
            pytest.param(0.0, ClimateZone.TROPICAL, id="equator"),
            pytest.param(23.49, ClimateZone.TROPICAL, id="inside-tropics"),
            pytest.param(23.5, ClimateZone.TEMPERATE, id="tropic-boundary"),
            pytest.param(-30.0, ClimateZone.TEMPERATE, id="southern-subtropics"),
            pytest.param(49.9, ClimateZone.TEMPERATE, id="temperate"),
            pytest.param(50.0, ClimateZone.SUBPOLAR, id="subpolar-boundary"),
            pytest.param(66.5, ClimateZone.POLAR, id="polar-circle"),
            pytest.param(-90.0, ClimateZone.POLAR, id="south-pole"),
        ],
    )
    def test_zone(self, latitude, expected):
        """Should classify by absolute latitude with inclusive lower bounds."""
        assert zone(latitude) == expected
