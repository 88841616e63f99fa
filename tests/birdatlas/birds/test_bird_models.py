"""Tests for bird entity models."""

import pytest
from pydantic import ValidationError

from birdatlas.birds.models import (
    BirdDraft,
    BirdRecord,
    LocationData,
    LocationEntry,
    TeamGroup,
    TeamMember,
)


class TestLocationEntry:
    """Test sighting location parsing."""

    def test_flat_and_nested_coordinates_agree(self):
        """Should accept both coordinate shapes."""
        flat = LocationEntry.model_validate({"latitude": 24.1, "longitude": 55.9})
        nested = LocationEntry.model_validate({"coordinate": {"latitude": 24.1, "longitude": 55.9}})

        assert flat == nested

    def test_empty_coordinate_option(self):
        """Should treat a missing coordinate option as (0, 0)."""
        entry = LocationEntry.model_validate({"coordinate": [], "location": "Wadi"})

        assert (entry.latitude, entry.longitude) == (0.0, 0.0)
        assert not entry.has_coordinate

    @pytest.mark.parametrize(
        "latitude,longitude,expected",
        [
            pytest.param(0.0, 0.0, False, id="origin"),
            pytest.param(0.0, 12.5, True, id="equator"),
            pytest.param(-33.9, 0.0, True, id="prime-meridian"),
        ],
    )
    def test_has_coordinate(self, latitude, longitude, expected):
        """Should only treat exactly (0, 0) as unset."""
        assert LocationEntry(latitude=latitude, longitude=longitude).has_coordinate is expected

    def test_null_text_becomes_empty(self):
        """Should never expose None for text fields."""
        entry = LocationEntry.model_validate({"valleyName": None, "notes": None})

        assert entry.valley_name == ""
        assert entry.notes == ""

    def test_to_remote_uses_backend_names(self):
        """Should serialize with camelCase field names."""
        remote = LocationEntry(mountain_name="Hafeet").to_remote()

        assert remote["mountainName"] == "Hafeet"
        assert "mountain_name" not in remote


class TestBirdRecord:
    """Test bird record parsing and derived properties."""

    def test_defaults(self):
        """Should default every text field to an empty string."""
        bird = BirdRecord()

        assert bird.arabic_name == ""
        assert bird.sub_images == []
        assert bird.locations == []
        assert bird.audio_file is None

    @pytest.mark.parametrize(
        "audio,expected",
        [
            pytest.param(None, None, id="null"),
            pytest.param("", None, id="empty"),
            pytest.param([], None, id="empty-option"),
            pytest.param(["audio/1.mp3"], "audio/1.mp3", id="some"),
            pytest.param("audio/1.mp3", "audio/1.mp3", id="string"),
        ],
    )
    def test_audio_file_shapes(self, audio, expected):
        """Should normalize every audio encoding."""
        assert BirdRecord.model_validate({"audioFile": audio}).audio_file == expected

    def test_display_name_fallbacks(self):
        """Should prefer the Arabic name, then the registry key."""
        assert BirdRecord(arabic_name="بومة", name="owl").display_name == "بومة"
        assert BirdRecord(name="owl", english_name="Owl").display_name == "owl"
        assert BirdRecord(scientific_name="Bubo").display_name == "Bubo"

    def test_primary_image(self, owl):
        """Should use the first gallery image."""
        assert owl.primary_image == "images/1_owl.png"
        assert BirdRecord().primary_image is None

    def test_records_are_immutable(self, owl):
        """Should reject in-place edits."""
        with pytest.raises(ValidationError):
            owl.arabic_name = "edited"

    def test_to_remote_round_trips(self, owl):
        """Should parse its own remote form back to an equal record."""
        assert BirdRecord.model_validate(owl.to_remote()) == owl


def test_bird_draft_keeps_raw_coordinates():
    """Should keep coordinates as typed until submission."""
    draft = BirdDraft(arabic_name="بومة", latitude="24.5", longitude="")

    assert draft.latitude == "24.5"
    assert draft.longitude == ""


def test_location_data_nested_coordinate():
    """Should flatten the backend's location listing."""
    item = LocationData.model_validate(
        {"birdName": "بومة", "coordinate": {"latitude": 24.2, "longitude": 55.8}}
    )

    assert item.bird_name == "بومة"
    assert item.latitude == 24.2


def test_team_member_aliases():
    """Should accept backend field names for team members."""
    member = TeamMember.model_validate(
        {"number": 3, "fullNameTribe": "Salim Al Kaabi", "contactNumber": "+968 9000 0000"}
    )

    assert member.full_name_tribe == "Salim Al Kaabi"
    assert member.contact_number == "+968 9000 0000"


@pytest.mark.parametrize(
    "coordinate,expected",
    [
        pytest.param([{"latitude": 24.2, "longitude": 55.8}], (24.2, 55.8), id="option-some"),
        pytest.param([], (0.0, 0.0), id="option-none"),
        pytest.param(None, (0.0, 0.0), id="null"),
    ],
)
def test_location_data_option_coordinate(coordinate, expected):
    """Should unwrap an optional coordinate in the map listing."""
    item = LocationData.model_validate({"birdName": "بومة", "coordinate": coordinate})

    assert (item.latitude, item.longitude) == expected


@pytest.mark.parametrize(
    "model",
    [pytest.param(LocationEntry, id="entry"), pytest.param(LocationData, id="listing")],
)
def test_non_record_coordinate_is_validation_error(model):
    """Should report a non-record coordinate as a validation error."""
    with pytest.raises(ValidationError, match="coordinate must be a record"):
        model.model_validate({"birdName": "بومة", "coordinate": "24.2,55.8"})


def test_team_group_defaults_missing_groups():
    """Should turn absent or null groups into empty lists."""
    group = TeamGroup.model_validate({"projectManagers": ["Salim"], "followers": None})

    assert group.project_managers == ["Salim"]
    assert group.followers == []
    assert group.designers == []
