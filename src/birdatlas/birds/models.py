"""Entity models for bird records and their sighting locations.

These are client-side copies of the backend's records. The backend speaks
camelCase (``arabicName``, ``subImages``); the models accept either the alias
or the field name so fixtures and remote payloads share one validator.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)


def _blank_if_none(value: Any) -> Any:  # noqa: ANN401
    return "" if value is None else value


def _unwrap_option(value: Any) -> Any:  # noqa: ANN401
    """Collapse an option-shaped payload (``[]`` or ``[value]``) to a scalar."""
    if isinstance(value, list | tuple):
        return value[0] if value else None
    return value


def _split_coordinate(data: Any) -> Any:  # noqa: ANN401
    """Lift a nested ``coordinate`` record into flat latitude/longitude fields.

    Raises:
        ValueError: If ``coordinate`` is not a record, so pydantic reports the
            shape mismatch as a validation error
    """
    if not isinstance(data, dict) or "coordinate" not in data:
        return data
    data = dict(data)
    coordinate = _unwrap_option(data.pop("coordinate"))
    if coordinate is None:
        coordinate = {}
    if not isinstance(coordinate, dict):
        raise ValueError(f"coordinate must be a record, got {type(coordinate).__name__}")
    data.setdefault("latitude", coordinate.get("latitude", 0.0))
    data.setdefault("longitude", coordinate.get("longitude", 0.0))
    return data


class LocationEntry(BaseModel):
    """A single sighting location.

    A coordinate of exactly (0, 0) means the location has no coordinate; map
    views exclude it. Range checks are applied to user input before a write,
    not to data the backend returns.
    """

    model_config = _MODEL_CONFIG

    latitude: float = 0.0
    longitude: float = 0.0
    location: str = ""  # Place name
    governorate: str = ""  # Region
    mountain_name: str = ""
    valley_name: str = ""
    notes: str = ""

    @model_validator(mode="before")
    @classmethod
    def _flatten_coordinate(cls, data: Any) -> Any:  # noqa: ANN401
        return _split_coordinate(data)

    @field_validator(
        "location", "governorate", "mountain_name", "valley_name", "notes", mode="before"
    )
    @classmethod
    def _text_not_none(cls, value: Any) -> Any:  # noqa: ANN401
        return _blank_if_none(value)

    @property
    def has_coordinate(self) -> bool:
        return not (self.latitude == 0 and self.longitude == 0)

    def to_remote(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class BirdRecord(BaseModel):
    """A bird with its names, media references and sighting locations.

    ``id`` is assigned by the backend and stays stable across edits. ``name``
    is the backend's registry key for the bird; older payloads only carry it
    as the first element of a ``(name, record)`` pair.
    """

    model_config = _MODEL_CONFIG

    id: int = 0
    name: str = ""
    arabic_name: str = ""
    english_name: str = ""
    scientific_name: str = ""
    local_name: str = ""
    description: str = ""
    notes: str = ""
    sub_images: list[str] = Field(default_factory=list)
    audio_file: str | None = None
    locations: list[LocationEntry] = Field(default_factory=list)

    @field_validator(
        "name",
        "arabic_name",
        "english_name",
        "scientific_name",
        "local_name",
        "description",
        "notes",
        mode="before",
    )
    @classmethod
    def _text_not_none(cls, value: Any) -> Any:  # noqa: ANN401
        return _blank_if_none(value)

    @field_validator("audio_file", mode="before")
    @classmethod
    def _audio_option(cls, value: Any) -> Any:  # noqa: ANN401
        value = _unwrap_option(value)
        return value or None

    @field_validator("sub_images", "locations", mode="before")
    @classmethod
    def _list_not_none(cls, value: Any) -> Any:  # noqa: ANN401
        return [] if value is None else value

    @property
    def display_name(self) -> str:
        """Name shown in lists: the Arabic name, falling back to the registry key."""
        return self.arabic_name or self.name or self.english_name or self.scientific_name

    @property
    def primary_image(self) -> str | None:
        return self.sub_images[0] if self.sub_images else None

    def to_remote(self) -> dict[str, Any]:
        """Serialize with backend field names."""
        return self.model_dump(by_alias=True)


class BirdDraft(BaseModel):
    """User input for a new bird, before it has an id.

    Coordinates are kept as entered; they are parsed and range-checked by the
    write that submits the draft. Blank coordinates mean "no coordinate".
    """

    arabic_name: str = ""
    scientific_name: str = ""
    english_name: str = ""
    local_name: str = ""
    description: str = ""
    notes: str = ""
    latitude: float | str = ""
    longitude: float | str = ""
    location: str = ""
    governorate: str = ""
    mountain_name: str = ""
    valley_name: str = ""
    audio_file_path: str | None = None
    sub_images: list[str] = Field(default_factory=list)


class LocationData(BaseModel):
    """A flat (bird name, coordinate) pair as listed by the backend."""

    model_config = _MODEL_CONFIG

    bird_name: str
    latitude: float = 0.0
    longitude: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def _flatten_coordinate(cls, data: Any) -> Any:  # noqa: ANN401
        return _split_coordinate(data)


class TeamMember(BaseModel):
    """A member of the field research team."""

    model_config = _MODEL_CONFIG

    number: int = 0
    full_name_tribe: str = ""
    university: str = ""
    specialization: str = ""
    residence: str = ""
    contact_number: str = ""
    timestamp: int = 0


class TeamGroup(BaseModel):
    """Team roster grouped by role, names only."""

    model_config = _MODEL_CONFIG

    project_managers: list[str] = Field(default_factory=list)
    designers: list[str] = Field(default_factory=list)
    followers: list[str] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)

    @field_validator("project_managers", "designers", "followers", "members", mode="before")
    @classmethod
    def _list_not_none(cls, value: Any) -> Any:  # noqa: ANN401
        return [] if value is None else value
