"""Local input checks run before a write is sent.

A failed check raises :class:`~birdatlas.errors.ValidationFailure`; the write
never reaches the query cache or the network.
"""

import math

from birdatlas.birds.models import BirdDraft, BirdRecord
from birdatlas.errors import ValidationFailure
from birdatlas.gate.models import UserProfile, UserRole

LATITUDE_LIMIT = 90.0
LONGITUDE_LIMIT = 180.0


def require_text(value: str | None, field: str) -> str:
    """Return ``value`` stripped, failing when it is blank."""
    text = (value or "").strip()
    if not text:
        raise ValidationFailure(field, "is required")
    return text


def parse_coordinate(value: float | str | None, field: str, limit: float) -> float:
    """Parse a coordinate as typed into a form.

    Blank input parses as 0.0. Anything else must be a finite number within
    ``±limit``.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationFailure(field, f"'{value}' is not a number") from e
    if not math.isfinite(number):
        raise ValidationFailure(field, "must be a finite number")
    if abs(number) > limit:
        raise ValidationFailure(field, f"must be between -{limit:g} and {limit:g}")
    return number


def parse_latitude(value: float | str | None) -> float:
    return parse_coordinate(value, "latitude", LATITUDE_LIMIT)


def parse_longitude(value: float | str | None) -> float:
    return parse_coordinate(value, "longitude", LONGITUDE_LIMIT)


def validate_new_location(
    bird_name: str,
    latitude: float | str,
    longitude: float | str,
    *args: object,
    **kwargs: object,
) -> None:
    """Check a location being added to a bird."""
    require_text(bird_name, "bird_name")
    parse_latitude(latitude)
    parse_longitude(longitude)


def validate_bird_draft(draft: BirdDraft) -> None:
    """Check a new bird: the Arabic name is required, coordinates must parse."""
    require_text(draft.arabic_name, "arabic_name")
    parse_latitude(draft.latitude)
    parse_longitude(draft.longitude)


def validate_bird_record(record: BirdRecord, *args: object) -> None:
    """Check an edited bird before saving it whole."""
    require_text(record.display_name, "arabic_name")
    for location in record.locations:
        parse_latitude(location.latitude)
        parse_longitude(location.longitude)


def validate_bird_records(records: list[BirdRecord]) -> None:
    for record in records:
        validate_bird_record(record)


def validate_bird_name(bird_name: str, *args: object, **kwargs: object) -> None:
    require_text(bird_name, "bird_name")


def validate_named_path(bird_name: str, path: str, *args: object) -> None:
    require_text(bird_name, "bird_name")
    require_text(path, "path")


def validate_path(path: str, *args: object) -> None:
    require_text(path, "path")


def validate_bird_id(bird_id: int) -> None:
    if not isinstance(bird_id, int) or isinstance(bird_id, bool) or bird_id < 0:
        raise ValidationFailure("bird_id", "must be a non-negative integer")


def validate_team_member(full_name_tribe: str, *args: object, **kwargs: object) -> None:
    require_text(full_name_tribe, "full_name_tribe")


def validate_changes(bird_name: str, record: BirdRecord) -> None:
    require_text(bird_name, "bird_name")
    validate_bird_record(record)


def validate_bird_update(bird_name: str, arabic_name: str, *args: object) -> None:
    """Check a rename or detail edit: both the current and the new name are required."""
    require_text(bird_name, "bird_name")
    require_text(arabic_name, "arabic_name")


def validate_profile(profile: UserProfile) -> None:
    require_text(profile.name, "name")


def validate_role_assignment(principal: str, role: UserRole | str) -> None:
    require_text(principal, "principal")
    try:
        UserRole(role)
    except ValueError as e:
        raise ValidationFailure("role", f"unknown role '{role}'") from e
