"""Coercion of remote payloads into entity models.

Remote data is duck-typed. Everything the actor returns passes through these
helpers before reaching the cache, so a shape mismatch fails at the boundary
instead of surfacing as a missing attribute inside a view.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from birdatlas.birds.models import BirdRecord
from birdatlas.errors import BoundaryError
from birdatlas.gate.models import UserRole

ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce(model: type[ModelT], payload: Any, method: str) -> ModelT:  # noqa: ANN401
    """Validate a single record."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise BoundaryError(method, f"Unexpected {model.__name__} shape: {e}") from e


def coerce_optional(model: type[ModelT], payload: Any, method: str) -> ModelT | None:  # noqa: ANN401
    """Validate a record that the backend may return as an option."""
    payload = unwrap_option(payload)
    if payload is None:
        return None
    return coerce(model, payload, method)


def coerce_list(model: type[ModelT], payload: Any, method: str) -> list[ModelT]:  # noqa: ANN401
    """Validate a list of records."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise BoundaryError(method, f"Expected a list of {model.__name__}")
    return [coerce(model, item, method) for item in payload]


def coerce_value(annotation: Any, payload: Any, method: str) -> Any:  # noqa: ANN401
    """Validate a primitive or container payload against a type annotation."""
    try:
        return TypeAdapter(annotation).validate_python(payload)
    except ValidationError as e:
        raise BoundaryError(method, f"Unexpected payload: {e}") from e


def coerce_bird_entries(payload: Any, method: str) -> list[BirdRecord]:  # noqa: ANN401
    """Validate the backend's bird listing.

    The listing arrives either as ``[name, record]`` pairs or as bare records.
    For pairs the registry key is copied onto the record when it has no name.
    """
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise BoundaryError(method, "Expected a list of bird entries")

    birds: list[BirdRecord] = []
    for item in payload:
        if isinstance(item, list | tuple):
            if len(item) != 2:
                raise BoundaryError(method, "Bird entry pair must have two elements")
            key, record = item
            bird = coerce(BirdRecord, record, method)
            if not bird.name and isinstance(key, str):
                bird = bird.model_copy(update={"name": key})
            birds.append(bird)
        else:
            birds.append(coerce(BirdRecord, item, method))
    return birds


def coerce_role(payload: Any, method: str) -> UserRole:  # noqa: ANN401
    """Validate a role given as ``"admin"`` or as a variant ``{"admin": null}``."""
    if isinstance(payload, dict) and len(payload) == 1:
        payload = next(iter(payload))
    try:
        return UserRole(payload)
    except ValueError as e:
        raise BoundaryError(method, f"Unknown role: {payload!r}") from e


def unwrap_option(payload: Any) -> Any:  # noqa: ANN401
    """Collapse ``[]`` / ``[value]`` option encoding to ``None`` / ``value``."""
    if isinstance(payload, list) and len(payload) <= 1:
        return payload[0] if payload else None
    return payload
