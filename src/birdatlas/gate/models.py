"""Identity and permission models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class UserRole(StrEnum):
    """Caller role as reported by the backend."""

    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


class UserProfile(BaseModel):
    """Profile metadata for the calling principal."""

    model_config = ConfigDict(frozen=True)

    name: str
    role: str = ""


class Identity(BaseModel):
    """A signed-in principal."""

    model_config = ConfigDict(frozen=True)

    principal: str


class GateState(StrEnum):
    """States of the admin permission gate."""

    CHECKING = "checking"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_NON_ADMIN = "authenticated_non_admin"
    AUTHENTICATED_ADMIN = "authenticated_admin"

    @property
    def is_terminal(self) -> bool:
        return self is not GateState.CHECKING


class GateEvent(StrEnum):
    """Inputs to the gate's transition function."""

    IDENTITY_CHANGED = "identity_changed"
    NO_IDENTITY = "no_identity"
    ADMIN_CONFIRMED = "admin_confirmed"
    ADMIN_DENIED = "admin_denied"
    CHECK_FAILED = "check_failed"
