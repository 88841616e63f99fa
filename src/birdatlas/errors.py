"""Exception hierarchy for the birdatlas client layer.

Three failure families exist:
- collaborator not ready: the actor or identity has not been established yet
- remote call failure: any rejected call to the backend, surfaced verbatim
- validation failure: local checks that block a call before it is sent
"""


class BirdAtlasError(Exception):
    """Base class for all birdatlas errors."""


class ActorNotReadyError(BirdAtlasError):
    """Raised when a write is attempted before the actor handle is available."""

    def __init__(self, operation: str = "") -> None:
        self.operation = operation
        message = "Actor not available"
        if operation:
            message = f"Actor not available for '{operation}'"
        super().__init__(message)


class RemoteCallError(BirdAtlasError):
    """A backend call was rejected.

    The backend carries no structured error codes, so callers must treat every
    instance as a generic failure of the whole call.
    """

    def __init__(self, method: str, message: str) -> None:
        self.method = method
        self.message = message
        super().__init__(f"{method}: {message}")


class BoundaryError(RemoteCallError):
    """A remote payload did not match the expected entity shape."""


class ValidationFailure(BirdAtlasError):
    """A local input check failed; nothing was sent to the backend."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UploadError(BirdAtlasError):
    """A file upload or its reference registration failed.

    When ``uploaded`` is True at least one blob exists in storage that nothing
    references; ``orphaned_paths`` lists them and the caller owns dropping them.
    """

    def __init__(
        self,
        path: str,
        message: str,
        uploaded: bool = False,
        orphaned_paths: list[str] | None = None,
    ) -> None:
        self.path = path
        self.uploaded = uploaded
        if orphaned_paths is None:
            orphaned_paths = [path] if uploaded else []
        self.orphaned_paths = list(orphaned_paths)
        super().__init__(f"{path}: {message}")
