"""Error kinds raised by each sweep stage."""

from __future__ import annotations


class SweepError(RuntimeError):
    """Base class for failures that stop or degrade a sweep."""

    stage = "sweep"


class SetupError(SweepError):
    """Raised when credentials, tooling or arguments are unusable before listing starts."""

    stage = "setup"


class ListingError(SweepError):
    """Raised when branches, pull requests or deployed artifacts cannot be listed."""

    stage = "listing"


class DeleteError(SweepError):
    """Raised when a single artifact could not be deleted."""

    stage = "delete"

    def __init__(self, artifact_name: str, cause: str) -> None:
        super().__init__(f"Failed to delete {artifact_name}: {cause}")
        self.artifact_name = artifact_name
        self.cause = cause
