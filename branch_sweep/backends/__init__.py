"""
Artifact backends: where deployed artifacts are listed and deleted.

Both variants expose the same capability pair so the driver never needs to
know which one it is talking to.
"""

from __future__ import annotations

from typing import List, Mapping, Protocol

from ..config import BACKEND_HELM, BACKEND_STORAGE, SweepSettings
from ..errors import SetupError
from ..models import ArtifactRecord, RepositorySnapshot
from .helm import HelmCli, HelmReleaseBackend
from .storage import S3BlobBackend, create_client


class ArtifactBackend(Protocol):
    """Capability pair used by the sweep driver."""

    name: str
    tracks_pull_requests: bool

    def check_connection(self) -> None:
        """Raise SetupError when the backend cannot be reached."""

    def list_artifacts(self, snapshots: Mapping[str, RepositorySnapshot]) -> List[ArtifactRecord]:
        """Return every deployed artifact; raise ListingError on failure."""

    def delete(self, artifact: ArtifactRecord) -> str:
        """Delete one artifact and return a backend message; raise DeleteError on failure."""


def create_backend(name: str, settings: SweepSettings) -> ArtifactBackend:
    """Build the backend selected on the command line."""
    if name == BACKEND_HELM:
        cli = HelmCli(
            settings.helm_binary,
            kube_context=settings.kube_context,
            kubeconfig=settings.kubeconfig,
        )
        return HelmReleaseBackend(cli)
    if name == BACKEND_STORAGE:
        credentials = {
            "region": settings.aws_region,
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
            "aws_session_token": settings.aws_session_token,
        }
        return S3BlobBackend(
            create_client("s3", **credentials),
            sts_client=create_client("sts", **credentials),
            bucket_template=settings.bucket_template,
        )
    raise SetupError(f"Unknown backend {name!r}")


__all__ = [
    "ArtifactBackend",
    "HelmCli",
    "HelmReleaseBackend",
    "S3BlobBackend",
    "create_backend",
]
