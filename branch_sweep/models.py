"""Data passed between the inventory, reconciler and driver stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import SetupError

KEEP = "keep"
ORPHAN = "orphan"
IGNORED = "ignored"


@dataclass(frozen=True)
class RepositorySlug:
    """An ``organization/repository`` pair given on the command line."""

    organization: str
    repository: str

    @classmethod
    def parse(cls, text: str) -> "RepositorySlug":
        """Parse ``org/repo``; anything else is a setup error."""
        parts = text.strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise SetupError(f"Invalid repository slug {text!r}; expected organization/repository")
        return cls(organization=parts[0], repository=parts[1])

    def __str__(self) -> str:
        return f"{self.organization}/{self.repository}"


@dataclass(frozen=True)
class RepositorySnapshot:
    """Branches and pull requests alive in one repository at sweep time."""

    organization: str
    repository: str
    live_branches: frozenset[str] = frozenset()
    open_pull_requests: frozenset[int] = frozenset()

    @property
    def key(self) -> str:
        """Repository key compared with the first segment of release names."""
        return self.repository.lower()

    @property
    def slug(self) -> str:
        return f"{self.organization}/{self.repository}"


@dataclass(frozen=True)
class ArtifactRecord:
    """
    A deployed artifact as reported by a backend.

    ``repository`` is only set by backends that store the owning repository
    explicitly (blob storage); release names carry it as their prefix instead.
    """

    name: str
    handle: Any = None
    repository: Optional[str] = None
    branch: Optional[str] = None
    info: str = ""


@dataclass(frozen=True)
class Decision:
    """Outcome of classifying one artifact."""

    artifact: ArtifactRecord
    verdict: str  # keep|orphan|ignored
    reason: str


@dataclass(frozen=True)
class DeleteFailure:
    artifact: ArtifactRecord
    error: str


@dataclass
class SweepSummary:
    """Counts and details collected during one sweep."""

    backend: str
    dry_run: bool = False
    repositories: List[str] = field(default_factory=list)
    kept: List[ArtifactRecord] = field(default_factory=list)
    orphans: List[ArtifactRecord] = field(default_factory=list)
    ignored: List[ArtifactRecord] = field(default_factory=list)
    deleted: List[ArtifactRecord] = field(default_factory=list)
    failed: List[DeleteFailure] = field(default_factory=list)

    def record(self, decision: Decision) -> None:
        bucket = {KEEP: self.kept, ORPHAN: self.orphans, IGNORED: self.ignored}[decision.verdict]
        bucket.append(decision.artifact)
