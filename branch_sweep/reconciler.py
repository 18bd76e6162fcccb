"""
Classify deployed artifacts against repository snapshots.

Release artifacts are matched by recomputing the names the pipeline would
have given every live branch and open pull request. Blob artifacts carry their
repository and branch explicitly and are matched on the branch tag alone.
Artifacts that cannot be tied to a configured repository are left alone.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping

from .models import IGNORED, KEEP, ORPHAN, ArtifactRecord, Decision, RepositorySnapshot
from .naming import derive_name, name_prefix


def expected_names(snapshot: RepositorySnapshot) -> frozenset[str]:
    """Return every artifact name that is still backed by a live branch or open PR."""
    names = {derive_name(snapshot.repository, branch) for branch in snapshot.live_branches}
    names.update(derive_name(snapshot.repository, number) for number in snapshot.open_pull_requests)
    return frozenset(names)


def _classify_release(snapshots: Mapping[str, RepositorySnapshot], artifact: ArtifactRecord) -> Decision:
    key = name_prefix(artifact.name)
    if key is None:
        return Decision(artifact, IGNORED, "name has no repository prefix")
    snapshot = snapshots.get(key)
    if snapshot is None:
        return Decision(artifact, IGNORED, f"no configured repository {key!r}")

    for branch in sorted(snapshot.live_branches):
        candidate = derive_name(snapshot.repository, branch)
        logging.debug(
            "comparing %s with %s (repository %s, branch %s)",
            candidate,
            artifact.name,
            snapshot.repository,
            branch,
        )
        if candidate == artifact.name:
            return Decision(artifact, KEEP, f"branch {branch!r} is live")
    for number in sorted(snapshot.open_pull_requests):
        if derive_name(snapshot.repository, number) == artifact.name:
            return Decision(artifact, KEEP, f"pull request #{number} is open")
    return Decision(artifact, ORPHAN, f"no live branch or open pull request in {snapshot.slug}")


def _classify_blob(snapshots: Mapping[str, RepositorySnapshot], artifact: ArtifactRecord) -> Decision:
    snapshot = snapshots.get(artifact.repository or "")
    if snapshot is None:
        return Decision(artifact, IGNORED, f"no configured repository {artifact.repository!r}")
    if artifact.branch is None:
        return Decision(artifact, ORPHAN, "no branch metadata")
    if artifact.branch in snapshot.live_branches:
        return Decision(artifact, KEEP, f"branch {artifact.branch!r} is live")
    return Decision(artifact, ORPHAN, f"branch {artifact.branch!r} no longer exists in {snapshot.slug}")


def classify(snapshots: Mapping[str, RepositorySnapshot], artifact: ArtifactRecord) -> Decision:
    """Decide whether one artifact is kept, orphaned or outside the sweep's scope."""
    if artifact.repository is None:
        return _classify_release(snapshots, artifact)
    return _classify_blob(snapshots, artifact)


def classify_all(
    snapshots: Mapping[str, RepositorySnapshot],
    artifacts: Iterable[ArtifactRecord],
) -> List[Decision]:
    """Classify artifacts, preserving their input order."""
    return [classify(snapshots, artifact) for artifact in artifacts]


def reconcile(
    snapshots: Mapping[str, RepositorySnapshot],
    artifacts: Iterable[ArtifactRecord],
) -> List[ArtifactRecord]:
    """Return the artifacts whose branch or pull request no longer exists."""
    return [d.artifact for d in classify_all(snapshots, artifacts) if d.verdict == ORPHAN]
