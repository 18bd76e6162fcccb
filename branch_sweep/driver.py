"""
Sweep driver: snapshot repositories, list artifacts, reconcile, delete.

Everything up to and including the inventory listing is fail-fast. Once
deletion starts, a failed delete is logged and recorded and the sweep moves on
to the next orphan.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .backends import ArtifactBackend
from .errors import DeleteError
from .github_client import GitHubClient
from .inventory import build_snapshots
from .models import KEEP, ORPHAN, DeleteFailure, RepositorySlug, SweepSummary
from .reconciler import classify_all, expected_names


def _delete_orphans(backend: ArtifactBackend, summary: SweepSummary) -> None:
    for artifact in summary.orphans:
        if summary.dry_run:
            logging.info("(dry run) would delete %s", artifact.name)
            continue
        logging.info("Deleting %s", artifact.name)
        try:
            message = backend.delete(artifact)
        except DeleteError as exc:
            logging.error("Failed to delete %s: %s", artifact.name, exc.cause)
            summary.failed.append(DeleteFailure(artifact=artifact, error=exc.cause))
            continue
        logging.info("Deleted %s: %s", artifact.name, message)
        summary.deleted.append(artifact)


def run_sweep(
    repositories: Sequence[RepositorySlug],
    source_control: GitHubClient,
    backend: ArtifactBackend,
    *,
    protected_branches: Sequence[str] = (),
    dry_run: bool = False,
) -> SweepSummary:
    """
    Run one sweep over the given repositories.

    Args:
        repositories: Repositories whose artifacts are managed
        source_control: Client used to read live branches and pull requests
        backend: Where artifacts are listed and deleted
        protected_branches: Branch names always treated as live
        dry_run: Classify and report without deleting anything

    Returns:
        SweepSummary: Classification and delete outcomes

    Raises:
        SetupError: If credentials or tooling are unusable
        ListingError: If branches, pull requests or artifacts cannot be listed
    """
    summary = SweepSummary(backend=backend.name, dry_run=dry_run)
    summary.repositories = [str(slug) for slug in repositories]
    logging.info("Starting %s clean up run for %d repositories", backend.name, len(repositories))

    backend.check_connection()
    snapshots = build_snapshots(
        source_control,
        repositories,
        protected_branches=protected_branches,
        include_pull_requests=backend.tracks_pull_requests,
    )
    for snapshot in snapshots.values():
        logging.debug(
            "%s: %d live branches, %d open pull requests, expected names %s",
            snapshot.slug,
            len(snapshot.live_branches),
            len(snapshot.open_pull_requests),
            sorted(expected_names(snapshot)),
        )

    artifacts = backend.list_artifacts(snapshots)
    for decision in classify_all(snapshots, artifacts):
        summary.record(decision)
        if decision.verdict == ORPHAN:
            logging.info("orphan %s: %s", decision.artifact.name, decision.reason)
        elif decision.verdict == KEEP:
            logging.info("keep %s: %s", decision.artifact.name, decision.reason)
        else:
            logging.info("ignore %s: %s", decision.artifact.name, decision.reason)

    _delete_orphans(backend, summary)
    logging.info(
        "Sweep finished: %d kept, %d orphaned, %d ignored, %d deleted, %d failed",
        len(summary.kept),
        len(summary.orphans),
        len(summary.ignored),
        len(summary.deleted),
        len(summary.failed),
    )
    return summary
