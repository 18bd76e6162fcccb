"""Build per-repository snapshots of live branches and open pull requests."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Sequence

from .errors import SetupError
from .github_client import GitHubClient
from .models import RepositorySlug, RepositorySnapshot


def build_snapshot(
    client: GitHubClient,
    slug: RepositorySlug,
    *,
    protected_branches: Sequence[str] = (),
    include_pull_requests: bool = True,
) -> RepositorySnapshot:
    """
    Query the live state of one repository.

    Protected branches are added unconditionally because the branch listing
    leaves them out for tokens without admin rights.

    Raises:
        ListingError: If GitHub cannot be queried
        SetupError: If the token is rejected
    """
    branches = set(client.list_branches(slug.organization, slug.repository))
    branches.update(protected_branches)

    pull_requests: Iterable[int] = ()
    if include_pull_requests:
        pull_requests = client.list_open_pull_requests(slug.organization, slug.repository)

    return RepositorySnapshot(
        organization=slug.organization,
        repository=slug.repository,
        live_branches=frozenset(branches),
        open_pull_requests=frozenset(pull_requests),
    )


def _snapshot_key(slug: RepositorySlug, *, by_repository: bool) -> str:
    if by_repository:
        return slug.repository.lower()
    return str(slug).lower()


def build_snapshots(
    client: GitHubClient,
    slugs: Sequence[RepositorySlug],
    *,
    protected_branches: Sequence[str] = (),
    include_pull_requests: bool = True,
) -> Dict[str, RepositorySnapshot]:
    """
    Snapshot every configured repository.

    Release names only carry the repository name, so when pull requests are
    tracked (release mode) snapshots are keyed by the lowercased repository
    name and two organizations may not share one. Blobs live in a bucket per
    ``organization/repository`` and carry that association explicitly, so in
    blob mode snapshots are keyed by the lowercased slug instead.

    Raises:
        SetupError: If two slugs map to the same key
        ListingError: If any repository cannot be listed
    """
    seen: Dict[str, RepositorySlug] = {}
    for slug in slugs:
        key = _snapshot_key(slug, by_repository=include_pull_requests)
        if key in seen:
            if include_pull_requests:
                raise SetupError(f"Repositories {seen[key]} and {slug} share the artifact prefix {key!r}")
            raise SetupError(f"Repository {slug} is listed more than once")
        seen[key] = slug
        if include_pull_requests and "-" in key:
            logging.warning(
                "Repository %s contains '-'; release names cannot be attributed to it by prefix",
                slug,
            )

    snapshots: Dict[str, RepositorySnapshot] = {}
    for key, slug in seen.items():
        logging.info("Reading branches for repository %s", slug)
        snapshots[key] = build_snapshot(
            client,
            slug,
            protected_branches=protected_branches,
            include_pull_requests=include_pull_requests,
        )
    return snapshots
