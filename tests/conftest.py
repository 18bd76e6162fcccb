"""Shared pytest fixtures for branch_sweep tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from branch_sweep.models import RepositorySnapshot

_SWEEP_ENV_VARS = (
    "GITHUB_ACCESS_TOKEN",
    "GITHUB_API_URL",
    "SWEEP_PROTECTED_BRANCHES",
    "SWEEP_BUCKET_TEMPLATE",
    "HELM_BINARY",
    "HELM_KUBECONTEXT",
    "KUBECONFIG",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_DEFAULT_REGION",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Clear sweep variables and point the .env lookup at an empty temporary file."""
    for name in _SWEEP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    monkeypatch.setenv("BRANCH_SWEEP_ENV_FILE", str(env_file))
    yield env_file


@pytest.fixture(name="make_snapshot")
def fixture_make_snapshot():
    """Factory for snapshots with sensible defaults."""

    def _make(repository="myapp", branches=(), pull_requests=(), organization="acme"):
        return RepositorySnapshot(
            organization=organization,
            repository=repository,
            live_branches=frozenset(branches),
            open_pull_requests=frozenset(pull_requests),
        )

    return _make


@pytest.fixture(name="client_error")
def fixture_client_error():
    """Factory for botocore ClientError instances with a given error code."""

    def _make(code, operation="ListObjectsV2"):
        return ClientError({"Error": {"Code": code, "Message": code}}, operation)

    return _make


@pytest.fixture(name="mock_s3")
def fixture_mock_s3():
    """
    S3 client double.

    ``mock_s3.pages`` maps a bucket to its ``list_objects_v2`` pages (or an
    exception to raise); ``mock_s3.versions`` maps ``(bucket, key)`` to its
    ``list_object_versions`` pages.
    """
    s3 = MagicMock()
    s3.pages = {}
    s3.versions = {}

    def _paginate(Bucket):  # pylint: disable=invalid-name
        pages = s3.pages.get(Bucket)
        if isinstance(pages, Exception):
            raise pages
        return iter(pages or [])

    def _paginate_versions(Bucket, Prefix):  # pylint: disable=invalid-name
        return iter(s3.versions.get((Bucket, Prefix), []))

    paginators = {"list_objects_v2": MagicMock(), "list_object_versions": MagicMock()}
    paginators["list_objects_v2"].paginate.side_effect = _paginate
    paginators["list_object_versions"].paginate.side_effect = _paginate_versions
    s3.get_paginator.side_effect = paginators.__getitem__
    s3.delete_objects.return_value = {}
    return s3
