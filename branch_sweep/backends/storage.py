"""
Blob storage backend on S3.

Each repository publishes into its own bucket (``<organization>-<repository>``
by default) and tags every object with a ``branch`` user-metadata entry. S3
does not return user metadata in listings, so every object is read with
``head_object`` before it can be classified. Deleting an orphan also purges
its older versions and delete markers, so versioned buckets are left clean.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import DeleteError, ListingError, SetupError
from ..models import ArtifactRecord, RepositorySnapshot

BRANCH_METADATA_KEY = "branch"
MISSING_BUCKET_CODES = {"NoSuchBucket"}
MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}

_GONE = object()


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def create_client(
    service_name: str,
    region: str,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
    aws_session_token: Optional[str] = None,
):
    """Create a boto3 client with explicit credentials."""
    client_kwargs = {
        "aws_access_key_id": aws_access_key_id,
        "aws_secret_access_key": aws_secret_access_key,
        "region_name": region,
    }
    if aws_session_token:
        client_kwargs["aws_session_token"] = aws_session_token
    return boto3.client(service_name, **client_kwargs)


class S3BlobBackend:
    """Lists branch-tagged objects per repository bucket and deletes orphans."""

    name = "storage"
    tracks_pull_requests = False

    def __init__(self, s3_client, *, sts_client=None, bucket_template: str = "{organization}-{repository}"):
        self.s3 = s3_client
        self.sts = sts_client
        self.bucket_template = bucket_template

    def bucket_for(self, snapshot: RepositorySnapshot) -> str:
        """Bucket names must be lowercase, so the rendered template is lowercased."""
        return self.bucket_template.format(
            organization=snapshot.organization,
            repository=snapshot.repository,
        ).lower()

    def check_connection(self) -> None:
        """Fail early when the credentials are rejected."""
        if self.sts is None:
            return
        try:
            identity = self.sts.get_caller_identity()
        except (ClientError, BotoCoreError) as exc:
            raise SetupError(f"AWS credentials rejected: {exc}") from exc
        logging.info("Using AWS identity %s", identity.get("Arn"))

    def list_artifacts(self, snapshots: Mapping[str, RepositorySnapshot]) -> List[ArtifactRecord]:
        records: List[ArtifactRecord] = []
        for key, snapshot in snapshots.items():
            records.extend(self._list_bucket(key, snapshot))
        return records

    def _list_bucket(self, key: str, snapshot: RepositorySnapshot) -> List[ArtifactRecord]:
        bucket = self.bucket_for(snapshot)
        logging.info("Handling clean up for repository %s (bucket %s)", snapshot.slug, bucket)
        records: List[ArtifactRecord] = []
        paginator = self.s3.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=bucket):
                for obj in page.get("Contents", []):
                    branch = self._branch_tag(bucket, obj["Key"])
                    if branch is _GONE:
                        continue
                    records.append(
                        ArtifactRecord(
                            name=obj["Key"],
                            handle=(bucket, obj["Key"]),
                            repository=key,
                            branch=branch,
                            info=f"s3://{bucket}/{obj['Key']}",
                        )
                    )
        except ClientError as exc:
            if _error_code(exc) in MISSING_BUCKET_CODES:
                logging.info("No bucket for repository %s", snapshot.slug)
                return []
            raise ListingError(f"Could not list bucket {bucket}: {exc}") from exc
        except BotoCoreError as exc:
            raise ListingError(f"Could not list bucket {bucket}: {exc}") from exc

        logging.info("Found %d blobs in bucket %s", len(records), bucket)
        return records

    def _branch_tag(self, bucket: str, object_key: str):
        """Return the object's branch tag, None when untagged, _GONE when the object was removed."""
        try:
            head = self.s3.head_object(Bucket=bucket, Key=object_key)
        except ClientError as exc:
            if _error_code(exc) in MISSING_OBJECT_CODES:
                logging.debug("Object %s/%s disappeared while listing", bucket, object_key)
                return _GONE
            raise
        return head.get("Metadata", {}).get(BRANCH_METADATA_KEY)

    @staticmethod
    def _collect_versions(page, object_key: str) -> List[dict]:
        """Collect the versions and delete markers of exactly ``object_key`` from a page."""
        entries = [*page.get("Versions", []), *page.get("DeleteMarkers", [])]
        return [{"Key": e["Key"], "VersionId": e["VersionId"]} for e in entries if e["Key"] == object_key]

    def _purge_versions(self, bucket: str, object_key: str) -> int:
        paginator = self.s3.get_paginator("list_object_versions")
        removed = 0
        for page in paginator.paginate(Bucket=bucket, Prefix=object_key):
            versions = self._collect_versions(page, object_key)
            if not versions:
                continue
            response = self.s3.delete_objects(Bucket=bucket, Delete={"Objects": versions})
            errors = response.get("Errors", [])
            if errors:
                first = errors[0]
                raise DeleteError(object_key, f"{first.get('Code')}: {first.get('Message')}")
            removed += len(versions)
        return removed

    def delete(self, artifact: ArtifactRecord) -> str:
        """Delete the object, then every remaining version and delete marker."""
        bucket, object_key = artifact.handle
        try:
            self.s3.delete_object(Bucket=bucket, Key=object_key)
            removed = self._purge_versions(bucket, object_key)
        except (ClientError, BotoCoreError) as exc:
            raise DeleteError(artifact.name, str(exc)) from exc
        if removed:
            return f"s3://{bucket}/{object_key} ({removed} versions purged)"
        return f"s3://{bucket}/{object_key}"
