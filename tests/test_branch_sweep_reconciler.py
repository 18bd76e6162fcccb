"""Tests for branch_sweep/reconciler.py."""

from __future__ import annotations

import random

from branch_sweep.models import IGNORED, KEEP, ORPHAN, ArtifactRecord
from branch_sweep.reconciler import classify, classify_all, expected_names, reconcile


def _releases(*names):
    return [ArtifactRecord(name=name, handle="default") for name in names]


def _names(artifacts):
    return {artifact.name for artifact in artifacts}


def test_stale_branch_release_is_orphaned(make_snapshot):
    """Live branches keep their releases; the rest are orphans."""
    snapshots = {"myapp": make_snapshot(branches=["main", "feature/x"])}
    artifacts = _releases("myapp-main", "myapp-feature-x", "myapp-stale-thing")

    assert _names(reconcile(snapshots, artifacts)) == {"myapp-stale-thing"}


def test_open_pull_request_keeps_release(make_snapshot):
    snapshots = {"myapp": make_snapshot(pull_requests=[42])}

    assert reconcile(snapshots, _releases("myapp-pr-42")) == []


def test_closed_pull_request_release_is_orphaned(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["main"], pull_requests=[42])}

    assert _names(reconcile(snapshots, _releases("myapp-pr-41", "myapp-pr-42"))) == {"myapp-pr-41"}


def test_unknown_repository_prefix_is_ignored(make_snapshot):
    """Releases of repositories outside the sweep are never deleted."""
    snapshots = {"myapp": make_snapshot(branches=["main"])}
    artifact = ArtifactRecord(name="unrelated-app-main")

    assert reconcile(snapshots, [artifact]) == []
    decision = classify(snapshots, artifact)
    assert decision.verdict == IGNORED
    assert "unrelated" in decision.reason


def test_name_without_hyphen_is_ignored(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["main"])}

    assert classify(snapshots, ArtifactRecord(name="myapp")).verdict == IGNORED


def test_prefix_match_is_exact(make_snapshot):
    """The repository key must equal the first segment, case included."""
    snapshots = {"myapp": make_snapshot(branches=["main"])}

    assert classify(snapshots, ArtifactRecord(name="MyApp-main")).verdict == IGNORED
    assert classify(snapshots, ArtifactRecord(name="myapp2-main")).verdict == IGNORED


def test_mixed_case_repository_matches_lowercased_release(make_snapshot):
    snapshots = {"myapp": make_snapshot(repository="MyApp", branches=["Main"])}

    assert classify(snapshots, ArtifactRecord(name="myapp-main")).verdict == KEEP


def test_truncated_release_name_is_kept(make_snapshot):
    long_branch = "feature/" + "a" * 80
    snapshots = {"myapp": make_snapshot(branches=[long_branch])}
    artifact = ArtifactRecord(name=("myapp-feature-" + "a" * 80)[:53])

    assert classify(snapshots, artifact).verdict == KEEP


def test_keep_reason_names_the_branch(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["feature/x"], pull_requests=[7])}

    assert "feature/x" in classify(snapshots, ArtifactRecord(name="myapp-feature-x")).reason
    assert "#7" in classify(snapshots, ArtifactRecord(name="myapp-pr-7")).reason


def test_blob_with_live_branch_tag_is_kept(make_snapshot):
    """Blob artifacts match on the raw branch tag, not on a derived name."""
    snapshots = {"myapp": make_snapshot(branches=["release/1.0", "master"])}
    kept = ArtifactRecord(name="build/app.zip", repository="myapp", branch="release/1.0")
    stale = ArtifactRecord(name="build/old.zip", repository="myapp", branch="old-branch")

    assert reconcile(snapshots, [kept, stale]) == [stale]


def test_blob_branch_tag_is_not_slugged(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["release/1.0"])}
    artifact = ArtifactRecord(name="x", repository="myapp", branch="release-1-0")

    assert classify(snapshots, artifact).verdict == ORPHAN


def test_blob_without_branch_tag_is_orphaned(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["master"])}

    decision = classify(snapshots, ArtifactRecord(name="x", repository="myapp"))

    assert decision.verdict == ORPHAN
    assert decision.reason == "no branch metadata"


def test_blob_ignores_pull_requests(make_snapshot):
    snapshots = {"myapp": make_snapshot(pull_requests=[42])}
    artifact = ArtifactRecord(name="x", repository="myapp", branch="pr-42")

    assert classify(snapshots, artifact).verdict == ORPHAN


def test_blob_for_unconfigured_repository_is_ignored(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["master"])}
    artifact = ArtifactRecord(name="x", repository="other", branch="gone")

    assert classify(snapshots, artifact).verdict == IGNORED


def test_reconcile_is_deterministic_and_order_independent(make_snapshot):
    snapshots = {
        "myapp": make_snapshot(branches=["main", "dev", "feature/y"], pull_requests=[3, 9]),
        "api": make_snapshot(repository="api", branches=["main"]),
    }
    artifacts = _releases(
        "myapp-main",
        "myapp-old",
        "myapp-pr-3",
        "myapp-pr-4",
        "api-main",
        "api-feature-gone",
        "web-main",
    )

    first = _names(reconcile(snapshots, artifacts))
    shuffled = list(artifacts)
    random.Random(7).shuffle(shuffled)

    assert first == {"myapp-old", "myapp-pr-4", "api-feature-gone"}
    assert _names(reconcile(snapshots, artifacts)) == first
    assert _names(reconcile(snapshots, shuffled)) == first


def test_classify_all_preserves_input_order(make_snapshot):
    snapshots = {"myapp": make_snapshot(branches=["main"])}
    artifacts = _releases("myapp-gone", "myapp-main", "other-main")

    verdicts = [d.verdict for d in classify_all(snapshots, artifacts)]

    assert verdicts == [ORPHAN, KEEP, IGNORED]


def test_expected_names(make_snapshot):
    snapshot = make_snapshot(branches=["main", "feature/x"], pull_requests=[5])

    assert expected_names(snapshot) == {"myapp-main", "myapp-feature-x", "myapp-pr-5"}
