"""
Report output for branch_sweep.

Prints the end-of-run summary and optionally writes it as JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .models import ArtifactRecord, SweepSummary

MAX_LISTED = 20


def _artifact_row(artifact: ArtifactRecord) -> Dict[str, Any]:
    return {
        "name": artifact.name,
        "repository": artifact.repository,
        "branch": artifact.branch,
        "info": artifact.info,
    }


def summary_to_dict(summary: SweepSummary) -> Dict[str, Any]:
    """Return a JSON-serializable view of the summary."""
    return {
        "backend": summary.backend,
        "dry_run": summary.dry_run,
        "repositories": list(summary.repositories),
        "kept": [_artifact_row(a) for a in summary.kept],
        "orphans": [_artifact_row(a) for a in summary.orphans],
        "ignored": [_artifact_row(a) for a in summary.ignored],
        "deleted": [_artifact_row(a) for a in summary.deleted],
        "failed": [{**_artifact_row(f.artifact), "error": f.error} for f in summary.failed],
    }


def write_report_json(summary: SweepSummary, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(summary_to_dict(summary), indent=2))


def print_sweep_report(summary: SweepSummary) -> None:
    """Print counts and the affected artifacts."""
    mode = "dry run" if summary.dry_run else "apply"
    print(f"\n=== {summary.backend} clean up summary ({mode}) ===")
    print(f"Repositories:  {', '.join(summary.repositories) or '(none)'}")
    print(f"Kept:          {len(summary.kept)}")
    print(f"Orphaned:      {len(summary.orphans)}")
    print(f"Ignored:       {len(summary.ignored)}")
    print(f"Deleted:       {len(summary.deleted)}")
    print(f"Failed:        {len(summary.failed)}")

    if summary.orphans:
        heading = "Would delete" if summary.dry_run else "Orphans"
        print(f"\n{heading}:")
        for artifact in summary.orphans[:MAX_LISTED]:
            print(f"  - {artifact.name}")
        if len(summary.orphans) > MAX_LISTED:
            print(f"  ... and {len(summary.orphans) - MAX_LISTED} more")

    if summary.failed:
        print("\nFailed deletes:")
        for failure in summary.failed:
            print(f"  - {failure.artifact.name}: {failure.error}")
