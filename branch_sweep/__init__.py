"""
Branch sweep package.

Delete per-branch and per-pull-request deployment artifacts (Helm releases,
storage blobs) whose branch or pull request no longer exists.
"""

from . import args_parser, backends, config, driver, errors, inventory, models, naming, reconciler, reports
from .driver import run_sweep
from .errors import DeleteError, ListingError, SetupError, SweepError
from .models import ArtifactRecord, RepositorySlug, RepositorySnapshot, SweepSummary
from .naming import derive_name
from .reconciler import reconcile

__all__ = [
    "ArtifactRecord",
    "DeleteError",
    "ListingError",
    "RepositorySlug",
    "RepositorySnapshot",
    "SetupError",
    "SweepError",
    "SweepSummary",
    "args_parser",
    "backends",
    "config",
    "derive_name",
    "driver",
    "errors",
    "inventory",
    "models",
    "naming",
    "reconcile",
    "reconciler",
    "reports",
    "run_sweep",
]
