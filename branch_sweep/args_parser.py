"""
Argument parsing for the branch_sweep CLI.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from .config import BACKENDS


def add_target_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the backend and repository positionals."""
    parser.add_argument("backend", choices=BACKENDS, help="Where the artifacts live.")
    parser.add_argument(
        "repositories",
        nargs="+",
        metavar="ORG/REPO",
        help="Repositories whose branch and pull request artifacts are swept.",
    )


def add_behaviour_arguments(parser: argparse.ArgumentParser) -> None:
    """Add options controlling what the sweep does."""
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Classify and report orphans without deleting them.",
    )
    parser.add_argument(
        "--protected-branch",
        dest="protected_branches",
        action="append",
        metavar="NAME",
        help=(
            "Branch always treated as live (repeatable). "
            "Defaults to SWEEP_PROTECTED_BRANCHES or 'master'."
        ),
    )
    parser.add_argument("--env-file", help="Optional .env file with credentials (default: ~/.env).")


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--report-json", type=Path, help="Optional path to write the sweep summary as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branch-sweep",
        description=(
            "Delete Helm releases or storage blobs whose branch or pull request "
            "no longer exists on GitHub."
        ),
    )
    add_target_arguments(parser)
    add_behaviour_arguments(parser)
    add_output_arguments(parser)
    return parser


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(list(argv))
