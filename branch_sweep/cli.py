"""
Command-line interface and main entry point for branch_sweep.

Handles workflow orchestration and maps stage failures to exit codes.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .args_parser import parse_args
from .backends import create_backend
from .config import load_settings
from .driver import run_sweep
from .errors import SweepError
from .github_client import GitHubClient
from .models import RepositorySlug, SweepSummary
from .reports import print_sweep_report, write_report_json


def _run(args: argparse.Namespace) -> SweepSummary:
    settings = load_settings(args.backend, env_path=args.env_file, protected_branches=args.protected_branches)
    repositories = [RepositorySlug.parse(text) for text in args.repositories]
    source_control = GitHubClient(settings.github_token, api_url=settings.github_api_url)
    backend = create_backend(args.backend, settings)
    return run_sweep(
        repositories,
        source_control,
        backend,
        protected_branches=settings.protected_branches,
        dry_run=args.dry_run,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the branch_sweep CLI."""
    args = parse_args(argv or sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        summary = _run(args)
    except SweepError as exc:
        logging.error("Clean up aborted during %s: %s", exc.stage, exc)
        return 1

    print_sweep_report(summary)
    if args.report_json:
        write_report_json(summary, args.report_json)
    return 0
