#!/usr/bin/env python3
"""
Delete Helm releases whose branch or pull request no longer exists.

Usage:
  ./helm_cleanup.py [--dry-run] my-org/myapp my-org/otherapp

This is a thin wrapper around the branch_sweep package with the helm backend
preselected.
"""
from __future__ import annotations

import sys

from branch_sweep.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["helm", *sys.argv[1:]]))
