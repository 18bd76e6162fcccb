#!/usr/bin/env python3
"""
Delete storage blobs tagged with a branch that no longer exists.

Usage:
  ./storage_cleanup.py [--dry-run] my-org/myapp my-org/otherapp

This is a thin wrapper around the branch_sweep package with the storage
backend preselected.
"""
from __future__ import annotations

import sys

from branch_sweep.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["storage", *sys.argv[1:]]))
