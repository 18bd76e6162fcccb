"""
Artifact naming rules shared with the deploy pipeline.

Release names are built as ``<repository>-<slug>`` where the slug is the branch
name (or ``pr-<id>`` for pull requests) with every run of characters outside
``[A-Za-z0-9]`` collapsed to a single hyphen. Helm caps release names at 53
characters, so longer names are cut, not hashed; two long branches can map to
the same release name.
"""

from __future__ import annotations

import re
from typing import Optional, Union

MAX_RELEASE_NAME_LENGTH = 53
PULL_REQUEST_PREFIX = "pr-"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")

Identity = Union[str, int]


def slugify(text: str) -> str:
    """Collapse non-alphanumeric runs to ``-`` and lowercase."""
    return _NON_ALNUM.sub("-", text).lower()


def identity_segment(identity: Identity) -> str:
    """Return the slugged name segment for a branch name or pull request id."""
    if isinstance(identity, int) and not isinstance(identity, bool):
        identity = f"{PULL_REQUEST_PREFIX}{identity}"
    return slugify(identity)


def derive_name(repository: str, identity: Identity) -> str:
    """
    Build the artifact name the pipeline uses for a repository branch or PR.

    Args:
        repository: Repository name, e.g. ``myapp``
        identity: Branch name (``str``) or pull request number (``int``)

    Returns:
        str: Name of at most ``MAX_RELEASE_NAME_LENGTH`` characters
    """
    name = f"{repository.lower()}-{identity_segment(identity)}"
    return name[:MAX_RELEASE_NAME_LENGTH]


def name_prefix(name: str) -> Optional[str]:
    """Return the part of an artifact name before the first hyphen, or None without one."""
    if "-" not in name:
        return None
    return name.split("-", 1)[0]
