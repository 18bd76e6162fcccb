"""
Configuration loading for branch_sweep.

Credentials and connection settings come from the process environment,
optionally seeded from a ``.env`` file. Real environment variables always win
over values from the file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .errors import SetupError

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_PROTECTED_BRANCHES = ("master",)
DEFAULT_BUCKET_TEMPLATE = "{organization}-{repository}"
DEFAULT_AWS_REGION = "us-east-1"

BACKEND_HELM = "helm"
BACKEND_STORAGE = "storage"
BACKENDS = (BACKEND_HELM, BACKEND_STORAGE)


@dataclass(frozen=True)
class SweepSettings:
    """Resolved settings for one sweep run."""

    github_token: str
    github_api_url: str = DEFAULT_GITHUB_API_URL
    protected_branches: tuple[str, ...] = DEFAULT_PROTECTED_BRANCHES
    helm_binary: str = "helm"
    kube_context: Optional[str] = None
    kubeconfig: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    aws_region: str = DEFAULT_AWS_REGION
    bucket_template: str = DEFAULT_BUCKET_TEMPLATE


def resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be loaded.

    Priority order:
      1. Explicit parameter
      2. BRANCH_SWEEP_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    override = os.environ.get("BRANCH_SWEEP_ENV_FILE")
    if override:
        return override
    return str(Path.home() / ".env")


def parse_branch_list(value: Optional[str]) -> tuple[str, ...]:
    """Split a comma separated branch list, dropping blanks."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _optional(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


def load_settings(
    backend: str,
    env_path: Optional[str] = None,
    protected_branches: Optional[Sequence[str]] = None,
) -> SweepSettings:
    """
    Load settings for the given backend from the environment.

    Args:
        backend: ``helm`` or ``storage``
        env_path: Optional .env override
        protected_branches: Branch names from the command line; replaces
            SWEEP_PROTECTED_BRANCHES when given

    Returns:
        SweepSettings

    Raises:
        SetupError: If a required credential is missing
    """
    if backend not in BACKENDS:
        raise SetupError(f"Unknown backend {backend!r}; expected one of {', '.join(BACKENDS)}")

    resolved_path = resolve_env_path(env_path)
    if load_dotenv(resolved_path):
        logging.info("Loaded environment from %s", resolved_path)

    token = _optional("GITHUB_ACCESS_TOKEN")
    if not token:
        raise SetupError("GITHUB_ACCESS_TOKEN is not set")

    if protected_branches:
        branches = tuple(protected_branches)
    elif "SWEEP_PROTECTED_BRANCHES" in os.environ:
        branches = parse_branch_list(os.environ["SWEEP_PROTECTED_BRANCHES"])
    else:
        branches = DEFAULT_PROTECTED_BRANCHES

    settings = SweepSettings(
        github_token=token,
        github_api_url=(_optional("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL).rstrip("/"),
        protected_branches=branches,
        helm_binary=_optional("HELM_BINARY") or "helm",
        kube_context=_optional("HELM_KUBECONTEXT"),
        kubeconfig=_optional("KUBECONFIG"),
        aws_access_key_id=_optional("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=_optional("AWS_SECRET_ACCESS_KEY"),
        aws_session_token=_optional("AWS_SESSION_TOKEN"),
        aws_region=_optional("AWS_DEFAULT_REGION") or DEFAULT_AWS_REGION,
        bucket_template=_optional("SWEEP_BUCKET_TEMPLATE") or DEFAULT_BUCKET_TEMPLATE,
    )

    if backend == BACKEND_STORAGE and not (settings.aws_access_key_id and settings.aws_secret_access_key):
        raise SetupError(f"AWS credentials not found in environment or {resolved_path}")
    return settings
