"""
Helm release backend.

Releases are listed and uninstalled through the ``helm`` binary, which already
knows how to reach the cluster from the kubeconfig. Release names carry the
repository as their first hyphen-separated segment, so records are returned
without an explicit repository.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from ..errors import DeleteError, ListingError, SetupError
from ..models import ArtifactRecord, RepositorySnapshot

DEFAULT_NAMESPACE = "default"


class HelmCliError(RuntimeError):
    pass


@dataclass(frozen=True)
class HelmResult:
    rc: int
    stdout: str
    stderr: str


def _fmt(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in args)


class HelmCli:
    def __init__(
        self,
        binary: str = "helm",
        *,
        kube_context: Optional[str] = None,
        kubeconfig: Optional[str] = None,
    ):
        self.binary = binary
        self.kube_context = kube_context
        self.kubeconfig = kubeconfig

    def _command(self, args: Sequence[str]) -> List[str]:
        cmd = [self.binary, *args]
        if self.kube_context:
            cmd += ["--kube-context", self.kube_context]
        if self.kubeconfig:
            cmd += ["--kubeconfig", self.kubeconfig]
        return cmd

    def run(self, args: Sequence[str]) -> HelmResult:
        p = subprocess.run(
            self._command(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
        return HelmResult(rc=p.returncode, stdout=p.stdout.strip(), stderr=p.stderr.strip())

    def json(self, args: Sequence[str]) -> Any:
        res = self.run([*args, "--output", "json"])
        if res.rc != 0:
            raise HelmCliError(f"helm {_fmt(args)} failed: {res.stderr}")
        return None if not res.stdout else json.loads(res.stdout)


class HelmReleaseBackend:
    """Lists every release in the cluster and uninstalls orphans."""

    name = "helm"
    tracks_pull_requests = True

    def __init__(self, cli: HelmCli):
        self.cli = cli

    def check_connection(self) -> None:
        """Fail early when the helm binary is unusable or the cluster unreachable."""
        try:
            res = self.cli.run(["version", "--short"])
        except OSError as exc:
            raise SetupError(f"Cannot run {self.cli.binary}: {exc}") from exc
        if res.rc != 0:
            raise SetupError(f"{self.cli.binary} version failed: {res.stderr}")
        logging.info("Using helm %s", res.stdout)

        # `helm version` is local; a one-item listing reaches the cluster.
        try:
            self.cli.json(["list", "--all-namespaces", "--max", "1"])
        except (HelmCliError, OSError, ValueError) as exc:
            raise SetupError(f"Cannot reach the cluster: {exc}") from exc

    def list_artifacts(self, snapshots: Mapping[str, RepositorySnapshot]) -> List[ArtifactRecord]:
        """Return all releases in all namespaces, whatever their status."""
        del snapshots  # one cluster-wide listing covers every repository
        try:
            releases = self.cli.json(["list", "--all-namespaces", "--all", "--max", "0"]) or []
        except (HelmCliError, OSError, ValueError) as exc:
            raise ListingError(f"Could not list helm releases: {exc}") from exc

        records = [
            ArtifactRecord(
                name=release["name"],
                handle=release.get("namespace") or DEFAULT_NAMESPACE,
                info=f"{release.get('chart', '?')} {release.get('status', '?')}",
            )
            for release in releases
        ]
        logging.info("Found %d helm releases", len(records))
        return records

    def delete(self, artifact: ArtifactRecord) -> str:
        """Uninstall a release; Helm 3 purges the release history by default."""
        namespace = artifact.handle or DEFAULT_NAMESPACE
        try:
            res = self.cli.run(["uninstall", artifact.name, "--namespace", namespace])
        except OSError as exc:
            raise DeleteError(artifact.name, str(exc)) from exc
        if res.rc != 0:
            raise DeleteError(artifact.name, res.stderr or f"exit code {res.rc}")
        return res.stdout
