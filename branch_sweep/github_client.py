"""
GitHub REST client for the branch and pull request listings a sweep needs.

Every page of a listing is followed through the ``Link`` header so that
repositories with many branches are not mistaken for having few. No retries:
a failed call fails the run and the next scheduled run starts over.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from .config import DEFAULT_GITHUB_API_URL
from .errors import ListingError, SetupError

REQUEST_TIMEOUT_SECONDS = 30.0
PER_PAGE = 100
API_VERSION = "2022-11-28"


class GitHubClient:
    """Lists branches and open pull requests of a repository."""

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_GITHUB_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            }
        )

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        url: Optional[str] = f"{self.api_url}/{path}"
        query: Optional[Dict[str, Any]] = {"per_page": PER_PAGE, **(params or {})}
        while url:
            try:
                response = self.session.get(url, params=query, timeout=self.timeout)
            except requests.RequestException as exc:
                raise ListingError(f"GitHub request {path} failed: {exc}") from exc

            if response.status_code == 401:
                raise SetupError(f"GitHub rejected the access token for {path}")
            if not response.ok:
                raise ListingError(f"GitHub {path} returned HTTP {response.status_code}: {response.text.strip()}")

            try:
                items = response.json()
            except ValueError as exc:
                raise ListingError(f"GitHub {path} returned invalid JSON") from exc
            yield from items

            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string.
            query = None

    def list_branches(self, organization: str, repository: str) -> List[str]:
        """Return the names of all branches in ``organization/repository``."""
        names = [item["name"] for item in self._paginate(f"repos/{organization}/{repository}/branches")]
        logging.info("Found %d branches in %s/%s", len(names), organization, repository)
        return names

    def list_open_pull_requests(self, organization: str, repository: str) -> List[int]:
        """Return the numbers of all open pull requests in ``organization/repository``."""
        numbers = [
            int(item["number"])
            for item in self._paginate(f"repos/{organization}/{repository}/pulls", {"state": "open"})
        ]
        logging.info("Found %d open pull requests in %s/%s", len(numbers), organization, repository)
        return numbers
