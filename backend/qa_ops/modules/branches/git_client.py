from __future__ import annotations

import logging
from functools import lru_cache
from urllib.parse import quote

import requests

from qa_ops.core.config import settings
from qa_ops.core.errors import ConfigurationError, GitHostError


logger = logging.getLogger(__name__)


class GitHostClient:
    """Branch ref operations against a GitHub-compatible REST API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
            }
        )

    def _url(self, repository: str, suffix: str) -> str:
        return f"{self.base_url}/repos/{repository}/git/{suffix}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GitHostError(f"Git host request failed: {exc}") from exc

    @staticmethod
    def _ref(branch: str) -> str:
        return quote(branch, safe="/")

    def get_branch_sha(self, repository: str, branch: str) -> str | None:
        response = self._request("GET", self._url(repository, f"ref/heads/{self._ref(branch)}"))
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise GitHostError(
                f"Reading {repository}@{branch} failed with HTTP {response.status_code}"
            )
        try:
            return response.json()["object"]["sha"]
        except (ValueError, KeyError, TypeError) as exc:
            raise GitHostError(
                f"Git host returned an unexpected ref payload for {repository}@{branch}"
            ) from exc

    def delete_branch(self, repository: str, branch: str) -> None:
        response = self._request("DELETE", self._url(repository, f"refs/heads/{self._ref(branch)}"))
        # 422 is GitHub's answer for a ref that no longer exists
        if response.status_code in (404, 422):
            logger.info("Branch %s@%s already absent", repository, branch)
            return
        if response.status_code >= 400:
            raise GitHostError(
                f"Deleting {repository}@{branch} failed with HTTP {response.status_code}"
            )

    def create_branch(self, repository: str, branch: str, sha: str) -> None:
        response = self._request(
            "POST",
            self._url(repository, "refs"),
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        if response.status_code >= 400:
            raise GitHostError(
                f"Creating {repository}@{branch} failed with HTTP {response.status_code}"
            )


@lru_cache(maxsize=1)
def _cached_client(base_url: str, token: str, timeout: int) -> GitHostClient:
    return GitHostClient(base_url, token, timeout=timeout)


def get_git_client() -> GitHostClient:
    if not settings.GIT_API_TOKEN:
        raise ConfigurationError("Git host is not configured (GIT_API_TOKEN is unset)")
    return _cached_client(str(settings.GIT_API_URL), settings.GIT_API_TOKEN, settings.GIT_TIMEOUT_SECONDS)
