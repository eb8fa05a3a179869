from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any
from urllib.parse import quote

import requests

from qa_ops.core.config import settings
from qa_ops.core.constants import BuildResult
from qa_ops.core.errors import ConfigurationError, JenkinsError


logger = logging.getLogger(__name__)

BUILD_FIELDS = "number,result,duration,timestamp,url,building"


@dataclass(frozen=True)
class BuildInfo:
    number: int
    result: BuildResult
    duration_ms: int
    started_at: datetime | None
    url: str | None


def job_path(job_name: str) -> str:
    """Translate ``folder/sub/job`` into Jenkins' ``/job/folder/job/sub/job/job`` form."""
    parts = [p for p in job_name.strip("/").split("/") if p]
    if not parts:
        raise ValueError("Jenkins job name must not be empty")
    return "".join(f"/job/{quote(part, safe='')}" for part in parts)


def _parse_result(raw: Any) -> BuildResult:
    try:
        return BuildResult(str(raw).upper())
    except ValueError:
        return BuildResult.NOT_BUILT


def _parse_timestamp(raw: Any) -> datetime | None:
    if raw in (None, 0):
        return None
    return datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)


class JenkinsClient:
    """Thin wrapper over the Jenkins JSON API."""

    def __init__(
        self,
        base_url: str,
        user: str | None = None,
        api_token: str | None = None,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if user and api_token:
            self.session.auth = (user, api_token)

    def get_builds(self, job_name: str, depth: int = 50) -> list[BuildInfo]:
        url = f"{self.base_url}{job_path(job_name)}/api/json"
        params = {"tree": f"builds[{BUILD_FIELDS}]{{0,{depth}}}"}
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise JenkinsError(f"Jenkins request for '{job_name}' failed: {exc}") from exc

        if response.status_code == 404:
            raise JenkinsError(f"Jenkins job '{job_name}' not found")
        if response.status_code >= 400:
            raise JenkinsError(
                f"Jenkins returned HTTP {response.status_code} for '{job_name}'"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise JenkinsError(f"Jenkins returned invalid JSON for '{job_name}'") from exc

        builds: list[BuildInfo] = []
        for raw in payload.get("builds") or []:
            # Running builds have no result yet
            if raw.get("building") or raw.get("result") is None:
                continue
            builds.append(
                BuildInfo(
                    number=int(raw["number"]),
                    result=_parse_result(raw["result"]),
                    duration_ms=int(raw.get("duration") or 0),
                    started_at=_parse_timestamp(raw.get("timestamp")),
                    url=raw.get("url"),
                )
            )
        logger.debug("Fetched %s completed builds for %s", len(builds), job_name)
        return builds


@lru_cache(maxsize=1)
def _cached_client(base_url: str, user: str | None, token: str | None, timeout: int) -> JenkinsClient:
    return JenkinsClient(base_url, user=user, api_token=token, timeout=timeout)


def get_jenkins_client() -> JenkinsClient:
    if not settings.jenkins_configured:
        raise ConfigurationError("Jenkins is not configured (JENKINS_URL is unset)")
    return _cached_client(
        str(settings.JENKINS_URL),
        settings.JENKINS_USER,
        settings.JENKINS_API_TOKEN,
        settings.JENKINS_TIMEOUT_SECONDS,
    )
