from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from qa_ops.core.constants import BuildResult
from qa_ops.core.timeutils import ensure_utc


# Results that say something about the code under test
DECISIVE_RESULTS = {BuildResult.SUCCESS, BuildResult.FAILURE, BuildResult.UNSTABLE}


@dataclass
class JobMetrics:
    total: int = 0
    successes: int = 0
    failures: int = 0
    unstable: int = 0
    aborted: int = 0
    not_built: int = 0
    pass_rate: float | None = None
    avg_duration_seconds: float | None = None
    last_result: BuildResult | None = None
    last_build_number: int | None = None
    last_build_at: datetime | None = None
    streak: int = 0
    flakiness: float = 0.0


def _result_of(build: Any) -> BuildResult:
    return BuildResult(build.result)


def compute_job_metrics(builds: Iterable[Any], window: int) -> JobMetrics:
    """Summarise the ``window`` most recent builds (highest numbers) of a job.

    ``builds`` may be in any order; each item needs ``number``, ``result``,
    ``duration_ms`` and ``started_at`` attributes.
    """
    recent = sorted(builds, key=lambda b: b.number, reverse=True)[: max(window, 0)]
    metrics = JobMetrics(total=len(recent))
    if not recent:
        return metrics

    results = [_result_of(b) for b in recent]
    metrics.successes = results.count(BuildResult.SUCCESS)
    metrics.failures = results.count(BuildResult.FAILURE)
    metrics.unstable = results.count(BuildResult.UNSTABLE)
    metrics.aborted = results.count(BuildResult.ABORTED)
    metrics.not_built = results.count(BuildResult.NOT_BUILT)

    completed = metrics.total - metrics.aborted - metrics.not_built
    if completed > 0:
        metrics.pass_rate = metrics.successes / completed

    metrics.avg_duration_seconds = sum(b.duration_ms or 0 for b in recent) / len(recent) / 1000

    latest = recent[0]
    metrics.last_result = results[0]
    metrics.last_build_number = latest.number
    metrics.last_build_at = ensure_utc(latest.started_at)

    for result in results:
        if result != metrics.last_result:
            break
        metrics.streak += 1

    decisive = [r == BuildResult.SUCCESS for r in results if r in DECISIVE_RESULTS]
    if len(decisive) >= 2:
        flips = sum(1 for a, b in zip(decisive, decisive[1:]) if a != b)
        metrics.flakiness = flips / (len(decisive) - 1)

    return metrics
