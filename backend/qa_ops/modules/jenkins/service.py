from __future__ import annotations

import logging
from dataclasses import dataclass
from statistics import fmean

from sqlalchemy.orm import Session

from qa_ops.core.config import settings
from qa_ops.core.constants import BuildResult, ProductLine
from qa_ops.core.errors import (
    ConfigurationError,
    ConflictError,
    InvalidOperationError,
    JenkinsError,
    NotFoundError,
)
from qa_ops.core.timeutils import utcnow
from .client import JenkinsClient
from .metrics import JobMetrics, compute_job_metrics
from .models import JenkinsBuild, JenkinsJob
from .repository import JenkinsRepository
from .schemas import (
    JenkinsJobCreate,
    JenkinsJobUpdate,
    JobMetricsEntry,
    JobMetricsRead,
    MetricsReport,
    ProductLineMetrics,
)


logger = logging.getLogger(__name__)


@dataclass
class CollectResult:
    job_id: str
    name: str
    new_builds: int = 0
    updated_builds: int = 0
    error: str | None = None


class JenkinsService:
    def __init__(self, db: Session, client: JenkinsClient | None = None):
        self.db = db
        self.repo = JenkinsRepository(db)
        self.client = client

    # ---- Jobs ----
    def list_jobs(self, product_line: ProductLine | None = None) -> list[JenkinsJob]:
        return self.repo.list_jobs(product_line.value if product_line else None)

    def get_job(self, job_id: str) -> JenkinsJob:
        job = self.repo.get_job(job_id)
        if not job:
            raise NotFoundError("Jenkins job not found")
        return job

    def create_job(self, data: JenkinsJobCreate) -> JenkinsJob:
        name = data.name.strip().strip("/")
        if not name:
            raise InvalidOperationError("Jenkins job name must not be blank")
        if self.repo.get_job_by_name(name):
            raise ConflictError(f"Jenkins job '{name}' is already tracked")
        job = JenkinsJob(
            name=name,
            display_name=data.display_name,
            product_line=data.product_line.value,
            is_active=data.is_active,
            gtg_required=data.gtg_required,
        )
        logger.info("Tracking Jenkins job %s for %s", name, job.product_line)
        return self.repo.save_job(job)

    def update_job(self, job_id: str, data: JenkinsJobUpdate) -> JenkinsJob:
        job = self.get_job(job_id)
        if data.display_name is not None:
            job.display_name = data.display_name
        if data.product_line is not None:
            job.product_line = data.product_line.value
        if data.is_active is not None:
            job.is_active = data.is_active
        if data.gtg_required is not None:
            job.gtg_required = data.gtg_required
        return self.repo.save_job(job)

    def delete_job(self, job_id: str) -> None:
        job = self.get_job(job_id)
        logger.info("Untracking Jenkins job %s", job.name)
        self.repo.delete_job(job)

    # ---- Builds & metrics ----
    def list_builds(self, job_id: str, limit: int = 50) -> list[JenkinsBuild]:
        self.get_job(job_id)
        return self.repo.list_builds(job_id, limit=limit)

    def metrics_for(self, job: JenkinsJob, window: int) -> JobMetrics:
        return compute_job_metrics(self.repo.list_builds(job.id, limit=window), window)

    def job_metrics(self, job_id: str, window: int) -> JobMetrics:
        return self.metrics_for(self.get_job(job_id), window)

    def metrics_report(self, product_line: ProductLine | None, window: int) -> MetricsReport:
        jobs = self.repo.list_jobs(product_line.value if product_line else None, active_only=True)
        entries: list[JobMetricsEntry] = []
        per_line: dict[str, list[JobMetrics]] = {}
        for job in jobs:
            metrics = self.metrics_for(job, window)
            per_line.setdefault(job.product_line, []).append(metrics)
            entries.append(
                JobMetricsEntry(
                    job_id=job.id,
                    name=job.name,
                    product_line=job.product_line,
                    metrics=JobMetricsRead.model_validate(metrics),
                )
            )

        lines: list[ProductLineMetrics] = []
        for line, items in sorted(per_line.items()):
            rates = [m.pass_rate for m in items if m.pass_rate is not None]
            failing = sum(
                1 for m in items
                if m.last_result is not None and m.last_result != BuildResult.SUCCESS
            )
            lines.append(
                ProductLineMetrics(
                    product_line=line,
                    job_count=len(items),
                    failing_job_count=failing,
                    mean_pass_rate=fmean(rates) if rates else None,
                )
            )
        return MetricsReport(window=window, jobs=entries, product_lines=lines)

    # ---- Collection ----
    def _require_client(self) -> JenkinsClient:
        if self.client is None:
            raise ConfigurationError("Jenkins is not configured (JENKINS_URL is unset)")
        return self.client

    def collect_job(self, job_id: str) -> CollectResult:
        job = self.get_job(job_id)
        return self._collect(job)

    def _collect(self, job: JenkinsJob) -> CollectResult:
        client = self._require_client()
        result = CollectResult(job_id=job.id, name=job.name)
        try:
            fetched = client.get_builds(job.name, depth=settings.JENKINS_BUILD_HISTORY_DEPTH)
        except JenkinsError as exc:
            job.last_error = exc.message
            self.repo.save_job(job)
            logger.warning("Collecting %s failed: %s", job.name, exc.message)
            raise

        existing = self.repo.builds_by_number(job.id, [b.number for b in fetched])
        now = utcnow()
        for info in fetched:
            build = existing.get(info.number)
            if build is None:
                self.db.add(
                    JenkinsBuild(
                        job_id=job.id,
                        number=info.number,
                        result=info.result.value,
                        duration_ms=info.duration_ms,
                        started_at=info.started_at,
                        url=info.url,
                        collected_at=now,
                    )
                )
                result.new_builds += 1
            elif (build.result, build.duration_ms, build.url) != (info.result.value, info.duration_ms, info.url):
                build.result = info.result.value
                build.duration_ms = info.duration_ms
                build.url = info.url
                build.collected_at = now
                result.updated_builds += 1

        job.last_collected_at = now
        job.last_error = None
        self.repo.save_job(job)
        logger.info(
            "Collected %s: %s new, %s updated builds",
            job.name,
            result.new_builds,
            result.updated_builds,
        )
        return result

    def collect_all(self) -> list[CollectResult]:
        self._require_client()
        results: list[CollectResult] = []
        for job in self.repo.list_jobs(active_only=True):
            try:
                results.append(self._collect(job))
            except JenkinsError as exc:
                results.append(CollectResult(job_id=job.id, name=job.name, error=exc.message))
            except Exception as exc:  # noqa: BLE001
                self.db.rollback()
                logger.exception("Unexpected failure collecting %s", job.name)
                results.append(CollectResult(job_id=job.id, name=job.name, error=str(exc)))
        return results
