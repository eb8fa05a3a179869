from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from qa_ops.core.config import settings
from qa_ops.core.constants import (
    BuildResult,
    GtgStatus,
    PRODUCT_LINE_LABELS,
    ProductLine,
    TOGGLE_GTG_FREEZE,
)
from qa_ops.core.errors import InvalidOperationError, NotFoundError
from qa_ops.core.timeutils import ensure_utc, utcnow
from qa_ops.modules.feature_toggles.service import FeatureTogglesService
from qa_ops.modules.jenkins.models import JenkinsJob
from qa_ops.modules.jenkins.repository import JenkinsRepository
from qa_ops.modules.jenkins.service import JenkinsService
from .models import GtgOverride
from .repository import GtgRepository
from .schemas import GtgOverrideRead, GtgOverrideRequest, GtgReport, JobReadiness


logger = logging.getLogger(__name__)


def aggregate_status(statuses: list[GtgStatus]) -> GtgStatus:
    if not statuses:
        return GtgStatus.UNKNOWN
    if GtgStatus.NO_GO in statuses:
        return GtgStatus.NO_GO
    if GtgStatus.UNKNOWN in statuses:
        return GtgStatus.UNKNOWN
    return GtgStatus.GO


class GtgService:
    """Derives a product line's release readiness.

    Precedence: an enabled ``gtg_freeze`` toggle wins, then an unexpired
    manual override, then the state of the product line's required Jenkins
    jobs. Job details are always reported.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = GtgRepository(db)
        self.jobs = JenkinsRepository(db)
        self.jenkins = JenkinsService(db)
        self.toggles = FeatureTogglesService(db)

    def evaluate_all(self, now: datetime | None = None) -> list[GtgReport]:
        now = now or utcnow()
        return [self.evaluate(line, now) for line in ProductLine]

    def evaluate(self, product_line: ProductLine | str, now: datetime | None = None) -> GtgReport:
        line = self._product_line(product_line)
        now = now or utcnow()

        jobs = [self._job_readiness(job, now) for job in self._required_jobs(line)]
        computed = aggregate_status([j.status for j in jobs])
        reasons: list[str] = []

        override = self._active_override(line, now)
        if self.toggles.is_enabled(TOGGLE_GTG_FREEZE, line):
            status = GtgStatus.NO_GO
            reasons.append("release freeze active")
        elif override is not None:
            status = GtgStatus(override.status)
            reasons.append(f"override by {override.set_by}: {override.reason}")
        else:
            status = computed
            if not jobs:
                reasons.append("no required jobs tracked")
            reasons.extend(f"{j.name}: {j.reason}" for j in jobs if j.reason)

        return GtgReport(
            product_line=line,
            label=PRODUCT_LINE_LABELS[line.value],
            status=status,
            reasons=reasons,
            jobs=jobs,
            override=GtgOverrideRead.model_validate(override) if override else None,
            evaluated_at=now,
        )

    def set_override(
        self,
        product_line: ProductLine | str,
        data: GtgOverrideRequest,
        set_by: str,
        now: datetime | None = None,
    ) -> GtgOverride:
        line = self._product_line(product_line)
        now = now or utcnow()
        expires_at = ensure_utc(data.expires_at)
        if expires_at is not None and expires_at <= now:
            raise InvalidOperationError("Override expiry must be in the future")

        override = self.repo.get_override(line.value) or GtgOverride(product_line=line.value)
        override.status = data.status
        override.reason = data.reason
        override.set_by = set_by
        override.expires_at = expires_at
        override.created_at = now
        logger.info("GTG override for %s set to %s by %s", line.value, data.status, set_by)
        return self.repo.save_override(override)

    def clear_override(self, product_line: ProductLine | str) -> None:
        line = self._product_line(product_line)
        override = self.repo.get_override(line.value)
        if override is None:
            raise NotFoundError(f"No GTG override set for {line.value}")
        self.repo.delete_override(override)
        logger.info("GTG override for %s cleared", line.value)

    # ---- helpers ----
    @staticmethod
    def _product_line(value: ProductLine | str) -> ProductLine:
        try:
            return ProductLine(value)
        except ValueError:
            raise NotFoundError(f"Unknown product line '{value}'")

    def _required_jobs(self, line: ProductLine) -> list[JenkinsJob]:
        return self.jobs.list_jobs(line.value, active_only=True, gtg_required_only=True)

    def _active_override(self, line: ProductLine, now: datetime) -> GtgOverride | None:
        override = self.repo.get_override(line.value)
        if override is None:
            return None
        expires_at = ensure_utc(override.expires_at)
        if expires_at is not None and expires_at <= now:
            return None
        return override

    def _job_readiness(self, job: JenkinsJob, now: datetime) -> JobReadiness:
        metrics = self.jenkins.metrics_for(job, settings.GTG_WINDOW_SIZE)
        readiness = JobReadiness(
            job_id=job.id,
            name=job.name,
            status=GtgStatus.GO,
            last_result=metrics.last_result,
            pass_rate=metrics.pass_rate,
            last_build_at=metrics.last_build_at,
        )
        max_age = timedelta(hours=settings.GTG_MAX_BUILD_AGE_HOURS)

        if metrics.total == 0:
            readiness.status = GtgStatus.UNKNOWN
            readiness.reason = "no builds collected"
        elif metrics.last_result != BuildResult.SUCCESS:
            readiness.status = GtgStatus.NO_GO
            readiness.reason = f"last build #{metrics.last_build_number} is {metrics.last_result.value}"
        elif metrics.pass_rate is not None and metrics.pass_rate < settings.GTG_MIN_PASS_RATE:
            readiness.status = GtgStatus.NO_GO
            readiness.reason = (
                f"pass rate {metrics.pass_rate:.0%} below {settings.GTG_MIN_PASS_RATE:.0%}"
            )
        elif metrics.last_build_at is None or now - metrics.last_build_at > max_age:
            readiness.status = GtgStatus.UNKNOWN
            readiness.reason = "last build is stale"
        return readiness
