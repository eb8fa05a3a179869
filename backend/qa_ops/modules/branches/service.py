from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from qa_ops.core.config import settings
from qa_ops.core.constants import (
    BranchRunStatus,
    ProductLine,
    TOGGLE_BRANCH_RECREATION_PAUSED,
)
from qa_ops.core.errors import (
    ConfigurationError,
    ConflictError,
    GitHostError,
    InvalidOperationError,
    NotFoundError,
)
from qa_ops.core.timeutils import ensure_utc, utcnow
from qa_ops.modules.feature_toggles.service import FeatureTogglesService
from .git_client import GitHostClient
from .models import BranchRun, BranchSchedule
from .repository import BranchesRepository
from .schemas import BranchScheduleCreate, BranchScheduleUpdate


logger = logging.getLogger(__name__)

SUSPENDED = "suspended"


class BranchesService:
    """Manages recreation schedules and performs the delete/recreate cycle.

    A run resolves the base branch head, skips when the target already points
    at it, and otherwise deletes the target and recreates it at that sha.
    Failures push ``next_run_at`` out by the retry delay; after
    ``BRANCH_MAX_CONSECUTIVE_FAILURES`` in a row the schedule is disabled.
    """

    def __init__(self, db: Session, client: GitHostClient | None = None):
        self.db = db
        self.repo = BranchesRepository(db)
        self.toggles = FeatureTogglesService(db)
        self.client = client

    # ---- Schedules ----
    def list_schedules(self, product_line: ProductLine | None = None) -> list[BranchSchedule]:
        return self.repo.list_schedules(product_line.value if product_line else None)

    def get_schedule(self, schedule_id: str) -> BranchSchedule:
        schedule = self.repo.get_schedule(schedule_id)
        if not schedule:
            raise NotFoundError("Branch schedule not found")
        return schedule

    def create_schedule(self, data: BranchScheduleCreate, now: datetime | None = None) -> BranchSchedule:
        now = now or utcnow()
        branch = data.branch.strip()
        base_branch = data.base_branch.strip()
        self._validate_branches(branch, base_branch)
        if self.repo.get_schedule_by_branch(data.repository, branch):
            raise ConflictError(f"{data.repository}@{branch} already has a schedule")
        schedule = BranchSchedule(
            repository=data.repository,
            branch=branch,
            base_branch=base_branch,
            product_line=data.product_line.value,
            interval_minutes=data.interval_minutes,
            is_enabled=data.is_enabled,
            next_run_at=ensure_utc(data.next_run_at) or now + timedelta(minutes=data.interval_minutes),
            consecutive_failures=0,
        )
        logger.info(
            "Scheduled recreation of %s@%s from %s every %s min",
            schedule.repository,
            schedule.branch,
            schedule.base_branch,
            schedule.interval_minutes,
        )
        return self.repo.save_schedule(schedule)

    def update_schedule(self, schedule_id: str, data: BranchScheduleUpdate) -> BranchSchedule:
        schedule = self.get_schedule(schedule_id)
        if data.base_branch is not None:
            base_branch = data.base_branch.strip()
            self._validate_branches(schedule.branch, base_branch)
            schedule.base_branch = base_branch
        if data.product_line is not None:
            schedule.product_line = data.product_line.value
        if data.interval_minutes is not None:
            schedule.interval_minutes = data.interval_minutes
        if data.next_run_at is not None:
            schedule.next_run_at = ensure_utc(data.next_run_at)
        if data.is_enabled is not None:
            if data.is_enabled and not schedule.is_enabled:
                schedule.consecutive_failures = 0
                if schedule.last_status == SUSPENDED:
                    schedule.last_status = None
            schedule.is_enabled = data.is_enabled
        return self.repo.save_schedule(schedule)

    def delete_schedule(self, schedule_id: str) -> None:
        schedule = self.get_schedule(schedule_id)
        logger.info("Removing branch schedule %s@%s", schedule.repository, schedule.branch)
        self.repo.delete_schedule(schedule)

    def list_runs(self, schedule_id: str, limit: int = 50) -> list[BranchRun]:
        self.get_schedule(schedule_id)
        return self.repo.list_runs(schedule_id, limit=limit)

    @staticmethod
    def _validate_branches(branch: str, base_branch: str) -> None:
        if branch == base_branch:
            raise InvalidOperationError("Branch and base branch must differ")
        if branch in settings.protected_branches:
            raise InvalidOperationError(f"Branch '{branch}' is protected and cannot be recreated")

    # ---- Execution ----
    def run_schedule(
        self,
        schedule_id: str,
        trigger: str = "manual",
        now: datetime | None = None,
    ) -> BranchRun:
        schedule = self.get_schedule(schedule_id)
        if not schedule.is_enabled:
            raise InvalidOperationError(
                f"Schedule for {schedule.repository}@{schedule.branch} is disabled; enable it first"
            )
        return self._execute(schedule, trigger, now or utcnow())

    def run_due(self, now: datetime | None = None) -> list[BranchRun]:
        if self.client is None:
            raise ConfigurationError("Git host is not configured (GIT_API_TOKEN is unset)")
        now = now or utcnow()
        # Each commit below expires loaded rows, so take the values first
        due = [
            (s.id, s.next_run_at, s.interval_minutes)
            for s in self.repo.list_due(now)
        ]
        runs: list[BranchRun] = []
        for schedule_id, seen_next_run_at, interval_minutes in due:
            provisional = now + timedelta(minutes=interval_minutes)
            if not self.repo.claim(schedule_id, seen_next_run_at, provisional, now):
                logger.debug("Schedule %s claimed elsewhere; skipping", schedule_id)
                continue
            try:
                runs.append(self._execute(self.get_schedule(schedule_id), "scheduled", now))
            except Exception:  # noqa: BLE001
                self.db.rollback()
                logger.exception("Recreation for schedule %s aborted", schedule_id)
        return runs

    def _execute(self, schedule: BranchSchedule, trigger: str, now: datetime) -> BranchRun:
        if self.client is None:
            raise ConfigurationError("Git host is not configured (GIT_API_TOKEN is unset)")

        run = BranchRun(schedule_id=schedule.id, trigger=trigger, started_at=now)
        target = f"{schedule.repository}@{schedule.branch}"
        try:
            if self.toggles.is_enabled(TOGGLE_BRANCH_RECREATION_PAUSED, schedule.product_line):
                run.status = BranchRunStatus.SKIPPED.value
                run.message = "paused by feature toggle"
            else:
                self._recreate(schedule, run)
        except GitHostError as exc:
            run.status = BranchRunStatus.FAILED.value
            run.message = exc.message
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error recreating %s", target)
            run.status = BranchRunStatus.FAILED.value
            run.message = f"unexpected error: {exc}"

        run.finished_at = utcnow()
        self._record(schedule, run, now)
        log = logger.warning if run.status == BranchRunStatus.FAILED.value else logger.info
        log("Recreation of %s (%s): %s %s", target, trigger, run.status, run.message or "")
        return run

    def _recreate(self, schedule: BranchSchedule, run: BranchRun) -> None:
        client = self.client
        base_sha = client.get_branch_sha(schedule.repository, schedule.base_branch)
        if base_sha is None:
            run.status = BranchRunStatus.FAILED.value
            run.message = f"base branch '{schedule.base_branch}' not found"
            return
        run.base_sha = base_sha

        current_sha = client.get_branch_sha(schedule.repository, schedule.branch)
        if current_sha == base_sha:
            run.status = BranchRunStatus.SKIPPED.value
            run.message = "already up to date"
            return

        if current_sha is not None:
            client.delete_branch(schedule.repository, schedule.branch)
        client.create_branch(schedule.repository, schedule.branch, base_sha)
        run.status = BranchRunStatus.SUCCESS.value
        run.message = f"recreated from {schedule.base_branch} at {base_sha[:12]}"

    def _record(self, schedule: BranchSchedule, run: BranchRun, now: datetime) -> None:
        interval = timedelta(minutes=schedule.interval_minutes)
        schedule.last_run_at = now
        if run.status == BranchRunStatus.FAILED.value:
            schedule.consecutive_failures = (schedule.consecutive_failures or 0) + 1
            schedule.last_error = run.message
            if schedule.consecutive_failures >= settings.BRANCH_MAX_CONSECUTIVE_FAILURES:
                schedule.is_enabled = False
                schedule.last_status = SUSPENDED
                logger.error(
                    "Suspending %s@%s after %s consecutive failures",
                    schedule.repository,
                    schedule.branch,
                    schedule.consecutive_failures,
                )
            else:
                schedule.last_status = run.status
                retry = timedelta(seconds=settings.BRANCH_RETRY_DELAY_SECONDS)
                schedule.next_run_at = now + min(retry, interval)
        else:
            schedule.consecutive_failures = 0
            schedule.last_error = None
            schedule.last_status = run.status
            schedule.next_run_at = now + interval

        self.db.add(run)
        self.db.add(schedule)
        self.db.commit()
        self.db.refresh(run)
