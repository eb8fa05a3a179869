from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .models import BranchRun, BranchSchedule


class BranchesRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---- Schedules ----
    def list_schedules(self, product_line: str | None = None) -> list[BranchSchedule]:
        stmt = select(BranchSchedule).order_by(BranchSchedule.repository, BranchSchedule.branch)
        if product_line:
            stmt = stmt.where(BranchSchedule.product_line == product_line)
        return list(self.db.scalars(stmt))

    def get_schedule(self, schedule_id: str) -> BranchSchedule | None:
        return self.db.get(BranchSchedule, schedule_id)

    def get_schedule_by_branch(self, repository: str, branch: str) -> BranchSchedule | None:
        stmt = select(BranchSchedule).where(
            BranchSchedule.repository == repository,
            BranchSchedule.branch == branch,
        )
        return self.db.scalar(stmt)

    def list_due(self, now: datetime) -> list[BranchSchedule]:
        stmt = (
            select(BranchSchedule)
            .where(
                BranchSchedule.is_enabled.is_(True),
                BranchSchedule.next_run_at <= now,
            )
            .order_by(BranchSchedule.next_run_at)
        )
        return list(self.db.scalars(stmt))

    def claim(
        self,
        schedule_id: str,
        expected_next_run_at: datetime,
        new_next_run_at: datetime,
        now: datetime,
    ) -> bool:
        """Move ``next_run_at`` forward only if nobody else did first.

        ``expected_next_run_at`` must be the value read by ``list_due``, not a
        reload, or a schedule already run elsewhere would match again.
        """
        stmt = (
            update(BranchSchedule)
            .where(
                BranchSchedule.id == schedule_id,
                BranchSchedule.next_run_at == expected_next_run_at,
                BranchSchedule.next_run_at <= now,
                BranchSchedule.is_enabled.is_(True),
            )
            .values(next_run_at=new_next_run_at)
            .execution_options(synchronize_session=False)
        )
        claimed = self.db.execute(stmt).rowcount == 1
        self.db.commit()
        return claimed

    def save_schedule(self, schedule: BranchSchedule) -> BranchSchedule:
        self.db.add(schedule)
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def delete_schedule(self, schedule: BranchSchedule) -> None:
        self.db.delete(schedule)
        self.db.commit()

    # ---- Runs ----
    def list_runs(self, schedule_id: str, limit: int = 50) -> list[BranchRun]:
        stmt = (
            select(BranchRun)
            .where(BranchRun.schedule_id == schedule_id)
            .order_by(BranchRun.started_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))
