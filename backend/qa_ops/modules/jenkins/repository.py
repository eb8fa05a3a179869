from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import JenkinsBuild, JenkinsJob


class JenkinsRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---- Jobs ----
    def list_jobs(
        self,
        product_line: str | None = None,
        active_only: bool = False,
        gtg_required_only: bool = False,
    ) -> list[JenkinsJob]:
        stmt = select(JenkinsJob).order_by(JenkinsJob.product_line, JenkinsJob.name)
        if product_line:
            stmt = stmt.where(JenkinsJob.product_line == product_line)
        if active_only:
            stmt = stmt.where(JenkinsJob.is_active.is_(True))
        if gtg_required_only:
            stmt = stmt.where(JenkinsJob.gtg_required.is_(True))
        return list(self.db.scalars(stmt))

    def get_job(self, job_id: str) -> JenkinsJob | None:
        return self.db.get(JenkinsJob, job_id)

    def get_job_by_name(self, name: str) -> JenkinsJob | None:
        stmt = select(JenkinsJob).where(JenkinsJob.name == name)
        return self.db.scalar(stmt)

    def save_job(self, job: JenkinsJob) -> JenkinsJob:
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        return job

    def delete_job(self, job: JenkinsJob) -> None:
        self.db.delete(job)
        self.db.commit()

    # ---- Builds ----
    def list_builds(self, job_id: str, limit: int | None = None) -> list[JenkinsBuild]:
        stmt = (
            select(JenkinsBuild)
            .where(JenkinsBuild.job_id == job_id)
            .order_by(JenkinsBuild.number.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.scalars(stmt))

    def builds_by_number(self, job_id: str, numbers: Sequence[int]) -> dict[int, JenkinsBuild]:
        if not numbers:
            return {}
        stmt = select(JenkinsBuild).where(
            JenkinsBuild.job_id == job_id,
            JenkinsBuild.number.in_(numbers),
        )
        return {b.number: b for b in self.db.scalars(stmt)}
