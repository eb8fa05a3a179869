from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from qa_ops.api.deps import AdminDep, CurrentUserDep, DbDep, OperatorDep
from qa_ops.core.config import settings
from qa_ops.core.constants import ProductLine
from .client import JenkinsClient, get_jenkins_client
from .schemas import (
    CollectResultRead,
    JenkinsBuildRead,
    JenkinsJobCreate,
    JenkinsJobRead,
    JenkinsJobUpdate,
    JobMetricsRead,
    MetricsReport,
)
from .service import JenkinsService


router = APIRouter(prefix="/jenkins", tags=["jenkins"])


ClientDep = Annotated[JenkinsClient, Depends(get_jenkins_client)]
WindowQuery = Annotated[int | None, Query(ge=1, le=500)]


def _window(value: int | None) -> int:
    return value or settings.GTG_WINDOW_SIZE


@router.get("/jobs", response_model=list[JenkinsJobRead])
def list_jobs(db: DbDep, _: CurrentUserDep, product_line: ProductLine | None = None):
    return JenkinsService(db).list_jobs(product_line)


@router.post("/jobs", response_model=JenkinsJobRead, status_code=status.HTTP_201_CREATED)
def create_job(payload: JenkinsJobCreate, db: DbDep, _: OperatorDep):
    return JenkinsService(db).create_job(payload)


@router.patch("/jobs/{job_id}", response_model=JenkinsJobRead)
def update_job(job_id: str, payload: JenkinsJobUpdate, db: DbDep, _: OperatorDep):
    return JenkinsService(db).update_job(job_id, payload)


@router.delete("/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(job_id: str, db: DbDep, _: AdminDep):
    JenkinsService(db).delete_job(job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/jobs/{job_id}/builds", response_model=list[JenkinsBuildRead])
def list_builds(
    job_id: str,
    db: DbDep,
    _: CurrentUserDep,
    limit: int = Query(50, ge=1, le=500),
):
    return JenkinsService(db).list_builds(job_id, limit=limit)


@router.get("/jobs/{job_id}/metrics", response_model=JobMetricsRead)
def job_metrics(job_id: str, db: DbDep, _: CurrentUserDep, window: WindowQuery = None):
    return JenkinsService(db).job_metrics(job_id, _window(window))


@router.get("/metrics", response_model=MetricsReport)
def metrics_report(
    db: DbDep,
    _: CurrentUserDep,
    product_line: ProductLine | None = None,
    window: WindowQuery = None,
):
    return JenkinsService(db).metrics_report(product_line, _window(window))


@router.post("/jobs/{job_id}/collect", response_model=CollectResultRead)
def collect_job(job_id: str, db: DbDep, _: OperatorDep, client: ClientDep):
    result = JenkinsService(db, client).collect_job(job_id)
    return CollectResultRead(**vars(result))


@router.post("/collect", response_model=list[CollectResultRead])
def collect_all(db: DbDep, _: OperatorDep, client: ClientDep):
    results = JenkinsService(db, client).collect_all()
    return [CollectResultRead(**vars(r)) for r in results]
