from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from qa_ops.api.deps import AdminDep, CurrentUserDep, DbDep, OperatorDep
from qa_ops.core.constants import ProductLine
from .git_client import GitHostClient, get_git_client
from .schemas import (
    BranchRunRead,
    BranchScheduleCreate,
    BranchScheduleRead,
    BranchScheduleUpdate,
)
from .service import BranchesService


router = APIRouter(prefix="/branches", tags=["branches"])


GitClientDep = Annotated[GitHostClient, Depends(get_git_client)]


@router.get("/schedules", response_model=list[BranchScheduleRead])
def list_schedules(db: DbDep, _: CurrentUserDep, product_line: ProductLine | None = None):
    return BranchesService(db).list_schedules(product_line)


@router.post("/schedules", response_model=BranchScheduleRead, status_code=status.HTTP_201_CREATED)
def create_schedule(payload: BranchScheduleCreate, db: DbDep, _: OperatorDep):
    return BranchesService(db).create_schedule(payload)


@router.patch("/schedules/{schedule_id}", response_model=BranchScheduleRead)
def update_schedule(schedule_id: str, payload: BranchScheduleUpdate, db: DbDep, _: OperatorDep):
    return BranchesService(db).update_schedule(schedule_id, payload)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(schedule_id: str, db: DbDep, _: AdminDep):
    BranchesService(db).delete_schedule(schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/schedules/{schedule_id}/runs", response_model=list[BranchRunRead])
def list_runs(
    schedule_id: str,
    db: DbDep,
    _: CurrentUserDep,
    limit: int = Query(50, ge=1, le=500),
):
    return BranchesService(db).list_runs(schedule_id, limit=limit)


@router.post("/schedules/{schedule_id}/run", response_model=BranchRunRead)
def run_schedule(schedule_id: str, db: DbDep, _: OperatorDep, client: GitClientDep):
    return BranchesService(db, client).run_schedule(schedule_id, trigger="manual")


@router.post("/run-due", response_model=list[BranchRunRead])
def run_due(db: DbDep, _: AdminDep, client: GitClientDep):
    return BranchesService(db, client).run_due()
