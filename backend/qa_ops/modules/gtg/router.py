from __future__ import annotations

from fastapi import APIRouter, Response, status

from qa_ops.api.deps import CurrentUserDep, DbDep, OperatorDep
from .schemas import GtgOverrideRead, GtgOverrideRequest, GtgReport
from .service import GtgService


router = APIRouter(prefix="/gtg", tags=["gtg"])


@router.get("", response_model=list[GtgReport])
def list_readiness(db: DbDep, _: CurrentUserDep):
    return GtgService(db).evaluate_all()


@router.get("/{product_line}", response_model=GtgReport)
def readiness(product_line: str, db: DbDep, _: CurrentUserDep):
    return GtgService(db).evaluate(product_line)


@router.put("/{product_line}/override", response_model=GtgOverrideRead)
def set_override(product_line: str, payload: GtgOverrideRequest, db: DbDep, current: OperatorDep):
    return GtgService(db).set_override(product_line, payload, set_by=current.email)


@router.delete("/{product_line}/override", status_code=status.HTTP_204_NO_CONTENT)
def clear_override(product_line: str, db: DbDep, _: OperatorDep):
    GtgService(db).clear_override(product_line)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
