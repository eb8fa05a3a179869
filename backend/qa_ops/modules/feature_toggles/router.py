from __future__ import annotations

from fastapi import APIRouter, Response, status

from qa_ops.api.deps import AdminDep, CurrentUserDep, DbDep, OperatorDep
from qa_ops.core.constants import ProductLine
from .schemas import FeatureToggleCreate, FeatureToggleRead, FeatureToggleUpdate
from .service import FeatureTogglesService


router = APIRouter(prefix="/feature-toggles", tags=["feature-toggles"])


@router.get("", response_model=list[FeatureToggleRead])
def list_toggles(db: DbDep, _: CurrentUserDep, product_line: ProductLine | None = None):
    return FeatureTogglesService(db).list_toggles(product_line)


@router.post("", response_model=FeatureToggleRead, status_code=status.HTTP_201_CREATED)
def create_toggle(payload: FeatureToggleCreate, db: DbDep, _: OperatorDep):
    return FeatureTogglesService(db).create_toggle(payload)


@router.patch("/{toggle_id}", response_model=FeatureToggleRead)
def update_toggle(toggle_id: str, payload: FeatureToggleUpdate, db: DbDep, _: OperatorDep):
    return FeatureTogglesService(db).update_toggle(toggle_id, payload)


@router.delete("/{toggle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_toggle(toggle_id: str, db: DbDep, _: AdminDep):
    FeatureTogglesService(db).delete_toggle(toggle_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
