from __future__ import annotations

from fastapi import APIRouter

from qa_ops.core.constants import (
    BUILD_RESULTS,
    GTG_STATUSES,
    PRODUCT_LINE_LABELS,
    PRODUCT_LINES,
    USER_ROLES,
)


router = APIRouter(prefix="/constants", tags=["constants"])


@router.get("")
def all_constants() -> dict[str, dict[str, str]]:
    return {
        "product_lines": PRODUCT_LINES,
        "product_line_labels": PRODUCT_LINE_LABELS,
        "user_roles": USER_ROLES,
        "build_results": BUILD_RESULTS,
        "gtg_statuses": GTG_STATUSES,
    }


@router.get("/product-lines")
def product_lines() -> dict[str, str]:
    return PRODUCT_LINES


@router.get("/user-roles")
def user_roles() -> dict[str, str]:
    return USER_ROLES


@router.get("/build-results")
def build_results() -> dict[str, str]:
    return BUILD_RESULTS


@router.get("/gtg-statuses")
def gtg_statuses() -> dict[str, str]:
    return GTG_STATUSES
