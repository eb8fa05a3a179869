"""Enumerations shared by the API and exposed read-only through /constants."""

from __future__ import annotations

from enum import Enum


class ProductLine(str, Enum):
    MOTHERSHIP = "mothership"
    SPEEDBOAT = "speedboat"


class UserRole(str, Enum):
    ADMIN = "admin"
    QA_ENGINEER = "qa_engineer"
    VIEWER = "viewer"


class BuildResult(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    UNSTABLE = "UNSTABLE"
    ABORTED = "ABORTED"
    NOT_BUILT = "NOT_BUILT"


class GtgStatus(str, Enum):
    GO = "go"
    NO_GO = "no_go"
    UNKNOWN = "unknown"


class BranchRunStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


def _as_mapping(enum_cls: type[Enum]) -> dict[str, str]:
    return {member.name: member.value for member in enum_cls}


PRODUCT_LINES = _as_mapping(ProductLine)
USER_ROLES = _as_mapping(UserRole)
BUILD_RESULTS = _as_mapping(BuildResult)
GTG_STATUSES = _as_mapping(GtgStatus)

PRODUCT_LINE_LABELS = {
    ProductLine.MOTHERSHIP.value: "Mothership",
    ProductLine.SPEEDBOAT.value: "Speedboat",
}

# Feature toggle keys with behaviour attached
TOGGLE_GTG_FREEZE = "gtg_freeze"
TOGGLE_BRANCH_RECREATION_PAUSED = "branch_recreation_paused"

WELL_KNOWN_TOGGLES = {
    TOGGLE_GTG_FREEZE: "Force every GTG evaluation for the product line to no_go.",
    TOGGLE_BRANCH_RECREATION_PAUSED: "Skip scheduled branch recreation for the product line.",
}
