from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from qa_ops.core.constants import BranchRunStatus, ProductLine


REPOSITORY_PATTERN = r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$"


class BranchScheduleCreate(BaseModel):
    repository: str = Field(..., max_length=255, pattern=REPOSITORY_PATTERN)
    branch: str = Field(..., min_length=1, max_length=255)
    base_branch: str = Field(..., min_length=1, max_length=255)
    product_line: ProductLine
    interval_minutes: int = Field(1440, ge=5)
    is_enabled: bool = True
    next_run_at: datetime | None = None


class BranchScheduleUpdate(BaseModel):
    base_branch: str | None = Field(None, min_length=1, max_length=255)
    product_line: ProductLine | None = None
    interval_minutes: int | None = Field(None, ge=5)
    is_enabled: bool | None = None
    next_run_at: datetime | None = None


class BranchScheduleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    repository: str
    branch: str
    base_branch: str
    product_line: ProductLine
    interval_minutes: int
    is_enabled: bool
    next_run_at: datetime
    last_run_at: datetime | None
    last_status: str | None
    last_error: str | None
    consecutive_failures: int
    created_at: datetime


class BranchRunRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    schedule_id: str
    trigger: Literal["scheduled", "manual"]
    status: BranchRunStatus
    base_sha: str | None
    message: str | None
    started_at: datetime
    finished_at: datetime
