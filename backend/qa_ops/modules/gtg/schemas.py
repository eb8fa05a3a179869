from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from qa_ops.core.constants import BuildResult, GtgStatus, ProductLine


class GtgOverrideRequest(BaseModel):
    status: Literal["go", "no_go"]
    reason: str = Field(..., min_length=1, max_length=2_000)
    expires_at: datetime | None = None


class GtgOverrideRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_line: ProductLine
    status: GtgStatus
    reason: str
    set_by: str
    expires_at: datetime | None
    created_at: datetime


class JobReadiness(BaseModel):
    job_id: str
    name: str
    status: GtgStatus
    last_result: BuildResult | None = None
    pass_rate: float | None = None
    last_build_at: datetime | None = None
    reason: str | None = None


class GtgReport(BaseModel):
    product_line: ProductLine
    label: str
    status: GtgStatus
    reasons: list[str]
    jobs: list[JobReadiness]
    override: GtgOverrideRead | None = None
    evaluated_at: datetime
