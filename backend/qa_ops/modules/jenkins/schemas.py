from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from qa_ops.core.constants import BuildResult, ProductLine


class JenkinsJobCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    display_name: str | None = Field(None, max_length=255)
    product_line: ProductLine
    is_active: bool = True
    gtg_required: bool = True


class JenkinsJobUpdate(BaseModel):
    display_name: str | None = Field(None, max_length=255)
    product_line: ProductLine | None = None
    is_active: bool | None = None
    gtg_required: bool | None = None


class JenkinsJobRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    display_name: str | None
    product_line: ProductLine
    is_active: bool
    gtg_required: bool
    last_collected_at: datetime | None
    last_error: str | None
    created_at: datetime


class JenkinsBuildRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    number: int
    result: BuildResult
    duration_ms: int
    started_at: datetime | None
    url: str | None
    collected_at: datetime


class JobMetricsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    successes: int
    failures: int
    unstable: int
    aborted: int
    not_built: int
    pass_rate: float | None
    avg_duration_seconds: float | None
    last_result: BuildResult | None
    last_build_number: int | None
    last_build_at: datetime | None
    streak: int
    flakiness: float


class JobMetricsEntry(BaseModel):
    job_id: str
    name: str
    product_line: ProductLine
    metrics: JobMetricsRead


class ProductLineMetrics(BaseModel):
    product_line: ProductLine
    job_count: int
    failing_job_count: int
    mean_pass_rate: float | None


class MetricsReport(BaseModel):
    window: int
    jobs: list[JobMetricsEntry]
    product_lines: list[ProductLineMetrics]


class CollectResultRead(BaseModel):
    job_id: str
    name: str
    new_builds: int = 0
    updated_builds: int = 0
    error: str | None = None
