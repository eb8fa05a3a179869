from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from qa_ops.core.constants import ProductLine


class FeatureToggleCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9_.-]+$")
    product_line: ProductLine
    enabled: bool = False
    description: str | None = Field(None, max_length=2_000)


class FeatureToggleUpdate(BaseModel):
    enabled: bool | None = None
    description: str | None = Field(None, max_length=2_000)


class FeatureToggleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    key: str
    product_line: ProductLine
    enabled: bool
    description: str | None
    created_at: datetime
    updated_at: datetime | None
