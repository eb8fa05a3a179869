from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import FeatureToggle


class FeatureTogglesRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self, product_line: str | None = None) -> list[FeatureToggle]:
        stmt = select(FeatureToggle).order_by(FeatureToggle.product_line, FeatureToggle.key)
        if product_line:
            stmt = stmt.where(FeatureToggle.product_line == product_line)
        return list(self.db.scalars(stmt))

    def get_by_id(self, toggle_id: str) -> FeatureToggle | None:
        return self.db.get(FeatureToggle, toggle_id)

    def get(self, key: str, product_line: str) -> FeatureToggle | None:
        stmt = select(FeatureToggle).where(
            FeatureToggle.key == key,
            FeatureToggle.product_line == product_line,
        )
        return self.db.scalar(stmt)

    def save(self, toggle: FeatureToggle) -> FeatureToggle:
        self.db.add(toggle)
        self.db.commit()
        self.db.refresh(toggle)
        return toggle

    def delete(self, toggle: FeatureToggle) -> None:
        self.db.delete(toggle)
        self.db.commit()
