from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import GtgOverride


class GtgRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_override(self, product_line: str) -> GtgOverride | None:
        stmt = select(GtgOverride).where(GtgOverride.product_line == product_line)
        return self.db.scalar(stmt)

    def save_override(self, override: GtgOverride) -> GtgOverride:
        self.db.add(override)
        self.db.commit()
        self.db.refresh(override)
        return override

    def delete_override(self, override: GtgOverride) -> None:
        self.db.delete(override)
        self.db.commit()
