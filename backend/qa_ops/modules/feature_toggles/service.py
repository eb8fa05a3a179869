from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from qa_ops.core.constants import ProductLine
from qa_ops.core.errors import ConflictError, NotFoundError
from .models import FeatureToggle
from .repository import FeatureTogglesRepository
from .schemas import FeatureToggleCreate, FeatureToggleUpdate


logger = logging.getLogger(__name__)


class FeatureTogglesService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = FeatureTogglesRepository(db)

    def list_toggles(self, product_line: ProductLine | None = None) -> list[FeatureToggle]:
        return self.repo.list(product_line.value if product_line else None)

    def create_toggle(self, data: FeatureToggleCreate) -> FeatureToggle:
        if self.repo.get(data.key, data.product_line.value):
            raise ConflictError(
                f"Toggle '{data.key}' already exists for {data.product_line.value}"
            )
        toggle = FeatureToggle(
            key=data.key,
            product_line=data.product_line.value,
            enabled=data.enabled,
            description=data.description,
        )
        return self.repo.save(toggle)

    def update_toggle(self, toggle_id: str, data: FeatureToggleUpdate) -> FeatureToggle:
        toggle = self._get_or_raise(toggle_id)
        if data.enabled is not None and data.enabled != toggle.enabled:
            logger.info(
                "Toggle %s/%s switched %s",
                toggle.product_line,
                toggle.key,
                "on" if data.enabled else "off",
            )
            toggle.enabled = data.enabled
        if data.description is not None:
            toggle.description = data.description
        return self.repo.save(toggle)

    def delete_toggle(self, toggle_id: str) -> None:
        self.repo.delete(self._get_or_raise(toggle_id))

    def is_enabled(self, key: str, product_line: ProductLine | str) -> bool:
        value = product_line.value if isinstance(product_line, ProductLine) else product_line
        toggle = self.repo.get(key, value)
        return bool(toggle and toggle.enabled)

    def _get_or_raise(self, toggle_id: str) -> FeatureToggle:
        toggle = self.repo.get_by_id(toggle_id)
        if not toggle:
            raise NotFoundError("Feature toggle not found")
        return toggle
