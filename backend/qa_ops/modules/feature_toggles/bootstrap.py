from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from qa_ops.core.constants import ProductLine, WELL_KNOWN_TOGGLES
from .models import FeatureToggle
from .repository import FeatureTogglesRepository


logger = logging.getLogger(__name__)


def ensure_default_toggles(db: Session) -> int:
    """Create the disabled well-known toggles for every product line. Returns how many were added."""
    repo = FeatureTogglesRepository(db)
    created = 0
    for product_line in ProductLine:
        for key, description in WELL_KNOWN_TOGGLES.items():
            if repo.get(key, product_line.value):
                continue
            db.add(
                FeatureToggle(
                    key=key,
                    product_line=product_line.value,
                    enabled=False,
                    description=description,
                )
            )
            created += 1
    if created:
        db.commit()
        logger.info("Created %s default feature toggles", created)
    return created
