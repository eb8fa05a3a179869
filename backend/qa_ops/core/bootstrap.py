from __future__ import annotations

from sqlalchemy.orm import Session

from qa_ops.modules.feature_toggles.bootstrap import ensure_default_toggles
from qa_ops.modules.users.bootstrap import ensure_default_admin


def run_bootstraps(db: Session) -> None:
    ensure_default_admin(db)
    ensure_default_toggles(db)
