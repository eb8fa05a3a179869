from __future__ import annotations

import logging

from qa_ops.core.database import SessionLocal
from .git_client import get_git_client
from .service import BranchesService


logger = logging.getLogger(__name__)


def run_due_branch_schedules() -> int:
    """Background entry point: run every due schedule. Returns how many ran."""
    db = SessionLocal()
    try:
        runs = BranchesService(db, get_git_client()).run_due()
    finally:
        db.close()
    if runs:
        logger.info("Branch scheduler ran %s schedule(s)", len(runs))
    return len(runs)
