from __future__ import annotations

import logging

from qa_ops.core.database import SessionLocal
from .client import get_jenkins_client
from .service import JenkinsService


logger = logging.getLogger(__name__)


def collect_jenkins_metrics() -> int:
    """Background entry point: collect every active job. Returns the number of failed jobs."""
    db = SessionLocal()
    try:
        results = JenkinsService(db, get_jenkins_client()).collect_all()
    finally:
        db.close()
    failed = [r for r in results if r.error]
    if failed:
        logger.warning(
            "Jenkins collection finished with %s/%s failures", len(failed), len(results)
        )
    return len(failed)
