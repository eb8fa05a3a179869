from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qa_ops import __version__
from qa_ops.core.bootstrap import run_bootstraps
from qa_ops.core.config import settings
from qa_ops.core.database import SessionLocal, ensure_core_schema
from qa_ops.core.errors import register_exception_handlers
from qa_ops.core.logging import configure_logging, install_request_logging
from qa_ops.core.module_loader import collect_routers
from qa_ops.core.scheduler import BackgroundScheduler
from qa_ops.modules.branches.tasks import run_due_branch_schedules
from qa_ops.modules.jenkins.tasks import collect_jenkins_metrics


logger = logging.getLogger(__name__)


def build_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    if settings.GIT_API_TOKEN:
        scheduler.add(
            "branch-recreation",
            settings.BRANCH_SCHEDULER_INTERVAL_SECONDS,
            run_due_branch_schedules,
        )
    else:
        logger.info("GIT_API_TOKEN not set; branch recreation scheduler not started")
    if settings.jenkins_configured:
        scheduler.add(
            "jenkins-metrics",
            settings.JENKINS_COLLECT_INTERVAL_SECONDS,
            collect_jenkins_metrics,
        )
    else:
        logger.info("JENKINS_URL not set; Jenkins metrics collector not started")
    return scheduler


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="QA Ops API", version=__version__)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_request_logging(app)
    register_exception_handlers(app)

    routers = collect_routers()
    # Ensure DB schema is present before routes are registered
    ensure_core_schema()

    for router in routers:
        app.include_router(router, prefix=settings.API_PREFIX)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.state.scheduler = BackgroundScheduler()

    @app.on_event("startup")
    def _startup():
        db = SessionLocal()
        try:
            run_bootstraps(db)
        finally:
            db.close()
        if settings.SCHEDULER_ENABLED:
            app.state.scheduler = build_scheduler()
            app.state.scheduler.start()

    @app.on_event("shutdown")
    def _shutdown():
        app.state.scheduler.shutdown()

    return app


app = create_app()
