from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import inspect

from qa_ops.api.deps import AdminDep, DbDep
from qa_ops.core.bootstrap import run_bootstraps
from qa_ops.core.database import Base
from qa_ops.core.module_loader import import_all_models


router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.get("/sync-tables")
def sync_tables(db: DbDep, _: AdminDep):
    """
    Ensure all discovered models have their tables created and run bootstraps.
    """
    engine = db.get_bind()
    if engine is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database engine unavailable")

    # Load all module models so Base.metadata is complete
    import_all_models()

    known_tables_before = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine, checkfirst=True)
    known_tables_after = set(inspect(engine).get_table_names())

    run_bootstraps(db)

    return {
        "status": "ok",
        "created_tables": sorted(known_tables_after - known_tables_before),
        "total_known_tables": sorted(known_tables_after),
    }
