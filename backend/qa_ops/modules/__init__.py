"""Feature modules live here. Each module may define:

- models.py   (SQLAlchemy models using qa_ops.core.database.Base)
- schemas.py  (Pydantic models)
- service.py  (business logic, raising qa_ops.core.errors exceptions)
- repository.py (data access)
- router.py   (FastAPI APIRouter exported as `router`)
- tasks.py    (entry points for the background scheduler)

Routers are auto-discovered and mounted under the versioned API prefix;
models are auto-imported before schema creation.
"""
