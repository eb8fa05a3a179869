from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from qa_ops.core.config import settings
from qa_ops.core.constants import UserRole
from qa_ops.core.security import get_password_hash
from .repository import UsersRepository
from .schemas import UserCreate
from .service import UsersService


logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> None:
    email = settings.ADMIN_EMAIL
    password = settings.ADMIN_PASSWORD
    if not email or not password:
        logger.info("ADMIN_EMAIL or ADMIN_PASSWORD not set; skipping admin bootstrap")
        return

    try:
        data = UserCreate(email=email, password=password, full_name=settings.ADMIN_FULL_NAME)
    except ValidationError as exc:
        logger.error(
            "Default admin not bootstrapped, ADMIN_EMAIL/ADMIN_PASSWORD are invalid: %s",
            "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()),
        )
        return

    repo = UsersRepository(db)
    existing = repo.get_by_email(data.email)
    if existing:
        # Keep the configured account usable: admin role, active, env password
        existing.role = UserRole.ADMIN.value
        existing.is_active = True
        existing.hashed_password = get_password_hash(data.password)
        repo.save(existing)
        logger.info("Default admin '%s' refreshed", existing.email)
        return

    user = UsersService(db).register_user(data, role=UserRole.ADMIN)
    logger.info("Default admin '%s' created", user.email)
