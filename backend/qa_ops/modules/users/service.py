from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from qa_ops.core.constants import UserRole
from qa_ops.core.errors import ConflictError, NotFoundError
from qa_ops.core.security import get_password_hash, verify_password
from .models import User
from .schemas import UserCreate, UserUpdate
from .repository import UsersRepository


logger = logging.getLogger(__name__)


class UsersService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UsersRepository(db)

    def register_user(self, data: UserCreate, role: UserRole = UserRole.VIEWER) -> User:
        if self.repo.get_by_email(data.email):
            raise ConflictError("Email already registered")
        # Self-registered accounts wait for an admin to activate them
        user = User(
            email=data.email,
            full_name=data.full_name,
            hashed_password=get_password_hash(data.password),
            role=role.value,
            is_active=role == UserRole.ADMIN,
        )
        return self.repo.save(user)

    def list_users(self, limit: int = 50, offset: int = 0) -> list[User]:
        return self.repo.list(limit=limit, offset=offset)

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        user = self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if data.full_name is not None:
            user.full_name = data.full_name
        if data.role is not None:
            user.role = data.role.value
        if data.is_active is not None:
            user.is_active = data.is_active
        logger.info("User %s updated (role=%s, active=%s)", user.email, user.role, user.is_active)
        return self.repo.save(user)

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.repo.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user
