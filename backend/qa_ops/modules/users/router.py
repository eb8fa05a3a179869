from __future__ import annotations

import logging

from fastapi import APIRouter, Query, status

from qa_ops.api.deps import AdminDep, CurrentUserDep, DbDep
from .schemas import UserCreate, UserRead, UserUpdate
from .service import UsersService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(data: UserCreate, db: DbDep):
    logger.info("Registering user %s", data.email)
    user = UsersService(db).register_user(data)
    logger.info("User %s registered with id %s", user.email, user.id)
    return user


@router.get("/me", response_model=UserRead)
def read_me(current: CurrentUserDep):
    return current


@router.get("", response_model=list[UserRead])
def list_users(
    db: DbDep,
    _: AdminDep,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return UsersService(db).list_users(limit=limit, offset=offset)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(user_id: str, payload: UserUpdate, db: DbDep, _: AdminDep):
    return UsersService(db).update_user(user_id, payload)
