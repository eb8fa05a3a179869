from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from qa_ops.api.deps import CurrentUserDep, DbDep
from .schemas import CurrentUserResponse, LoginRequest, TokenResponse
from .service import AuthService


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: DbDep):
    token = AuthService(db).login(payload.email, payload.password)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(access_token=token)


@router.get("/me", response_model=CurrentUserResponse)
def me(current: CurrentUserDep):
    return CurrentUserResponse(
        id=current.id,
        email=current.email,
        full_name=current.full_name,
        role=current.role,
    )
