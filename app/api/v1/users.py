"""Registration and the admin-only user list."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import (
    get_single_session,
    get_token_issuer,
    require_admin,
    to_http_exception,
)
from app.core.database import get_db
from app.core.errors import AuthCoreError
from app.core.tokens import TokenIssuer
from app.schemas.auth import Principal, RegisterRequest, RegisterResponse, UserListItem
from app.services.accounts import list_users, register_user

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    single_session: Annotated[bool, Depends(get_single_session)],
) -> RegisterResponse:
    """
    Create an account with role USER and return its id and a live bearer token.
    Duplicate username or email is rejected with 400 and nothing is written.
    """
    try:
        user, issued = register_user(
            db,
            issuer,
            body.username,
            body.password,
            body.email,
            single_session=single_session,
        )
    except AuthCoreError as e:
        raise to_http_exception(e) from e
    return RegisterResponse(user_id=user.id, token=issued.token)


@router.get("/users", response_model=list[UserListItem])
def get_users(
    _admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserListItem]:
    """List all users (admin only)."""
    try:
        users = list_users(db)
    except AuthCoreError as e:
        raise to_http_exception(e) from e
    return [UserListItem.model_validate(u) for u in users]
