"""Login/logout and auth dependencies (get_current_user, require_admin)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import (
    AuthCoreError,
    DuplicateError,
    Forbidden,
    InternalError,
    InvalidCredentialsError,
    InvalidInputError,
    Unauthorized,
)
from app.core.tokens import TokenIssuer, TokenVerifier
from app.models.user import Role
from app.schemas.auth import LoginRequest, Principal, TokenResponse
from app.services.accounts import authenticate
from app.services.auth_gate import AuthGate
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)
router = APIRouter()

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def to_http_exception(error: AuthCoreError) -> HTTPException:
    """Map an auth core error to the HTTP status the API promises for it."""
    if isinstance(error, (InvalidInputError, DuplicateError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if isinstance(error, (Unauthorized, InvalidCredentialsError)):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error.message,
            headers=BEARER_CHALLENGE,
        )
    if isinstance(error, Forbidden):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error.message)
    if not isinstance(error, InternalError):
        logger.error("Unmapped auth error: %s", type(error).__name__)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error.",
    )


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_single_session(request: Request) -> bool:
    """Session policy resolved at startup: True revokes prior sessions on each login."""
    return request.app.state.single_session


def get_auth_gate(
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    db: Annotated[Session, Depends(get_db)],
    single_session: Annotated[bool, Depends(get_single_session)],
) -> AuthGate:
    return AuthGate(verifier, SessionStore(db, single_session=single_session))


def require_role(required_role: Role | None) -> Callable[..., Principal]:
    """Build a dependency that authorizes the Bearer token, optionally requiring a role."""

    def dependency(
        gate: Annotated[AuthGate, Depends(get_auth_gate)],
        authorization: Annotated[str | None, Header()] = None,
    ) -> Principal:
        try:
            return gate.authorize(authorization, required_role)
        except AuthCoreError as e:
            raise to_http_exception(e) from e

    return dependency


get_current_user = require_role(None)
require_admin = require_role(Role.ADMIN)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    single_session: Annotated[bool, Depends(get_single_session)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a bearer token.
    Include the token in the Authorization header as: Bearer <token>
    Under the single-session policy every earlier token of the user stops working.
    """
    try:
        user, issued = authenticate(
            db, issuer, body.username, body.password, single_session=single_session
        )
    except AuthCoreError as e:
        raise to_http_exception(e) from e
    return TokenResponse(user_id=user.id, token=issued.token, expires_at=issued.expires_at)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    principal: Annotated[Principal, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    everywhere: bool = False,
) -> Response:
    """Revoke the presented token, or with ?everywhere=true every session of the caller."""
    store = SessionStore(db)
    try:
        if everywhere:
            store.revoke_all(principal.user_id)
        else:
            store.revoke(principal.token)
    except AuthCoreError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
