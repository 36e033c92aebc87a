"""Health check: service status, session store connectivity, active session policy."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.v1.auth import get_single_session
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    single_session: Annotated[bool, Depends(get_single_session)],
) -> HealthResponse:
    """Used by load balancers and monitoring. Never requires a token."""
    return HealthResponse(
        status="ok",
        environment=request.app.state.environment,
        database="connected" if check_db_connected(db) else "disconnected",
        session_policy="single" if single_session else "multi",
    )
