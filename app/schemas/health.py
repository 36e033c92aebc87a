"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether the session store database answered a trivial query",
    )
    session_policy: Literal["single", "multi"] = Field(
        description="single: a new login revokes prior sessions; multi: sessions coexist",
    )
