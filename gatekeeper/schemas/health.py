"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = Field(default="ok", description="ok when storage is reachable")
    environment: str = Field(description="APP_ENV of the running process")
    database: Literal["connected", "disconnected"]
    token_key: Literal["present", "absent"] = Field(
        description="Whether the token key artifact exists yet (it is created on first login)"
    )
