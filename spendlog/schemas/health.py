"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    service: str = "spendlog"
    environment: str = Field(description="APP_ENV of the running process")
    database: Literal["connected", "disconnected"]
