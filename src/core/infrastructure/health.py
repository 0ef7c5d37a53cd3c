"""Health check result types shared by infrastructure components."""

from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    DEGRADED = "degraded"


class DatabaseHealthResult(BaseModel):
    """Database health check result."""

    status: HealthStatus = Field(..., description="Health status")
    connected: bool = Field(..., description="Whether the connection succeeded")
    version: str | None = Field(None, description="PostgreSQL version")
    schema_ready: bool = Field(False, description="Whether the events table exists")
    error: str | None = Field(None, description="Error message")

    def to_dict(self) -> dict[str, str | bool | None]:
        return self.model_dump(mode="json", exclude_none=False)


class RedisHealthResult(BaseModel):
    """Redis health check result."""

    status: HealthStatus = Field(..., description="Health status")
    connected: bool = Field(..., description="Whether the connection succeeded")
    version: str | None = Field(None, description="Redis version")
    error: str | None = Field(None, description="Error message")

    def to_dict(self) -> dict[str, str | bool | None]:
        return self.model_dump(mode="json", exclude_none=False)
