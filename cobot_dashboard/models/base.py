"""Shared Pydantic base models and response envelopes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DashboardBase(BaseModel):
    """Base model for widget payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


# ---------- Envelopes ----------


class SuccessResponse(DashboardBase):
    success: bool = True
    data: Any


class ErrorResponse(DashboardBase):
    success: bool = False
    error: str


class HealthResponse(DashboardBase):
    status: str = "ok"
    timestamp: datetime = Field(default_factory=utc_now)
