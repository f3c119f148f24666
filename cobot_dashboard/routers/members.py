"""Member endpoints used by the dashboard widget."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body

from cobot_dashboard.dependencies import Aggregator, Writer
from cobot_dashboard.models.base import ErrorResponse, SuccessResponse
from cobot_dashboard.models.member import MemberResponse

router = APIRouter(prefix="/api/member", tags=["members"])
logger = logging.getLogger("cobot_dashboard.members")

_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/{member_id}", response_model=MemberResponse, responses=_ERRORS)
async def get_member(member_id: str, aggregator: Aggregator) -> MemberResponse:
    """Live Cobot data for one member, merged into a single display record."""
    logger.info("Live data requested for member %s", member_id)
    bundle = await aggregator.get_display_bundle(member_id)
    logger.info("Live data assembled for member %s (%s)", member_id, bundle.name)
    return MemberResponse(data=bundle)


@router.put("/{member_id}/custom_fields", response_model=SuccessResponse, responses=_ERRORS)
async def update_custom_fields(
    member_id: str,
    writer: Writer,
    fields: dict[str, Any] = Body(...),
) -> SuccessResponse:
    """Write the widget's editable custom fields back to Cobot."""
    logger.info("Custom field update for member %s: %s", member_id, sorted(fields))
    result = await writer.update_custom_fields(member_id, fields)
    logger.info("Custom fields updated for member %s", member_id)
    return SuccessResponse(data=result)
