"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request

from cobot_dashboard.cobot.aggregator import MemberAggregator
from cobot_dashboard.cobot.client import CobotClient
from cobot_dashboard.cobot.field_writer import FieldWriter
from cobot_dashboard.config import Settings, get_settings
from cobot_dashboard.formatting import GermanDateRenderer


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """The app-wide httpx client opened in the lifespan, if any.

    Outside the lifespan (e.g. a bare TestClient) this is ``None`` and the
    Cobot client falls back to a short-lived connection per call.
    """
    return getattr(request.app.state, "http_client", None)


AppSettings = Annotated[Settings, Depends(get_settings)]


def get_cobot_client(
    settings: AppSettings,
    http_client: Annotated[httpx.AsyncClient | None, Depends(get_http_client)],
) -> CobotClient:
    return CobotClient(
        settings.cobot_base_url,
        settings.cobot_access_token,
        http_client=http_client,
    )


Cobot = Annotated[CobotClient, Depends(get_cobot_client)]


def get_aggregator(client: Cobot, settings: AppSettings) -> MemberAggregator:
    return MemberAggregator(
        client,
        admin_url=settings.admin_url,
        renderer=GermanDateRenderer(settings.display_timezone),
    )


def get_field_writer(client: Cobot) -> FieldWriter:
    return FieldWriter(client)


# Annotated shortcuts for route signatures
Aggregator = Annotated[MemberAggregator, Depends(get_aggregator)]
Writer = Annotated[FieldWriter, Depends(get_field_writer)]
