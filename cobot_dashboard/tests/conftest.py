"""Shared fixtures and mock Cobot responses for dashboard tests."""

from __future__ import annotations

import os
from datetime import date
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Settings are read when cobot_dashboard.main is imported.
os.environ["COBOT_BASE_URL"] = "https://testspace.cobot.me"
os.environ["COBOT_ACCESS_TOKEN"] = "test-token"
os.environ.pop("COBOT_ADMIN_URL", None)
os.environ.pop("STATIC_DIR", None)

from cobot_dashboard.cobot.aggregator import MemberAggregator  # noqa: E402
from cobot_dashboard.formatting import GermanDateRenderer  # noqa: E402

TEST_MEMBER_ID = "4e3f7b2a"
TEST_TODAY = date(2026, 2, 23)
ADMIN_URL = "https://testspace.cobot.me"


# ---------------------------------------------------------------------------
# Raw Cobot payloads
# ---------------------------------------------------------------------------


@pytest.fixture
def member_raw() -> dict:
    return {
        "id": TEST_MEMBER_ID,
        "name": "Erika Mustermann",
        "email": "erika@example.com",
        "phone": "+49 30 1234567",
        "address": {
            "company": "Mustermann GmbH",
            "name": "Erika Mustermann",
            "full_address": "Hauptstraße 1\n10115 Berlin",
        },
        "canceled_to": None,
        "confirmed_at": "2024/01/15",
        "plan": {"name": "Flex Desk", "price_display": "199,00 €"},
    }


@pytest.fixture
def custom_fields_raw() -> dict:
    return {
        "fields": [
            {"label": "Zugang 24 Stunden", "value": "ja"},
            {"label": "Nachsendeadresse", "value": ""},
            {"label": "Fix Desk", "value": None},
            {"label": "Firmenbezeichnung Briefkasten", "value": "Mustermann GmbH"},
        ]
    }


@pytest.fixture
def invoices_raw() -> list[dict]:
    return [
        {
            "total_amount": "199.0",
            "currency": "EUR",
            "created_at": "2026/01/01 10:00:00 +0100",
            "due_date": "2026/01/15",
            "paid": True,
            "paid_status": "paid",
            "state": "paid",
        },
        {
            "total_amount": "210.5",
            "currency": "EUR",
            "created_at": "2026/02/01 10:00:00 +0100",
            "due_date": "2026/02/15",
            "paid": False,
            "paid_status": "open",
            "state": "open",
        },
    ]


@pytest.fixture
def past_bookings_raw() -> list[dict]:
    return [
        {
            "resource": {"name": "Meetingraum Spree"},
            "from": "2026/02/10 09:00:00 +0100",
            "to": "2026/02/10 11:00:00 +0100",
        },
        {
            "resource": {"name": "Telefonbox"},
            "from": "2026/02/20 14:30:00 +0100",
            "to": "2026/02/20 15:00:00 +0100",
        },
    ]


@pytest.fixture
def upcoming_bookings_raw() -> list[dict]:
    return [
        {
            "resource": {"name": "Eventfläche"},
            "from": "2026/03/05 18:00:00 +0100",
            "to": "2026/03/05 22:00:00 +0100",
        },
    ]


# ---------------------------------------------------------------------------
# Mock Cobot client
# ---------------------------------------------------------------------------


def make_cobot_client(
    *,
    member: Any = None,
    custom_fields: Any = None,
    invoices: Any = None,
    past: Any = None,
    upcoming: Any = None,
) -> MagicMock:
    """Mock CobotClient whose ``fetch`` answers per endpoint.

    A value that is an exception instance is raised instead of returned.
    Upcoming bookings are told apart from past ones by ``from=TEST_TODAY``.
    """

    async def fetch(endpoint: str, params: dict | None = None) -> Any:
        if endpoint.endswith("/custom_fields"):
            body = custom_fields
        elif endpoint.endswith("/invoices"):
            body = invoices
        elif endpoint.endswith("/bookings"):
            body = upcoming if params and params["from"] == TEST_TODAY.isoformat() else past
        else:
            body = member
        if isinstance(body, Exception):
            raise body
        return body

    client = MagicMock()
    client.fetch = AsyncMock(side_effect=fetch)
    client.put = AsyncMock(return_value={})
    return client


def make_aggregator(client: MagicMock) -> MemberAggregator:
    return MemberAggregator(
        client,
        admin_url=ADMIN_URL,
        renderer=GermanDateRenderer("Europe/Berlin"),
        today=lambda: TEST_TODAY,
    )


@pytest.fixture
def cobot_client(
    member_raw: dict,
    custom_fields_raw: dict,
    invoices_raw: list[dict],
    past_bookings_raw: list[dict],
    upcoming_bookings_raw: list[dict],
) -> MagicMock:
    """Mock client serving the full happy-path payload set."""
    return make_cobot_client(
        member=member_raw,
        custom_fields=custom_fields_raw,
        invoices=invoices_raw,
        past=past_bookings_raw,
        upcoming=upcoming_bookings_raw,
    )
