"""Display-ready member payloads returned to the dashboard widget."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from cobot_dashboard.cobot.normalize import PaidStatus
from cobot_dashboard.models.base import DashboardBase, SuccessResponse, utc_now


class InvoiceSummary(DashboardBase):
    amount: str
    date: str
    status: str  # German label, e.g. "Bezahlt"
    paid_status: PaidStatus
    is_paid: bool


class NextInvoice(DashboardBase):
    amount: str
    due_date: str


class BookingSummary(DashboardBase):
    resource: str
    date: str
    time: str


class DisplayBundle(DashboardBase):
    """Everything the widget shows for one member, assembled per request."""

    # Base info
    id: str | None
    name: str | None
    email: str | None
    phone: str = ""
    address: str = ""

    # Status
    status: str
    is_canceled: bool
    member_since: str | None = None

    # Plan
    plan: str
    plan_price: str = ""
    profile_url: str

    # Invoices
    last_invoice: InvoiceSummary | None = None
    next_invoice: NextInvoice | None = None

    # Bookings
    last_booking: BookingSummary | None = None
    booking_history: list[str] = Field(default_factory=list)
    total_bookings_last_30_days: int = Field(default=0, alias="totalBookingsLast30Days")
    upcoming_bookings: int = 0

    custom_fields: dict[str, Any] = Field(default_factory=dict)


class MemberResponse(SuccessResponse):
    data: DisplayBundle
    fetched_at: datetime = Field(default_factory=utc_now)
