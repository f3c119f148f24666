"""Merges a member's Cobot profile, invoices, bookings and custom fields.

Five fetches run concurrently.  The profile is essential: if it fails the
whole request fails and the other fetches are cancelled.  The other four are
each wrapped in their own error boundary and fall back to an empty result,
so a partial Cobot outage still yields a usable (if sparse) widget.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from cobot_dashboard.cobot.client import CobotClient
from cobot_dashboard.cobot.normalize import (
    PAYABLE_STATES,
    UNKNOWN,
    Booking,
    CustomFieldSet,
    Invoice,
    MemberProfile,
    parse_bookings,
    parse_custom_fields,
    parse_invoices,
    parse_member,
    sort_key,
)
from cobot_dashboard.formatting import DateRenderer, GermanDateRenderer
from cobot_dashboard.models.member import (
    BookingSummary,
    DisplayBundle,
    InvoiceSummary,
    NextInvoice,
)

logger = logging.getLogger("cobot_dashboard.cobot.aggregator")

BOOKING_WINDOW_DAYS = 30
BOOKING_HISTORY_LIMIT = 5


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class MemberAggregator:
    """Builds a :class:`DisplayBundle` for one member per call.

    Holds no per-request state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        client: CobotClient,
        *,
        admin_url: str,
        renderer: DateRenderer | None = None,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        """Initialize the aggregator.

        Args:
            client:    Cobot API client.
            admin_url: Root of the Cobot admin UI, used for the profile link.
            renderer:  Date/time formatter; defaults to German formatting.
            today:     Clock for the booking windows (injectable for tests).
        """
        self._client = client
        self._admin_url = admin_url.rstrip("/")
        self._renderer = renderer or GermanDateRenderer()
        self._today = today

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_display_bundle(self, member_id: str) -> DisplayBundle:
        """Fetch everything about ``member_id`` and reshape it for display.

        Raises:
            ProviderError: If the profile fetch fails.
        """
        today = self._today()
        window = timedelta(days=BOOKING_WINDOW_DAYS)

        jobs = [
            asyncio.ensure_future(self._fetch_member(member_id)),
            asyncio.ensure_future(
                self._guarded(self._fetch_custom_fields(member_id), CustomFieldSet(), "custom fields")
            ),
            asyncio.ensure_future(
                self._guarded(self._fetch_invoices(member_id), [], "invoices")
            ),
            asyncio.ensure_future(
                self._guarded(
                    self._fetch_bookings(member_id, today - window, today), [], "past bookings"
                )
            ),
            asyncio.ensure_future(
                self._guarded(
                    self._fetch_bookings(member_id, today, today + window), [], "upcoming bookings"
                )
            ),
        ]
        try:
            member, custom_fields, invoices, past, upcoming = await asyncio.gather(*jobs)
        except Exception:
            for job in jobs:
                job.cancel()
            raise

        return self.compose(member, custom_fields, invoices, past, upcoming)

    def compose(
        self,
        member: MemberProfile,
        custom_fields: CustomFieldSet,
        invoices: list[Invoice],
        past: list[Booking],
        upcoming: list[Booking],
    ) -> DisplayBundle:
        """Pure reshaping step, separated from the fetches for testing."""
        last_invoice = latest_invoice(invoices)
        next_due = next_due_invoice(invoices)
        last_booking = latest_booking(past)
        history = sort_bookings(past + upcoming)[:BOOKING_HISTORY_LIMIT]

        return DisplayBundle(
            id=member.id,
            name=member.name,
            email=member.email,
            phone=member.phone,
            address=member.address,
            status=self._status(member),
            is_canceled=member.is_canceled,
            member_since=member.confirmed_at,
            plan=member.plan_name,
            plan_price=member.plan_price,
            profile_url=f"{self._admin_url}/admin/memberships/{member.id}",
            last_invoice=self._invoice_summary(last_invoice) if last_invoice else None,
            next_invoice=self._next_invoice(next_due) if next_due else None,
            last_booking=self._booking_summary(last_booking) if last_booking else None,
            booking_history=[self._history_line(b) for b in history],
            total_bookings_last_30_days=len(past),
            upcoming_bookings=len(upcoming),
            custom_fields=custom_fields.as_mapping(),
        )

    # ------------------------------------------------------------------
    # Fetches
    # ------------------------------------------------------------------

    async def _fetch_member(self, member_id: str) -> MemberProfile:
        body = await self._client.fetch(f"/api/memberships/{member_id}")
        return parse_member(body if isinstance(body, dict) else {})

    async def _fetch_custom_fields(self, member_id: str) -> CustomFieldSet:
        body = await self._client.fetch(f"/api/memberships/{member_id}/custom_fields")
        return parse_custom_fields(body)

    async def _fetch_invoices(self, member_id: str) -> list[Invoice]:
        body = await self._client.fetch(f"/api/memberships/{member_id}/invoices")
        return parse_invoices(body)

    async def _fetch_bookings(self, member_id: str, start: date, end: date) -> list[Booking]:
        body = await self._client.fetch(
            f"/api/memberships/{member_id}/bookings",
            params={"from": start.isoformat(), "to": end.isoformat()},
        )
        return parse_bookings(body)

    @staticmethod
    async def _guarded(fetch: Awaitable[Any], default: Any, label: str) -> Any:
        try:
            return await fetch
        except Exception as exc:
            logger.warning("Fetching %s failed, continuing without: %s", label, exc)
            return default

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _status(self, member: MemberProfile) -> str:
        if member.canceled_to is not None:
            return f"Gekündigt zum {self._renderer.date(member.canceled_to)}"
        return "Aktiv"

    def _invoice_summary(self, invoice: Invoice) -> InvoiceSummary:
        return InvoiceSummary(
            amount=invoice.amount_display,
            date=self._renderer.date(invoice.created_at) if invoice.created_at else "",
            status=invoice.status_label,
            paid_status=invoice.paid_status,
            is_paid=invoice.paid,
        )

    def _next_invoice(self, invoice: Invoice) -> NextInvoice:
        return NextInvoice(
            amount=invoice.amount_display,
            due_date=self._renderer.date(invoice.due_date) if invoice.due_date else "",
        )

    def _booking_summary(self, booking: Booking) -> BookingSummary:
        return BookingSummary(
            resource=booking.display_name,
            date=self._renderer.date(booking.start) if booking.start else "",
            time=self._renderer.time(booking.start) if booking.start else "",
        )

    def _history_line(self, booking: Booking) -> str:
        when = self._renderer.date(booking.start) if booking.start else UNKNOWN
        return f"{booking.history_label} am {when}"


# ---------------------------------------------------------------------------
# Selection rules
# ---------------------------------------------------------------------------


def latest_invoice(invoices: list[Invoice]) -> Invoice | None:
    """Invoice with the latest creation time; ties keep fetch order."""
    ordered = sorted(invoices, key=lambda i: sort_key(i.created_at), reverse=True)
    return ordered[0] if ordered else None


def next_due_invoice(invoices: list[Invoice]) -> Invoice | None:
    """Earliest-due invoice whose ``state`` is exactly ``open`` or ``pending``."""
    payable = [i for i in invoices if i.state in PAYABLE_STATES]
    if not payable:
        return None
    # Missing due dates go last.
    return min(payable, key=lambda i: (i.due_date is None, sort_key(i.due_date)))


def sort_bookings(bookings: list[Booking]) -> list[Booking]:
    """Newest start first."""
    return sorted(bookings, key=lambda b: sort_key(b.start), reverse=True)


def latest_booking(bookings: list[Booking]) -> Booking | None:
    ordered = sort_bookings(bookings)
    return ordered[0] if ordered else None
