"""Canonical entities parsed from raw Cobot JSON.

Cobot responses are loosely shaped: fields go missing, nest under ``null``
objects, or carry timestamps in Cobot's own ``2024/03/01 09:00:00 +0100``
format instead of ISO-8601.  Everything here is null-safe; a malformed item
never raises, it just yields empty attributes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger("cobot_dashboard.cobot.normalize")

UNKNOWN = "Unbekannt"

_COBOT_FORMATS = (
    "%Y/%m/%d %H:%M:%S %z",
    "%Y/%m/%d %H:%M %z",
    "%Y/%m/%d",
)

# Sorts after every real timestamp when ordering descending.
_MISSING = datetime.min.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 or Cobot-style timestamp.

    Timezone information is preserved.  Date-only values come back naive.
    Returns None if the value is missing or unparseable.
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in _COBOT_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    logger.warning("Could not parse timestamp: %r", value)
    return None


def sort_key(value: datetime | None) -> datetime:
    """Comparable UTC key for ordering; naive values are assumed UTC."""
    if value is None:
        return _MISSING
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Member profile
# ---------------------------------------------------------------------------


@dataclass
class MemberProfile:
    """Membership record from ``/api/memberships/{id}``.

    Attributes:
        id:           Cobot membership id.
        name:         Member display name.
        email:        Contact email.
        phone:        Phone number, empty string when unknown.
        address:      Multi-line address, see :func:`format_address`.
        canceled_to:  Date the membership ends, if canceled.
        confirmed_at: Membership start exactly as Cobot sent it.
        plan_name:    Plan name, ``Unbekannt`` when missing.
        plan_price:   Cobot's preformatted price string.
    """

    id: str | None
    name: str | None = None
    email: str | None = None
    phone: str = ""
    address: str = ""
    canceled_to: datetime | None = None
    confirmed_at: str | None = None
    plan_name: str = UNKNOWN
    plan_price: str = ""

    @property
    def is_canceled(self) -> bool:
        return self.canceled_to is not None


def _text(value: object) -> str | None:
    """Stringify a scalar Cobot value, keeping None as None."""
    return None if value is None else str(value)


def format_address(address: object) -> str:
    """Join company, name and full address with newlines, skipping blanks."""
    if not isinstance(address, dict):
        return ""
    parts = [address.get("company"), address.get("name"), address.get("full_address")]
    return "\n".join(str(p) for p in parts if p)


def parse_member(raw: dict[str, Any]) -> MemberProfile:
    plan = raw.get("plan") if isinstance(raw.get("plan"), dict) else {}
    member_id = raw.get("id")
    return MemberProfile(
        id=str(member_id) if member_id is not None else None,
        name=_text(raw.get("name")),
        email=_text(raw.get("email")),
        phone=_text(raw.get("phone")) or "",
        address=format_address(raw.get("address")),
        canceled_to=parse_timestamp(raw.get("canceled_to")),
        confirmed_at=_text(raw.get("confirmed_at")),
        plan_name=_text(plan.get("name")) or UNKNOWN,
        plan_price=_text(plan.get("price_display")) or "",
    )


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


class PaidStatus(str, Enum):
    PAID = "paid"
    WRITTEN_OFF = "written_off"
    OPEN = "open"
    UNKNOWN = "unknown"


PAID_STATUS_LABELS: dict[PaidStatus, str] = {
    PaidStatus.PAID: "Bezahlt",
    PaidStatus.WRITTEN_OFF: "Abgeschrieben",
    PaidStatus.OPEN: "Offen",
}

# Invoice ``state`` values that count as still payable.
PAYABLE_STATES = frozenset({"open", "pending"})


@dataclass
class Invoice:
    """One Cobot invoice.

    ``state`` is kept verbatim for next-due selection; ``raw_paid_status``
    is shown to the user when it is not one of the known values.
    """

    total_amount: Any = None
    currency: str | None = None
    created_at: datetime | None = None
    due_date: datetime | None = None
    paid: bool = False
    paid_status: PaidStatus = PaidStatus.UNKNOWN
    raw_paid_status: str | None = None
    state: str | None = None

    @property
    def amount_display(self) -> str:
        return " ".join(
            _format_number(part) for part in (self.total_amount, self.currency) if part is not None
        )

    @property
    def status_label(self) -> str:
        label = PAID_STATUS_LABELS.get(self.paid_status)
        if label:
            return label
        return self.raw_paid_status or UNKNOWN


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _paid_status(paid: bool, raw: object) -> PaidStatus:
    if paid:
        return PaidStatus.PAID
    if raw == "written_off":
        return PaidStatus.WRITTEN_OFF
    if raw == "open":
        return PaidStatus.OPEN
    return PaidStatus.UNKNOWN


def parse_invoice(raw: dict[str, Any]) -> Invoice:
    paid = raw.get("paid") is True
    raw_status = raw.get("paid_status")
    return Invoice(
        total_amount=raw.get("total_amount"),
        currency=_text(raw.get("currency")),
        created_at=parse_timestamp(raw.get("created_at")),
        due_date=parse_timestamp(raw.get("due_date")),
        paid=paid,
        paid_status=_paid_status(paid, raw_status),
        raw_paid_status=raw_status if isinstance(raw_status, str) else None,
        state=raw.get("state") if isinstance(raw.get("state"), str) else None,
    )


def parse_invoices(body: object) -> list[Invoice]:
    if not isinstance(body, list):
        return []
    return [parse_invoice(item) for item in body if isinstance(item, dict)]


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


@dataclass
class Booking:
    """One booking.

    ``resource`` comes from the nested ``resource.name``; ``resource_name`` is
    Cobot's flat fallback field.  History lines only use the nested name,
    the last-booking summary falls back to the flat one.
    """

    resource: str | None = None
    resource_name: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    @property
    def history_label(self) -> str:
        return self.resource or UNKNOWN

    @property
    def display_name(self) -> str:
        return self.resource or self.resource_name or UNKNOWN


def parse_booking(raw: dict[str, Any]) -> Booking:
    resource = raw.get("resource") if isinstance(raw.get("resource"), dict) else {}
    return Booking(
        resource=_text(resource.get("name")) or None,
        resource_name=_text(raw.get("resource_name")) or None,
        start=parse_timestamp(raw.get("from")),
        end=parse_timestamp(raw.get("to")),
    )


def parse_bookings(body: object) -> list[Booking]:
    if not isinstance(body, list):
        return []
    return [parse_booking(item) for item in body if isinstance(item, dict)]


# ---------------------------------------------------------------------------
# Custom fields
# ---------------------------------------------------------------------------


@dataclass
class CustomField:
    label: str
    value: Any = None


@dataclass
class CustomFieldSet:
    fields: list[CustomField] = field(default_factory=list)

    def as_mapping(self) -> dict[str, Any]:
        """Label → value for fields that actually carry a value."""
        return {f.label: f.value for f in self.fields if f.value}


def parse_custom_fields(body: object) -> CustomFieldSet:
    """Parse ``{"fields": [{"label": ..., "value": ...}, ...]}``."""
    raw_fields = body.get("fields") if isinstance(body, dict) else None
    if not isinstance(raw_fields, list):
        return CustomFieldSet()
    return CustomFieldSet(
        fields=[
            CustomField(label=str(item["label"]), value=item.get("value"))
            for item in raw_fields
            if isinstance(item, dict) and item.get("label")
        ]
    )
