"""Locale-aware date rendering for the widget.

The aggregator only depends on the :class:`DateRenderer` protocol, so a
different locale can be swapped in without touching the reshaping logic.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class DateRenderer(Protocol):
    def date(self, value: datetime) -> str: ...

    def time(self, value: datetime) -> str: ...


class GermanDateRenderer:
    """Renders like ``toLocaleDateString('de-DE')``: ``1.3.2024`` and ``09:05``.

    Timezone-aware values are shifted into the display zone first.  Naive
    values (date-only fields such as ``canceled_to``) are rendered as-is.
    """

    def __init__(self, timezone: tzinfo | str = "Europe/Berlin") -> None:
        self._tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone

    def _local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        return value.astimezone(self._tz)

    def date(self, value: datetime) -> str:
        local = self._local(value)
        return f"{local.day}.{local.month}.{local.year}"

    def time(self, value: datetime) -> str:
        return self._local(value).strftime("%H:%M")
