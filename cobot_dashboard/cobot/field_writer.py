"""Writes widget-edited custom fields back to Cobot."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from cobot_dashboard.cobot.client import CobotClient
from cobot_dashboard.exceptions import ValidationError

logger = logging.getLogger("cobot_dashboard.cobot.field_writer")

NO_VALID_FIELDS = "Keine gültigen Felder zum Aktualisieren"

# Cobot custom field ids from the space configuration.
CUSTOM_FIELD_IDS: Mapping[str, str] = MappingProxyType(
    {
        "zugang_24_stunden": "b799594101de60d2c5904a6a72fd580a",
        "nachsendeadresse": "3ac66a448db77c40f5bba11379aa5cdd",
        "firmenbezeichnung_briefkasten": "01e9f41eac032de45ee760dd197d12f7",
        "fix_desk": "aeb42929e950a92a4754f3313e44dfba",
    }
)


def build_field_batch(
    named_fields: Mapping[str, Any],
    field_ids: Mapping[str, str] = CUSTOM_FIELD_IDS,
) -> list[dict[str, Any]]:
    """Translate ``{semantic_name: value}`` into Cobot's ``[{id, value}]``.

    A field is included whenever its key is present, even if the value is
    falsy (``""``, ``False``, ``None``).  Unknown keys are dropped.
    """
    return [
        {"id": field_id, "value": named_fields[name]}
        for name, field_id in field_ids.items()
        if name in named_fields
    ]


class FieldWriter:
    def __init__(
        self,
        client: CobotClient,
        field_ids: Mapping[str, str] = CUSTOM_FIELD_IDS,
    ) -> None:
        self._client = client
        self._field_ids = field_ids

    async def update_custom_fields(self, member_id: str, named_fields: Mapping[str, Any]) -> Any:
        """Submit the known fields of ``named_fields`` as one batch.

        Returns:
            Cobot's response body, unchanged.

        Raises:
            ValidationError: None of the keys is a known field; nothing is sent.
            ProviderError:   Cobot rejected the write or was unreachable.
        """
        batch = build_field_batch(named_fields, self._field_ids)
        if not batch:
            raise ValidationError(NO_VALID_FIELDS)

        logger.info("Writing %d custom field(s) for member %s", len(batch), member_id)
        return await self._client.put(f"/api/memberships/{member_id}/custom_fields", batch)
