"""Base model for persisted procivlog records.

Every record model inherits from :class:`ProcivModel` which provides:

* ``alias_generator=to_camel`` so records round-trip through storage and
  the sink with camelCase keys (``vehicleId``, ``startKm``, ...).
* ``populate_by_name=True`` so code can construct models with snake_case
  keyword arguments.
* Frozen instances: updates go through ``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def _ensure_tz_aware(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(_ensure_tz_aware)]
"""Datetime coerced to UTC-aware; naive values are assumed UTC."""


class ProcivModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON-compatible record shape."""
        return self.model_dump(mode="json", by_alias=True)
