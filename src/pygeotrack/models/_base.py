"""Base model for pygeotrack domain objects.

Every wire-facing model inherits from :class:`GeoBaseModel` which provides:

* ``alias_generator=to_camel`` so snake_case fields serialise as the
  camelCase keys subscribers expect (``observedAt``, ``entityIds``...).
* ``populate_by_name`` so Python callers can keep using field names.
* ``frozen=True`` so a model handed out by the store can never be mutated
  behind its back.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class GeoBaseModel(BaseModel):
    """Base for pygeotrack models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump as the JSON-compatible dict sent to subscribers."""
        return self.model_dump(mode="json", by_alias=True)
