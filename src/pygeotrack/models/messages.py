"""Outbound and inbound message envelopes.

Outbound (to subscribers):

* ``snapshot``: full state, always carries all three lists.
* ``batch``: incremental update, only the non-empty lists are present.
* ``entity_detail``: reply to a point lookup; ``data`` is ``null`` on a miss.

Inbound control messages are a discriminated union on ``type``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, ValidationError

from pygeotrack.exceptions import MalformedControlMessageError
from pygeotrack.models._base import GeoBaseModel
from pygeotrack.models.anomaly import Anomaly
from pygeotrack.models.cluster import Cluster
from pygeotrack.models.entity import Entity
from pygeotrack.models.filters import FilterCriteria

# ------------------------------------------------------------------
# Outbound
# ------------------------------------------------------------------


class SnapshotData(GeoBaseModel):
    entities: tuple[Entity, ...] = ()
    anomalies: tuple[Anomaly, ...] = ()
    clusters: tuple[Cluster, ...] = ()


class SnapshotMessage(GeoBaseModel):
    type: Literal["snapshot"] = "snapshot"
    data: SnapshotData


class BatchData(GeoBaseModel):
    entities: tuple[Entity, ...] | None = None
    anomalies: tuple[Anomaly, ...] | None = None
    clusters: tuple[Cluster, ...] | None = None

    @property
    def is_empty(self) -> bool:
        return self.entities is None and self.anomalies is None and self.clusters is None


class BatchMessage(GeoBaseModel):
    type: Literal["batch"] = "batch"
    data: BatchData

    @classmethod
    def compose(
        cls,
        *,
        entities: list[Entity],
        anomalies: list[Anomaly],
        clusters: list[Cluster],
    ) -> BatchMessage:
        """Build a batch holding only the non-empty lists."""
        return cls(
            data=BatchData(
                entities=tuple(entities) if entities else None,
                anomalies=tuple(anomalies) if anomalies else None,
                clusters=tuple(clusters) if clusters else None,
            )
        )

    def to_wire(self) -> dict[str, Any]:
        # Drop absent keys at the envelope level only; entity metadata may
        # legitimately hold nulls.
        data: dict[str, Any] = {}
        for key in ("entities", "anomalies", "clusters"):
            items = getattr(self.data, key)
            if items is not None:
                data[key] = [item.to_wire() for item in items]
        return {"type": self.type, "data": data}


class EntityDetailMessage(GeoBaseModel):
    type: Literal["entity_detail"] = "entity_detail"
    data: Entity | None = None


OutboundMessage = SnapshotMessage | BatchMessage | EntityDetailMessage

# ------------------------------------------------------------------
# Inbound
# ------------------------------------------------------------------


class FilterControl(GeoBaseModel):
    type: Literal["filter"]
    data: FilterCriteria = Field(default_factory=FilterCriteria)


class PauseControl(GeoBaseModel):
    type: Literal["pause"]


class ResumeControl(GeoBaseModel):
    type: Literal["resume"]


class GetEntityControl(GeoBaseModel):
    type: Literal["get_entity"]
    id: str


ControlMessage = Annotated[
    FilterControl | PauseControl | ResumeControl | GetEntityControl,
    Field(discriminator="type"),
]

_CONTROL_ADAPTER: TypeAdapter[ControlMessage] = TypeAdapter(ControlMessage)


def parse_control_message(raw: str | bytes | Mapping[str, Any]) -> ControlMessage:
    """Parse an inbound control message.

    Raises
    ------
    MalformedControlMessageError
        If *raw* is not JSON, not an object, or fails validation.
    """
    payload: Any = raw
    if isinstance(raw, (str, bytes)):
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedControlMessageError(f"Control message is not JSON: {exc}", raw=raw) from exc
    if not isinstance(payload, Mapping):
        raise MalformedControlMessageError("Control message must be a JSON object", raw=raw)
    try:
        return _CONTROL_ADAPTER.validate_python(dict(payload))
    except ValidationError as exc:
        raise MalformedControlMessageError(f"Invalid control message: {exc.error_count()} error(s)", raw=raw) from exc
