"""Domain and message models."""

from pygeotrack.models._base import GeoBaseModel, now_ms
from pygeotrack.models.anomaly import Anomaly, AnomalyKind, Severity
from pygeotrack.models.cluster import Centroid, Cluster
from pygeotrack.models.entity import Entity, EntityType, Provenance
from pygeotrack.models.filters import FilterCriteria, Region, TimeWindow
from pygeotrack.models.messages import (
    BatchData,
    BatchMessage,
    ControlMessage,
    EntityDetailMessage,
    FilterControl,
    GetEntityControl,
    OutboundMessage,
    PauseControl,
    ResumeControl,
    SnapshotData,
    SnapshotMessage,
    parse_control_message,
)

__all__ = [
    "Anomaly",
    "AnomalyKind",
    "BatchData",
    "BatchMessage",
    "Centroid",
    "Cluster",
    "ControlMessage",
    "Entity",
    "EntityDetailMessage",
    "EntityType",
    "FilterControl",
    "FilterCriteria",
    "GeoBaseModel",
    "GetEntityControl",
    "OutboundMessage",
    "PauseControl",
    "Provenance",
    "Region",
    "ResumeControl",
    "Severity",
    "SnapshotData",
    "SnapshotMessage",
    "TimeWindow",
    "now_ms",
    "parse_control_message",
]
