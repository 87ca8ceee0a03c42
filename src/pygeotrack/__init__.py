"""pygeotrack - Async pipeline tracking moving geospatial entities."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pygeotrack")
except PackageNotFoundError:
    __version__ = "0+local"
from pygeotrack.analytics import AnomalyDetector, AnomalySequence, ClusterEngine
from pygeotrack.broadcast import Subscriber, SubscriberRegistry
from pygeotrack.config import GeoTrackConfig
from pygeotrack.exceptions import (
    GeoTrackConfigError,
    GeoTrackError,
    MalformedControlMessageError,
    SourceFormatError,
    SourceUnavailableError,
)
from pygeotrack.filters import apply_filter
from pygeotrack.models import (
    Anomaly,
    AnomalyKind,
    Cluster,
    Entity,
    EntityType,
    FilterCriteria,
    Provenance,
    Severity,
)
from pygeotrack.orchestrator import Orchestrator, build_orchestrator
from pygeotrack.state import EntityStore, UpdateBatch, UpdateOrigin

__all__ = [
    "__version__",
    "Anomaly",
    "AnomalyDetector",
    "AnomalyKind",
    "AnomalySequence",
    "Cluster",
    "ClusterEngine",
    "Entity",
    "EntityStore",
    "EntityType",
    "FilterCriteria",
    "GeoTrackConfig",
    "GeoTrackConfigError",
    "GeoTrackError",
    "MalformedControlMessageError",
    "Orchestrator",
    "Provenance",
    "Severity",
    "SourceFormatError",
    "SourceUnavailableError",
    "Subscriber",
    "SubscriberRegistry",
    "UpdateBatch",
    "UpdateOrigin",
    "apply_filter",
    "build_orchestrator",
]
