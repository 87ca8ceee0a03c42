"""Streaming analytics over the entity set."""

from pygeotrack.analytics.anomalies import AnomalyDetector, AnomalySequence
from pygeotrack.analytics.clusters import ClusterEngine

__all__ = ["AnomalyDetector", "AnomalySequence", "ClusterEngine"]
