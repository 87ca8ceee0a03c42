"""Entity ingestion: live feed adapters, synthetic generators and category plans."""

from pygeotrack.ingestion.plans import CategoryPlan, SourceCategory, build_default_plans
from pygeotrack.ingestion.sources import AisSource, CelestrakSource, EntitySource, FlightFeedSource
from pygeotrack.ingestion.synthetic import SyntheticGenerator

__all__ = [
    "AisSource",
    "CategoryPlan",
    "CelestrakSource",
    "EntitySource",
    "FlightFeedSource",
    "SourceCategory",
    "SyntheticGenerator",
    "build_default_plans",
]
