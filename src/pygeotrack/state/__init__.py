"""State layer.

The entity store is the single owner of entity state: it bootstraps from
live sources and synthetic generators, advances entities by simulation and
announces every change as an :class:`~pygeotrack.state.events.UpdateBatch`.
"""

from pygeotrack.state.events import UpdateBatch, UpdateOrigin
from pygeotrack.state.store import EntityStore

__all__ = ["EntityStore", "UpdateBatch", "UpdateOrigin"]
