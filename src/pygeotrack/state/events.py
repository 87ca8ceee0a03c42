"""Store update events.

Every mutation of the entity store (bootstrap, a simulation tick, a live
resync) is announced to subscribers as one :class:`UpdateBatch`.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pygeotrack.models import Entity, now_ms


class UpdateOrigin(StrEnum):
    BOOTSTRAP = "bootstrap"
    SIMULATION = "simulation"
    RESYNC = "resync"


class UpdateBatch(BaseModel):
    """Entities replaced in the store by one tick."""

    model_config = ConfigDict(frozen=True)

    origin: UpdateOrigin
    entities: tuple[Entity, ...] = ()
    emitted_at: int = Field(default_factory=now_ms, description="Epoch milliseconds")

    def __len__(self) -> int:
        return len(self.entities)
