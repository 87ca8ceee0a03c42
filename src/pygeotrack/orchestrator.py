"""Pipeline orchestrator.

Wires store updates to the analytics and publishes the result: one ``batch``
message per update carrying only the non-empty parts among entities,
anomalies and clusters. Filters apply to entities only; anomalies and
clusters always go out in full.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import Any

from pygeotrack._transport import Transport
from pygeotrack.analytics import AnomalyDetector, ClusterEngine
from pygeotrack.broadcast import SubscriberRegistry
from pygeotrack.config import GeoTrackConfig
from pygeotrack.exceptions import MalformedControlMessageError
from pygeotrack.filters import apply_filter
from pygeotrack.ingestion import build_default_plans
from pygeotrack.models import (
    BatchMessage,
    Entity,
    EntityDetailMessage,
    FilterControl,
    FilterCriteria,
    GetEntityControl,
    OutboundMessage,
    PauseControl,
    ResumeControl,
    SnapshotData,
    SnapshotMessage,
    parse_control_message,
)
from pygeotrack.state import EntityStore, UpdateBatch, UpdateOrigin

_logger = logging.getLogger(__name__)


class Orchestrator:
    """Owns the active filter and the pause flag; publishes through a registry.

    Parameters
    ----------
    store : EntityStore
        Entity source of truth. The orchestrator subscribes on construction.
    detector : AnomalyDetector, optional
    clusters : ClusterEngine, optional
    registry : SubscriberRegistry, optional
        Outbound fan-out. A private registry is created when omitted.
    resync_on_resume : bool
        Publish a full snapshot on :meth:`resume`. Otherwise subscribers
        catch up with the next incremental batch.
    """

    def __init__(
        self,
        store: EntityStore,
        detector: AnomalyDetector | None = None,
        clusters: ClusterEngine | None = None,
        *,
        registry: SubscriberRegistry | None = None,
        resync_on_resume: bool = False,
    ) -> None:
        self._store = store
        self._detector = detector or AnomalyDetector()
        self._clusters = clusters or ClusterEngine()
        self._registry = registry or SubscriberRegistry()
        self._resync_on_resume = resync_on_resume
        self._filters = FilterCriteria()
        self._paused = False
        self._unsubscribe = store.subscribe(self._on_update)

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    @property
    def filters(self) -> FilterCriteria:
        return self._filters

    @property
    def paused(self) -> bool:
        return self._paused

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> SnapshotMessage:
        """Bootstrap the store, run one analytics pass and return the snapshot."""
        entities = await self._store.bootstrap()
        self._detector.analyze(entities, entities)
        self._clusters.compute(entities)
        snapshot = self.get_snapshot()
        _logger.info(
            "Initialized with %d entities, %d anomalies, %d clusters",
            len(entities),
            len(snapshot.data.anomalies),
            len(snapshot.data.clusters),
        )
        return snapshot

    def start(self) -> None:
        self._store.start_ticking()

    async def stop(self) -> None:
        await self._store.stop()

    def close(self) -> None:
        """Detach from the store; no further updates are published."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def pause(self) -> None:
        """Stop publishing. The store keeps ticking and analytics are skipped."""
        self._paused = True
        _logger.debug("Publication paused")

    def resume(self) -> None:
        self._paused = False
        _logger.debug("Publication resumed")
        if self._resync_on_resume:
            self._publish(self.get_snapshot())

    def set_filters(self, criteria: FilterCriteria) -> SnapshotMessage:
        """Replace the active filter and publish a full filtered snapshot."""
        self._filters = criteria
        snapshot = self.get_snapshot()
        self._publish(snapshot)
        return snapshot

    def get_snapshot(self) -> SnapshotMessage:
        return SnapshotMessage(
            data=SnapshotData(
                entities=tuple(apply_filter(self._store.get_all(), self._filters)),
                anomalies=tuple(self._detector.anomalies),
                clusters=tuple(self._clusters.clusters),
            )
        )

    def get_entity(self, entity_id: str) -> Entity | None:
        return self._store.get_by_id(entity_id)

    def handle_control(self, raw: str | bytes | Mapping[str, Any]) -> EntityDetailMessage | None:
        """Apply one inbound control message.

        Returns the ``entity_detail`` reply for ``get_entity`` (``data`` is
        ``None`` on a miss) and ``None`` for everything else. Malformed input
        is logged and ignored.
        """
        try:
            message = parse_control_message(raw)
        except MalformedControlMessageError as exc:
            _logger.warning("Dropping malformed control message: %s", exc)
            return None

        if isinstance(message, FilterControl):
            self.set_filters(message.data)
        elif isinstance(message, PauseControl):
            self.pause()
        elif isinstance(message, ResumeControl):
            self.resume()
        elif isinstance(message, GetEntityControl):
            return EntityDetailMessage(data=self.get_entity(message.id))
        return None

    # ------------------------------------------------------------------
    # Update handling
    # ------------------------------------------------------------------

    def _publish(self, message: OutboundMessage) -> None:
        self._registry.publish(message)

    def _on_update(self, batch: UpdateBatch) -> None:
        # initialize() runs the first analytics pass itself
        if batch.origin is UpdateOrigin.BOOTSTRAP or self._paused:
            return

        all_entities = self._store.get_all()
        anomalies = self._detector.analyze(batch.entities, all_entities)
        clusters = self._clusters.compute(all_entities)
        entities = apply_filter(batch.entities, self._filters)

        message = BatchMessage.compose(entities=entities, anomalies=anomalies, clusters=clusters)
        if message.data.is_empty:
            return
        self._publish(message)


def build_orchestrator(
    config: GeoTrackConfig,
    transport: Transport | None,
    *,
    rng: random.Random | None = None,
) -> Orchestrator:
    """Assemble the default pipeline: store, detector, cluster engine and registry.

    With ``transport=None`` every category is served by its synthetic
    generators.
    """
    store = EntityStore(config, plans=build_default_plans(config, transport), rng=rng)
    detector = AnomalyDetector(history_size=config.history_size, log_size=config.anomaly_log_size)
    return Orchestrator(
        store,
        detector,
        ClusterEngine(),
        registry=SubscriberRegistry(config.subscriber_queue_size),
        resync_on_resume=config.resync_on_resume,
    )
