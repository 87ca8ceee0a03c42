"""Canonical entity store.

This is the only component allowed to mutate entity state. Live fetches run
concurrently outside the lock; their results are merged, and subscribers are
notified, while the lock is held, so every tick is applied atomically.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from collections.abc import Awaitable, Callable, Sequence

from pygeotrack.config import GeoTrackConfig
from pygeotrack.exceptions import SourceUnavailableError
from pygeotrack.ingestion.plans import CategoryPlan, SourceCategory
from pygeotrack.ingestion.sources import EntitySource
from pygeotrack.models import Entity, now_ms
from pygeotrack.state.events import UpdateBatch, UpdateOrigin
from pygeotrack.state.policy import admit, should_simulate
from pygeotrack.state.simulation import move_entity

_logger = logging.getLogger(__name__)

UpdateCallback = Callable[[UpdateBatch], None]


class EntityStore:
    """In-memory id -> entity map fed by category plans.

    Parameters
    ----------
    config : GeoTrackConfig, optional
        Tick intervals, sampling fraction and anomaly probability.
    plans : sequence of CategoryPlan
        Categories to populate, in bootstrap order.
    rng : random.Random, optional
        Randomness for sampling, simulation and synthetic generators. Pass a
        seeded instance for reproducible runs.
    clock : callable, optional
        Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        config: GeoTrackConfig | None = None,
        *,
        plans: Sequence[CategoryPlan] = (),
        rng: random.Random | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._config = config or GeoTrackConfig()
        self._plans = tuple(plans)
        self._rng = rng or random.Random(self._config.seed)
        self._clock = clock
        self._entities: dict[str, Entity] = {}
        self._live_capable: dict[SourceCategory, bool] = {}
        self._degraded: set[SourceCategory] = set()
        self._subscribers: list[UpdateCallback] = []
        self._lock = asyncio.Lock()
        self._simulation_task: asyncio.Task[None] | None = None
        self._resync_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_all(self) -> list[Entity]:
        return list(self._entities.values())

    def get_by_id(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def __len__(self) -> int:
        return len(self._entities)

    @property
    def live_capable(self) -> dict[SourceCategory, bool]:
        """Sticky per-category flags: set once a live source delivered data."""
        return dict(self._live_capable)

    @property
    def degraded_categories(self) -> frozenset[SourceCategory]:
        """Categories whose live sources all came back empty at bootstrap."""
        return frozenset(self._degraded)

    @property
    def running(self) -> bool:
        return self._simulation_task is not None and not self._simulation_task.done()

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, callback: UpdateCallback) -> Callable[[], None]:
        """Register *callback* for every update batch; returns an unsubscribe callable.

        Callbacks run synchronously while the store lock is held and must not
        block.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _dispatch(self, batch: UpdateBatch) -> None:
        for callback in list(self._subscribers):
            try:
                callback(batch)
            except Exception:
                _logger.warning("Update subscriber failed for %s batch", batch.origin, exc_info=True)

    # ------------------------------------------------------------------
    # Live fetching
    # ------------------------------------------------------------------

    async def _fetch_source(self, source: EntitySource) -> list[Entity]:
        try:
            async with asyncio.timeout(source.timeout):
                return await source.fetch()
        except TimeoutError:
            _logger.warning("Source %s timed out after %.1fs", source.name, source.timeout)
        except SourceUnavailableError as exc:
            _logger.warning("Source %s unavailable: %s", source.name, exc)
        except Exception:
            _logger.warning("Source %s failed", source.name, exc_info=True)
        return []

    async def _fetch_category(self, plan: CategoryPlan) -> list[Entity]:
        for source in plan.sources:
            entities = await self._fetch_source(source)
            if entities:
                _logger.debug("Got %d %s from %s", len(entities), plan.category, source.name)
                return entities
        return []

    def _merge(self, entities: Sequence[Entity]) -> list[Entity]:
        merged: list[Entity] = []
        for entity in entities:
            admitted = admit(entity)
            self._entities[admitted.id] = admitted
            merged.append(admitted)
        return merged

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def bootstrap(self) -> list[Entity]:
        """Populate every category from its live sources or synthetic fallbacks.

        Source failures never propagate; a category whose live sources all
        fail is filled by its fallback generator (if any) and reported in
        :attr:`degraded_categories`.

        Returns
        -------
        list of Entity
            The full store contents after bootstrap.
        """
        live_results = await asyncio.gather(*(self._fetch_category(plan) for plan in self._plans))

        async with self._lock:
            now = self._clock()
            counts: dict[str, int] = {}
            for plan, live in zip(self._plans, live_results, strict=True):
                entities = list(live)
                if live:
                    self._live_capable[plan.category] = True
                    self._degraded.discard(plan.category)
                    missing = plan.top_up_to - len(live)
                    if missing > 0 and plan.fallback is not None:
                        entities.extend(plan.fallback(missing, self._rng, now))
                else:
                    if plan.has_live_sources:
                        self._degraded.add(plan.category)
                        _logger.warning("All live sources failed for %s; running degraded", plan.category)
                    if plan.fallback is not None:
                        entities = plan.fallback(plan.fallback_count, self._rng, now)
                for generator, count in plan.extras:
                    entities.extend(generator(count, self._rng, now))
                counts[plan.category.value] = len(self._merge(entities))

            _logger.info(
                "Bootstrap complete: %d entities (%s)",
                len(self._entities),
                ", ".join(f"{name}={count}" for name, count in counts.items()),
            )
            snapshot = tuple(self._entities.values())
            self._dispatch(UpdateBatch(origin=UpdateOrigin.BOOTSTRAP, entities=snapshot, emitted_at=now))
            return list(snapshot)

    async def simulate_tick(self) -> UpdateBatch:
        """Advance a random sample of the store by one step."""
        async with self._lock:
            now = self._clock()
            ids = list(self._entities)
            sample_size = math.floor(len(ids) * self._config.sample_fraction)
            updated: list[Entity] = []
            for entity_id in self._rng.sample(ids, sample_size):
                entity = self._entities[entity_id]
                if not should_simulate(entity, self._rng):
                    continue
                moved = move_entity(
                    entity,
                    self._rng,
                    dt_seconds=self._config.sim_interval,
                    anomaly_probability=self._config.anomaly_probability,
                    now_ms=now,
                )
                updated.extend(self._merge([moved]))

            batch = UpdateBatch(origin=UpdateOrigin.SIMULATION, entities=tuple(updated), emitted_at=now)
            _logger.debug("Simulation tick moved %d of %d entities", len(updated), len(ids))
            self._dispatch(batch)
            return batch

    async def resync(self) -> UpdateBatch | None:
        """Re-fetch live-capable categories and overwrite their entities by id.

        Categories that never delivered live data are not re-attempted.
        Returns ``None`` when nothing was fetched.
        """
        plans = [plan for plan in self._plans if self._live_capable.get(plan.category)]
        if not plans:
            return None
        results = await asyncio.gather(*(self._fetch_category(plan) for plan in plans))

        async with self._lock:
            merged: list[Entity] = []
            for live in results:
                merged.extend(self._merge(live))
            if not merged:
                _logger.debug("Resync returned no entities")
                return None
            batch = UpdateBatch(origin=UpdateOrigin.RESYNC, entities=tuple(merged), emitted_at=self._clock())
            _logger.debug("Resync refreshed %d entities", len(merged))
            self._dispatch(batch)
            return batch

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_ticking(self, sim_interval: float | None = None, resync_interval: float | None = None) -> None:
        """Start the simulation and resync loops. No-op when already running."""
        if self.running:
            return
        sim_interval = sim_interval if sim_interval is not None else self._config.sim_interval
        resync_interval = resync_interval if resync_interval is not None else self._config.resync_interval
        self._simulation_task = asyncio.create_task(
            self._run_loop(self.simulate_tick, sim_interval, "simulation"), name="pygeotrack-simulation"
        )
        self._resync_task = asyncio.create_task(
            self._run_loop(self.resync, resync_interval, "resync"), name="pygeotrack-resync"
        )
        _logger.info("Ticking started (simulation every %.2fs, resync every %.1fs)", sim_interval, resync_interval)

    async def _run_loop(self, tick: Callable[[], Awaitable[object]], interval: float, label: str) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await tick()
            except Exception:
                _logger.warning("%s tick failed", label, exc_info=True)

    async def stop(self) -> None:
        """Cancel both loops and wait for them to finish. Safe to call repeatedly."""
        tasks = [task for task in (self._simulation_task, self._resync_task) if task is not None]
        self._simulation_task = None
        self._resync_task = None
        if not tasks:
            return
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        _logger.info("Ticking stopped")
