"""Rule-based anomaly detection.

Per-entity rules compare the two most recent observations of an entity:

* speed-change: speed ratio outside ``[1/1.8, 1.8]`` (previous speed > 0)
* altitude-anomaly: altitude ratio below 0.4 (previous altitude > 100 m)
* route-deviation: heading change above 45 degrees (not for ground vehicles)
* stationary: came to a stop from above 10 km/h (not for point events)

The proximity scan then pairs every moving entity of the update batch with
same-type entities of the full set closer than 50 km.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict, deque
from collections.abc import Callable, Iterable, Sequence

from pygeotrack._constants import (
    ALTITUDE_DROP_RATIO,
    ALTITUDE_MIN_METERS,
    ANOMALY_LOG_SIZE,
    HEADING_CHANGE_DEGREES,
    HISTORY_SIZE,
    PROXIMITY_ALERT_LIMIT,
    PROXIMITY_CRITICAL_KM,
    PROXIMITY_THRESHOLD_KM,
    SPEED_CHANGE_RATIO,
    STATIONARY_PREVIOUS_SPEED_KMH,
    STATIONARY_SPEED_KMH,
)
from pygeotrack.geo import KM_PER_DEGREE_LAT, haversine_km, heading_delta, midpoint
from pygeotrack.models import Anomaly, AnomalyKind, Entity, EntityType, Severity, now_ms

_logger = logging.getLogger(__name__)


class AnomalySequence:
    """Monotonic anomaly id generator (``anomaly-1``, ``anomaly-2``, ...)."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"anomaly-{next(self._counter)}"


class AnomalyDetector:
    """Keeps per-entity history and a bounded log of detected anomalies.

    Parameters
    ----------
    sequence : AnomalySequence, optional
        Id source. Share one instance to keep ids unique across detectors.
    history_size : int
        Observations kept per entity.
    log_size : int
        Anomalies kept in :attr:`anomalies`; oldest are dropped first.
    clock : callable, optional
        Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        sequence: AnomalySequence | None = None,
        *,
        history_size: int = HISTORY_SIZE,
        log_size: int = ANOMALY_LOG_SIZE,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._sequence = sequence or AnomalySequence()
        self._history_size = history_size
        self._history: dict[str, deque[Entity]] = {}
        self._log: deque[Anomaly] = deque(maxlen=log_size)
        self._clock = clock

    @property
    def anomalies(self) -> list[Anomaly]:
        """The anomaly log, oldest first."""
        return list(self._log)

    def history(self, entity_id: str) -> list[Entity]:
        """Recorded observations of *entity_id*, oldest first."""
        return list(self._history.get(entity_id, ()))

    def analyze(self, updated: Sequence[Entity], all_entities: Iterable[Entity]) -> list[Anomaly]:
        """Record *updated* and return the anomalies it raises.

        New anomalies are appended to the log before returning.
        """
        found: list[Anomaly] = []
        for entity in updated:
            history = self._history.get(entity.id)
            if history is None:
                history = deque(maxlen=self._history_size)
                self._history[entity.id] = history
            history.append(entity)
            if len(history) >= 2:
                found.extend(self._check_rules(history[-2], entity))

        found.extend(self._check_proximity(updated, all_entities))

        self._log.extend(found)
        if found:
            _logger.debug("Detected %d anomalies over %d updates", len(found), len(updated))
        return found

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _anomaly(self, entity: Entity, kind: AnomalyKind, severity: Severity, message: str) -> Anomaly:
        return Anomaly(
            id=self._sequence.next_id(),
            entity_id=entity.id,
            kind=kind,
            severity=severity,
            message=message,
            timestamp=self._clock(),
            lat=entity.lat,
            lng=entity.lng,
        )

    def _check_rules(self, previous: Entity, current: Entity) -> list[Anomaly]:
        found: list[Anomaly] = []

        if previous.speed > 0:
            ratio = current.speed / previous.speed
            if ratio > SPEED_CHANGE_RATIO or ratio < 1 / SPEED_CHANGE_RATIO:
                found.append(
                    self._anomaly(
                        current,
                        AnomalyKind.SPEED_CHANGE,
                        Severity.HIGH if ratio > 1 else Severity.MEDIUM,
                        f"Speed changed from {previous.speed:.0f} to {current.speed:.0f} km/h",
                    )
                )

        if previous.altitude > ALTITUDE_MIN_METERS and current.altitude / previous.altitude < ALTITUDE_DROP_RATIO:
            found.append(
                self._anomaly(
                    current,
                    AnomalyKind.ALTITUDE_ANOMALY,
                    Severity.CRITICAL,
                    f"Altitude dropped from {previous.altitude:.0f}m to {current.altitude:.0f}m",
                )
            )

        turn = heading_delta(previous.heading, current.heading)
        if turn > HEADING_CHANGE_DEGREES and current.type is not EntityType.GROUND_VEHICLE:
            found.append(
                self._anomaly(
                    current,
                    AnomalyKind.ROUTE_DEVIATION,
                    Severity.MEDIUM,
                    f"Heading changed by {turn:.0f} degrees",
                )
            )

        if (
            current.type is not EntityType.POINT_EVENT
            and current.speed < STATIONARY_SPEED_KMH
            and previous.speed > STATIONARY_PREVIOUS_SPEED_KMH
        ):
            found.append(
                self._anomaly(
                    current,
                    AnomalyKind.STATIONARY,
                    Severity.LOW,
                    f"Entity stopped moving (was {previous.speed:.0f} km/h)",
                )
            )

        return found

    def _check_proximity(self, updated: Sequence[Entity], all_entities: Iterable[Entity]) -> list[Anomaly]:
        by_type: dict[EntityType, list[Entity]] = defaultdict(list)
        for entity in all_entities:
            if entity.type is not EntityType.POINT_EVENT:
                by_type[entity.type].append(entity)

        # Any pair closer than the threshold is also closer in latitude alone.
        max_dlat = PROXIMITY_THRESHOLD_KM / KM_PER_DEGREE_LAT
        alerts: list[Anomaly] = []
        for entity in updated:
            if entity.type is EntityType.POINT_EVENT or entity.speed <= 0:
                continue
            for other in by_type.get(entity.type, ()):
                # one alert per pair: only the smaller id reports
                if entity.id >= other.id or abs(entity.lat - other.lat) > max_dlat:
                    continue
                distance = haversine_km(entity.lat, entity.lng, other.lat, other.lng)
                if not 0 < distance < PROXIMITY_THRESHOLD_KM:
                    continue
                lat, lng = midpoint(entity.lat, entity.lng, other.lat, other.lng)
                alerts.append(
                    Anomaly(
                        id=self._sequence.next_id(),
                        entity_id=entity.id,
                        kind=AnomalyKind.PROXIMITY_ALERT,
                        severity=Severity.CRITICAL if distance < PROXIMITY_CRITICAL_KM else Severity.HIGH,
                        message=f"{entity.label} within {distance:.1f}km of {other.label}",
                        timestamp=self._clock(),
                        lat=lat,
                        lng=lng,
                    )
                )
                if len(alerts) >= PROXIMITY_ALERT_LIMIT:
                    return alerts
        return alerts
