"""Runtime configuration for pygeotrack."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pygeotrack.exceptions import GeoTrackConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class GeoTrackConfig:
    """Pipeline configuration.

    Parameters
    ----------
    sim_interval : float
        Seconds between simulation ticks.
    resync_interval : float
        Seconds between live-source resyncs.
    anomaly_probability : float
        Probability that a simulated step applies a large perturbation
        (speed surge, sharp turn or altitude drop).
    sample_fraction : float
        Fraction of the store advanced on every simulation tick.
    fetch_timeout : float
        Wall-clock timeout for a single flight feed fetch, in seconds.
    slow_fetch_timeout : float
        Wall-clock timeout for the slower feeds (TLE, AIS), in seconds.
    live_sources_enabled : bool
        When ``False`` no network source is configured and every category
        is filled by its synthetic generators.
    max_flights : int
        Upper bound on aircraft taken from one flight feed response.
    max_satellites : int
        Upper bound on TLE records propagated per fetch.
    max_ships : int
        Upper bound on AIS features taken per fetch.
    history_size : int
        Per-entity history ring buffer capacity.
    anomaly_log_size : int
        Capacity of the append-only anomaly log.
    subscriber_queue_size : int
        Outbound queue length per subscriber before drop-oldest kicks in.
    resync_on_resume : bool
        Publish a full snapshot when publication resumes after a pause.
    host : str
        Bind address for the HTTP/WebSocket server.
    port : int
        Bind port for the HTTP/WebSocket server.
    seed : int or None
        Seed for the simulation and synthetic generators. ``None`` draws
        from system entropy.
    """

    sim_interval: float = 1.5
    resync_interval: float = 30.0
    anomaly_probability: float = 0.05
    sample_fraction: float = 0.2
    fetch_timeout: float = 15.0
    slow_fetch_timeout: float = 20.0
    live_sources_enabled: bool = True
    max_flights: int = 3000
    max_satellites: int = 150
    max_ships: int = 500
    history_size: int = 10
    anomaly_log_size: int = 200
    subscriber_queue_size: int = 64
    resync_on_resume: bool = False
    host: str = "0.0.0.0"
    port: int = 8080
    seed: int | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise :class:`GeoTrackConfigError` on values the pipeline cannot run with."""
        for name in ("sim_interval", "resync_interval", "fetch_timeout", "slow_fetch_timeout"):
            if getattr(self, name) <= 0:
                raise GeoTrackConfigError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("anomaly_probability", "sample_fraction"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise GeoTrackConfigError(f"{name} must be within [0, 1], got {value}")
        for name in ("history_size", "anomaly_log_size", "subscriber_queue_size"):
            if getattr(self, name) < 2:
                raise GeoTrackConfigError(f"{name} must be at least 2, got {getattr(self, name)}")

    @classmethod
    def from_env(cls, **overrides: Any) -> GeoTrackConfig:
        """Create configuration from ``GEOTRACK_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        GeoTrackConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_FLOAT_MAP = {
            "GEOTRACK_SIM_INTERVAL": "sim_interval",
            "GEOTRACK_RESYNC_INTERVAL": "resync_interval",
            "GEOTRACK_ANOMALY_PROBABILITY": "anomaly_probability",
            "GEOTRACK_SAMPLE_FRACTION": "sample_fraction",
            "GEOTRACK_FETCH_TIMEOUT": "fetch_timeout",
            "GEOTRACK_SLOW_FETCH_TIMEOUT": "slow_fetch_timeout",
        }
        _ENV_INT_MAP = {
            "GEOTRACK_MAX_FLIGHTS": "max_flights",
            "GEOTRACK_MAX_SATELLITES": "max_satellites",
            "GEOTRACK_MAX_SHIPS": "max_ships",
            "GEOTRACK_SUBSCRIBER_QUEUE_SIZE": "subscriber_queue_size",
            "GEOTRACK_PORT": "port",
            "GEOTRACK_SEED": "seed",
        }

        config_kwargs: dict[str, Any] = {}
        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)
            for env_key, field_name in _ENV_INT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = int(val)
        except ValueError as exc:
            raise GeoTrackConfigError(f"Invalid numeric environment value: {exc}") from exc

        host_env = env.get("GEOTRACK_HOST")
        if host_env is not None and "host" not in overrides:
            config_kwargs["host"] = host_env

        if "live_sources_enabled" not in overrides:
            config_kwargs["live_sources_enabled"] = _env_bool(env.get("GEOTRACK_LIVE_SOURCES"), True)

        if "resync_on_resume" not in overrides:
            config_kwargs["resync_on_resume"] = _env_bool(env.get("GEOTRACK_RESYNC_ON_RESUME"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
