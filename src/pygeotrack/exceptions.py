"""Custom exception hierarchy for pygeotrack."""

from __future__ import annotations


class GeoTrackError(Exception):
    """Base exception for all pygeotrack errors."""


class GeoTrackConfigError(GeoTrackError):
    """Invalid configuration value."""


class SourceUnavailableError(GeoTrackError):
    """A live source could not be reached (network error, timeout, non-200).

    Never fatal: the store logs it and lets the synthetic fallback cover the
    category for this cycle.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        status_code: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(message)


class SourceFormatError(SourceUnavailableError):
    """A live source answered with a payload shape we do not understand.

    Handled exactly like :class:`SourceUnavailableError`.
    """


class MalformedControlMessageError(GeoTrackError):
    """An inbound control message failed to parse or validate."""

    def __init__(self, message: str, *, raw: object = None) -> None:
        self.raw = raw
        super().__init__(message)
