"""HTTP transport used by the live source adapters."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pygeotrack._constants import USER_AGENT
from pygeotrack.exceptions import SourceFormatError, SourceUnavailableError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """What a source adapter needs from the network: one JSON GET, one text GET."""

    async def get_json(self, url: str, *, source: str = "", timeout: float | None = None) -> Any: ...

    async def get_text(self, url: str, *, source: str = "", timeout: float | None = None) -> str: ...


class HttpTransport:
    """Thin aiohttp wrapper mapping every failure to a source error.

    The response is read inside ``async with`` so that a cancelled fetch
    (the store's wall-clock timeout) releases the pooled connection.
    """

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def get_text(self, url: str, *, source: str = "", timeout: float | None = None) -> str:
        headers = {"accept": "application/json, text/plain", "user-agent": USER_AGENT}
        client_timeout = aiohttp.ClientTimeout(total=timeout) if timeout is not None else None

        _logger.debug("GET %s source=%s", url, source)

        try:
            async with self._http.get(url, headers=headers, timeout=client_timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise SourceUnavailableError(
                        f"HTTP {resp.status} from {source or url}: {text[:200]}",
                        source=source,
                        status_code=resp.status,
                    )
        except SourceUnavailableError:
            raise
        except aiohttp.ClientError as exc:
            raise SourceUnavailableError(
                f"Request to {source or url} failed: {exc}",
                source=source,
            ) from exc
        except UnicodeDecodeError as exc:
            raise SourceFormatError(
                f"Undecodable body from {source or url}: {exc}",
                source=source,
            ) from exc

        return text

    async def get_json(self, url: str, *, source: str = "", timeout: float | None = None) -> Any:
        text = await self.get_text(url, source=source, timeout=timeout)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceFormatError(
                f"Invalid JSON from {source or url}: {text[:200]}",
                source=source,
            ) from exc
