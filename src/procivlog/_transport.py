"""HTTP transport towards the spreadsheet sink."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from procivlog._constants import USER_AGENT
from procivlog._redact import redact_url
from procivlog.exceptions import ProcivTransportError

_logger = logging.getLogger(__name__)


class SinkTransport(Protocol):
    """Structural transport interface used by the sync dispatcher.

    Returning normally means the request was handed to the network without
    error. It does not mean the sink processed it.
    """

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> None:
        ...


class HttpSinkTransport:
    """Fire-and-forget JSON POST over aiohttp.

    Apps Script web apps answer with redirects and opaque bodies, so the
    response is neither read nor interpreted; only connection-level
    failures are reported.
    """

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> None:
        headers = {
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(payload, ensure_ascii=False)

        _logger.debug("POST %s", redact_url(url))

        try:
            async with self._http.post(url, data=body.encode("utf-8"), headers=headers) as resp:
                _logger.debug("Sink %s answered HTTP %s (ignored)", redact_url(url), resp.status)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ProcivTransportError(
                f"Delivery to {redact_url(url)} failed: {exc!r}",
                url=url,
            ) from exc
