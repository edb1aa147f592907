"""Pluggable request function and the default aiohttp binding."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pyhotaru import _serialization
from pyhotaru._constants import DEFAULT_REQUEST_TIMEOUT, SERVER_ERROR_MIN_CODE
from pyhotaru.exceptions import HotaruRequestError, HotaruServerError, HotaruTransportError

_logger = logging.getLogger(__name__)


class RequestFunction(Protocol):
    """Structural transport interface used by the engine.

    Any ``async (url, params) -> result`` callable fits, which keeps test
    doubles trivial. Timeouts and cancellation are the request function's
    business; the engine applies none of its own.
    """

    async def __call__(self, url: str, params: dict[str, Any]) -> Any:
        ...


def _raise_for_status(url: str, data: dict[str, Any]) -> None:
    status = data.get("status")
    if status == "ok":
        return
    code = data.get("code")
    message = str(data.get("message") or f"request failed with status {status!r}")
    if isinstance(code, (int, float)) and not isinstance(code, bool) and code >= SERVER_ERROR_MIN_CODE:
        raise HotaruServerError(
            f"Server error {code} from {url}: {message}",
            code=int(code),
            endpoint=url,
        )
    raise HotaruRequestError(message, code=code, endpoint=url)


class HttpRequestFunction:
    """POST ``{"payloadString": <date-aware JSON>}`` and unwrap the reply.

    The reply is expected to be JSON carrying its own ``payloadString``,
    which decodes to ``{"status": "ok", "result": ...}`` on success.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession | None = None,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._http = http_session
        self._owns_session = http_session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _session(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._http

    async def close(self) -> None:
        """Close the HTTP session if this object created it."""
        if self._owns_session and self._http is not None:
            await self._http.close()
        self._http = None

    async def __call__(self, url: str, params: dict[str, Any]) -> Any:
        body = {"payloadString": _serialization.dumps(params)}
        _logger.debug("POST %s", url)

        try:
            async with self._session().post(url, json=body, timeout=self._timeout) as resp:
                text = await resp.text()
                status = resp.status
                if not 200 <= status < 300:
                    raise HotaruTransportError(
                        f"HTTP {status} from {url}: {text[:200]}",
                        status_code=status,
                        url=url,
                    )
        except HotaruTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise HotaruTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            envelope = json.loads(text)
            payload_string = envelope["payloadString"]
            data = _serialization.loads(payload_string)
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            raise HotaruTransportError(
                f"Invalid response from {url}: {text[:200]}",
                status_code=status,
                url=url,
            ) from exc

        if not isinstance(data, dict):
            raise HotaruTransportError(f"Response payload from {url} is not an object", status_code=status, url=url)

        _raise_for_status(url, data)
        return data.get("result")
