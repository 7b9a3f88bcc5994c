"""HTTP transport for the basebase REST API.

All calls go through httpx.AsyncClient so they do not block the event loop.
Non-2xx responses become typed BasebaseException subclasses; nothing is
retried here.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from basebase.core.constants import DEFAULT_TIMEOUT_SECONDS
from basebase.domain.exceptions import NetworkError, UnavailableError, error_for_status

logger = logging.getLogger(__name__)

JsonBody = dict[str, Any] | list[Any]

_METHODS = frozenset({"GET", "POST", "PATCH", "PUT", "DELETE"})


def _error_message(resp: httpx.Response) -> str:
    """Best-effort message from an error response body.

    Understands the Google-style ``{"error": {"message": ...}}`` envelope as
    well as flat ``{"error": "..."}`` / ``{"message": "..."}`` bodies.
    """
    message = f"HTTP {resp.status_code}: {resp.reason_phrase}"
    try:
        data = resp.json()
    except ValueError:
        return message
    if not isinstance(data, dict):
        return message
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        message = str(error["message"])
    elif isinstance(error, str) and error:
        message = error
    if isinstance(data.get("message"), str) and data["message"]:
        message = data["message"]
    return message


def _parse_body(resp: httpx.Response) -> JsonBody:
    """Parsed JSON body; empty or non-JSON bodies resolve to an empty dict."""
    content_type = resp.headers.get("content-type", "")
    raw = resp.content
    if not raw or "json" not in content_type:
        return {}
    try:
        return json.loads(raw.decode())
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.debug("Ignoring malformed JSON body from %s", resp.request.url)
        return {}


class HttpTransport:
    """JSON-over-HTTP request helper bound to one httpx.AsyncClient."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._timeout = timeout_seconds
        self._http = (
            http_client if http_client is not None else httpx.AsyncClient(timeout=timeout_seconds)
        )
        self._owns_http = http_client is None

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def request(
        self,
        url: str,
        method: str = "GET",
        *,
        headers: dict[str, str] | None = None,
        body: Any = None,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> JsonBody:
        """Perform one request and return the parsed JSON body.

        Args:
            url: Absolute URL.
            method: GET, POST, PATCH, PUT or DELETE.
            headers: Extra headers (e.g. Authorization); Content-Type is set.
            body: JSON-serializable body, ignored for GET.
            params: Query parameters; a list of pairs allows repeated keys.
            timeout: Per-request timeout in seconds (defaults to the transport's).

        Returns:
            Parsed JSON (dict or list), or {} for empty / non-JSON bodies.

        Raises:
            BasebaseException: Mapped from the HTTP status for non-2xx responses.
            UnavailableError: On timeout.
            NetworkError: On any other transport failure.
        """
        method = method.upper()
        if method not in _METHODS:
            raise ValueError(f"Unsupported method: {method!r}")
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)
        kwargs: dict[str, Any] = {
            "headers": request_headers,
            "params": params,
            "timeout": timeout if timeout is not None else self._timeout,
        }
        if body is not None and method != "GET":
            kwargs["json"] = body
        logger.debug("%s %s", method, url)
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise UnavailableError("Request timeout") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}") from e
        if not resp.is_success:
            message = _error_message(resp)
            logger.debug("%s %s -> %s: %s", method, url, resp.status_code, message)
            raise error_for_status(resp.status_code, message)
        return _parse_body(resp)
