"""HTTP boundary: one request in, one JSON object out, one error channel."""

import logging
from typing import Any, Dict, Optional

import httpx

from tokenvault.common.config import TransportConfig
from tokenvault.common.errors import ProtocolError, ServerError, TransportError
from tokenvault.common.version import VersionGuard

logger = logging.getLogger(__name__)


def normalize_headers(headers) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def _error_message(response: httpx.Response) -> str:
    """
    Pull the server message out of an error response: {"error": ...}
    from a JSON body, otherwise the raw text.
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(data, dict) and "error" in data:
        return str(data["error"])
    if isinstance(data, str):
        return data
    return response.text


class TransportClient:
    """
    Thin wrapper around httpx.Client.

    When a VersionGuard is given, every response (success or error) is
    checked against it before its body is read.
    """

    def __init__(
        self,
        config: TransportConfig,
        http_client: Optional[httpx.Client] = None,
        version_guard: Optional[VersionGuard] = None,
    ):
        self.config = config
        self.version_guard = version_guard
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            headers=config.headers,
        )

    def url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = self.url(path)
        logger.debug("[HTTP] %s %s", method, url)

        try:
            response = self._http.request(method, url, json=body)
        except httpx.TransportError as e:
            logger.warning("[HTTP] %s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e

        headers = normalize_headers(response.headers)

        if self.version_guard is not None:
            self.version_guard.check_headers(headers)

        if not response.is_success:
            message = _error_message(response)
            logger.warning("[HTTP] %s %s -> %d: %s", method, url, response.status_code, message)
            raise ServerError(message, status_code=response.status_code)

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(f"{method} {url}: response is not JSON") from e
        if not isinstance(data, dict):
            raise ProtocolError(f"{method} {url}: expected a JSON object")
        return data

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("POST", path, body)

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "TransportClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
