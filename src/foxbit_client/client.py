from __future__ import annotations

import logging
from typing import Any

import requests
from requests.exceptions import RequestException, Timeout

from .errors import ExchangeAuthError, ExchangeDecodeError, ExchangeHTTPError, ExchangeNetworkError
from .request import HttpMethod

logger = logging.getLogger(__name__)

_BODY_SNIPPET = 300


class ExchangeClient:
    """Minimal exchange API client with clean errors.

    Owns the HTTP session and base URL. One call is one HTTP round trip: there is no retry,
    a transport failure, an error status and an undecodable body all end the call.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _error_message(self, response: requests.Response) -> str:
        msg = (response.text or "").strip()
        return msg[:_BODY_SNIPPET] if msg else "Unknown error"

    def _send(
        self,
        method: HttpMethod,
        path: str,
        *,
        query: str = "",
        payload: str = "",
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Dispatch one request and return the decoded JSON body.

        ``query`` is appended to the URL verbatim and ``payload`` is sent as raw bytes, so
        the request carries the exact strings that were signed.
        """
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{query}"
        req_headers = dict(headers or {})

        logger.debug("%s %s", method.value, path)
        try:
            if method is HttpMethod.GET:
                response = self.session.get(url, headers=req_headers, timeout=self.timeout)
            else:
                req_headers["Content-Type"] = "application/json"
                send = self.session.post if method is HttpMethod.POST else self.session.put
                response = send(url, data=payload.encode("utf-8"), headers=req_headers, timeout=self.timeout)
        except Timeout as e:
            logger.error("%s %s timed out", method.value, path)
            raise ExchangeNetworkError(f"Timeout calling {url}", cause=e) from e
        except RequestException as e:
            logger.error("%s %s network error: %s", method.value, path, e)
            raise ExchangeNetworkError(f"Network error calling {url}: {e}", cause=e) from e

        if response.status_code in (401, 403):
            logger.error("%s %s auth error: HTTP %d", method.value, path, response.status_code)
            raise ExchangeAuthError(
                status_code=response.status_code,
                message=self._error_message(response),
                method=method.value,
                path=path,
                body=(response.text or "")[:_BODY_SNIPPET],
            )

        if not 200 <= response.status_code < 300:
            logger.error("%s %s HTTP %d", method.value, path, response.status_code)
            raise ExchangeHTTPError(
                status_code=response.status_code,
                message=self._error_message(response),
                method=method.value,
                path=path,
                body=(response.text or "")[:_BODY_SNIPPET],
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error("%s %s returned invalid JSON", method.value, path)
            raise ExchangeDecodeError(
                f"Invalid JSON in response to {method.value} {path}",
                body=(response.text or "")[:_BODY_SNIPPET],
                cause=e,
            ) from e

    def _unwrap_data(self, payload: Any, path: str) -> list[Any]:
        """Return the list inside a ``{"data": [...]}`` envelope."""
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise ExchangeDecodeError(
                f"Unexpected JSON shape from {path} (expected {{\"data\": [...]}})",
                body=str(payload)[:_BODY_SNIPPET],
            )
        return payload["data"]
