import json
from typing import Any, Dict, Optional

import httpx

from errors import MalformedResponseError, TransportError

DEFAULT_USER_AGENT = "theme-manager-client/1.0.0"


class HttpResult:
    """Status code and raw body of a completed request."""

    def __init__(self, status_code: int, text: str, url: str = ""):
        self.status_code = status_code
        self.text = text
        self.url = url

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise MalformedResponseError(f"Response from {self.url or 'server'} is not JSON: {e}") from e

    def __repr__(self) -> str:
        return f"HttpResult(status_code={self.status_code}, url={self.url!r})"


class HttpClient:
    """
    Outbound HTTP boundary.

    Each call opens a short-lived httpx client, so no connection state
    outlives a trigger. Every httpx failure, including an unparseable
    URL, surfaces as TransportError.
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None, user_agent: str = DEFAULT_USER_AGENT):
        self._transport = transport
        self._user_agent = user_agent

    def _headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged = {"User-Agent": self._user_agent}
        if headers:
            merged.update(headers)
        return merged

    def post(
        self,
        url: str,
        data: Dict[str, Any],
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResult:
        """POST a form-encoded body."""
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.post(url, data=data, headers=self._headers(headers))
                return HttpResult(response.status_code, response.text, url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"POST {url} failed: {e}") from e

    def get(
        self,
        url: str,
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResult:
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.get(url, headers=self._headers(headers))
                return HttpResult(response.status_code, response.text, url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"GET {url} failed: {e}") from e
