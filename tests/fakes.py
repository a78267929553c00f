"""Fakes for testing.

FakeClock and FakeHttpClient are in-memory stand-ins for time.time and the
outbound HTTP boundary. They record what happened so tests can assert on it.
"""

import json
from typing import Any, Dict, List, Optional, Union

from errors import TransportError
from http_client import HttpClient, HttpResult

START_TIME = 1_700_000_000.0


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, hours: float = 0, seconds: float = 0) -> None:
        self.now += hours * 3600 + seconds


def json_result(body: Any, status_code: int = 200) -> HttpResult:
    return HttpResult(status_code, json.dumps(body))


class FakeHttpClient(HttpClient):
    """
    Records every request and answers from a queue of responses.

    Queue entries are HttpResult instances or exceptions to raise. When the
    queue is empty the default response is returned.
    """

    def __init__(self, default: Optional[Union[HttpResult, Exception]] = None) -> None:
        super().__init__()
        self._responses: List[Union[HttpResult, Exception]] = []
        self._default = default if default is not None else HttpResult(200, "{}")
        self.requests: List[Dict[str, Any]] = []

    def queue(self, *responses: Union[HttpResult, Exception]) -> None:
        self._responses.extend(responses)

    def requests_to(self, suffix: str) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["url"].endswith(suffix)]

    def _respond(self, url: str) -> HttpResult:
        response = self._responses.pop(0) if self._responses else self._default
        if isinstance(response, Exception):
            raise response
        return HttpResult(response.status_code, response.text, url)

    def post(self, url, data, timeout, headers=None) -> HttpResult:
        self.requests.append({"method": "POST", "url": url, "data": dict(data), "timeout": timeout, "headers": dict(headers or {})})
        return self._respond(url)

    def get(self, url, timeout, headers=None) -> HttpResult:
        self.requests.append({"method": "GET", "url": url, "data": None, "timeout": timeout, "headers": dict(headers or {})})
        return self._respond(url)


def transport_error(message: str = "Connection refused") -> TransportError:
    return TransportError(message)
