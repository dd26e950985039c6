"""HTTP client abstraction for the hosting API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol, cast, runtime_checkable

from tagship import __version__
from tagship.core.result import Err, Ok, Result
from tagship.core.structured import as_str_dict

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network and local errors)
        message: Human-readable error message (API error body when available)
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Both calls expect a JSON object in the response body.
    """

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Result[dict[str, Any], HttpError]: ...

    def post_bytes(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[dict[str, Any], HttpError]: ...


def _error_detail(e: urllib.error.HTTPError) -> str:
    """Prefer the API's own error message over the bare reason phrase."""
    try:
        body = e.read().decode("utf-8", errors="replace")
    except OSError:
        return str(e.reason)

    try:
        obj: object = json.loads(body)
    except json.JSONDecodeError:
        return body.strip() or str(e.reason)

    data = as_str_dict(obj)
    if data is None:
        return str(e.reason)
    message = data.get("message")
    errors = data.get("errors")
    if isinstance(message, str) and errors:
        return f"{message}: {json.dumps(errors)}"
    if isinstance(message, str):
        return message
    return str(e.reason)


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON request and response bodies
    - Timeout handling
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = f"tagship/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _post(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str],
        timeout: float,
    ) -> Result[dict[str, Any], HttpError]:
        req = urllib.request.Request(
            url,
            data=data,
            method="POST",
            headers={"User-Agent": self.user_agent, **headers},
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_detail(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        try:
            obj: object = json.loads(raw.decode("utf-8")) if raw else {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
        parsed = as_str_dict(obj)
        if parsed is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object"))
        return Ok(cast(dict[str, Any], parsed))

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        body = json.dumps(payload).encode("utf-8")
        all_headers = {"Content-Type": "application/json", **(headers or {})}
        return self._post(url, body, all_headers, self.timeout)

    def post_bytes(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        all_headers = {"Content-Length": str(len(data)), **(headers or {})}
        return self._post(url, data, all_headers, timeout or self.timeout)


@dataclass(frozen=True, slots=True)
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    payload: dict[str, Any] | None = None
    body: bytes | None = None


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by URL prefix so upload URLs with a query string can be
    matched without knowing the asset name up front.

    Usage:
        client = MockHttpClient()
        client.set_response("https://api.github.com/repos/o/r/releases", {"id": 1})
        result = client.post_json("https://api.github.com/repos/o/r/releases", {})
    """

    def __init__(self) -> None:
        self._responses: dict[str, dict[str, Any] | HttpError] = {}
        self._lock = threading.Lock()
        self.calls: list[RecordedCall] = []

    def set_response(self, url_prefix: str, response: dict[str, Any] | HttpError) -> None:
        self._responses[url_prefix] = response

    def _lookup(self, url: str) -> Result[dict[str, Any], HttpError]:
        # Longest prefix wins.
        for prefix in sorted(self._responses, key=len, reverse=True):
            if url.startswith(prefix):
                response = self._responses[prefix]
                if isinstance(response, HttpError):
                    return Err(response)
                return Ok(response)
        return Err(HttpError(url=url, status=404, message="Not Found (mock)"))

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        with self._lock:
            self.calls.append(RecordedCall("post_json", url, dict(headers or {}), payload=payload))
        return self._lookup(url)

    def post_bytes(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        with self._lock:
            self.calls.append(RecordedCall("post_bytes", url, dict(headers or {}), body=data))
        return self._lookup(url)

    def calls_to(self, method: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.method == method]
