"""
Shared HTTP plumbing for the Book / Auth service clients.

Every call answers with a ``RemoteResult`` tagged OK / NOT_FOUND / FAILED.
Callers branch on the tag; "the entity is gone" and "the call did not work"
are never folded into one error channel.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests

logger = logging.getLogger(__name__)

HeadersProvider = Callable[[], Dict[str, str]]


class RemoteOutcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class RemoteResult:
    outcome: RemoteOutcome
    value: Any = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None, status_code: Optional[int] = 200) -> "RemoteResult":
        return cls(RemoteOutcome.OK, value=value, status_code=status_code)

    @classmethod
    def not_found(cls, error: Optional[str] = None) -> "RemoteResult":
        return cls(RemoteOutcome.NOT_FOUND, status_code=404, error=error)

    @classmethod
    def failed(cls, error: str, status_code: Optional[int] = None) -> "RemoteResult":
        return cls(RemoteOutcome.FAILED, status_code=status_code, error=error)

    @property
    def is_ok(self) -> bool:
        return self.outcome is RemoteOutcome.OK

    @property
    def is_not_found(self) -> bool:
        return self.outcome is RemoteOutcome.NOT_FOUND

    @property
    def is_failed(self) -> bool:
        return self.outcome is RemoteOutcome.FAILED


class ServiceClient:
    """Blocking JSON client with a bounded timeout per call."""

    service_name = "remote"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        headers_provider: Optional[HeadersProvider] = None,
    ):
        if timeout is None or timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers_provider = headers_provider
        self._local = threading.local()

    def _session(self) -> requests.Session:
        # requests.Session thread-safe degil; her worker thread kendi session'ini alir
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"Accept": "application/json", "User-Agent": "library-borrowing-service/1.0"})
            self._local.session = session
        return session

    def _headers(self) -> Dict[str, str]:
        if self.headers_provider is None:
            return {}
        return self.headers_provider() or {}

    def request(self, method: str, endpoint: str) -> RemoteResult:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self._session().request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error(f"[{self.service_name}] Request timeout: {method} {url}")
            return RemoteResult.failed(f"timeout after {self.timeout}s")
        except requests.RequestException as e:
            logger.error(f"[{self.service_name}] Request failed: {method} {url} - {e}")
            return RemoteResult.failed(str(e))

        if response.status_code == 404:
            logger.warning(f"[{self.service_name}] Resource not found: {method} {url}")
            return RemoteResult.not_found(response.text[:200] or None)

        if not 200 <= response.status_code < 300:
            logger.error(f"[{self.service_name}] API error {response.status_code}: {response.text[:200]}")
            return RemoteResult.failed(f"HTTP {response.status_code}", status_code=response.status_code)

        if not response.content or not response.content.strip():
            return RemoteResult.ok(None, status_code=response.status_code)

        try:
            return RemoteResult.ok(response.json(), status_code=response.status_code)
        except ValueError as e:
            logger.error(f"[{self.service_name}] Invalid JSON from {url}: {e}")
            return RemoteResult.failed(f"invalid JSON: {e}", status_code=response.status_code)

    def get(self, endpoint: str) -> RemoteResult:
        return self.request("GET", endpoint)

    def post(self, endpoint: str) -> RemoteResult:
        return self.request("POST", endpoint)
