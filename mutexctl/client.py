"""Mutex coordination service client."""

from typing import Optional
from urllib.parse import quote

import httpx

from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .exceptions import DecodeError
from .models import LockAnswer, Outcome, OutcomeKind

API_PREFIX = "/v1/mutex"


def _segment(value: str) -> str:
    return quote(value, safe="")


def _path(name: str, *parts: str) -> str:
    """Build a request path.

    Names and tokens are otherwise opaque, but each is percent-quoted as a
    single segment so a "/" or "?" inside one cannot change which endpoint
    is called: ``team/db`` is sent as ``team%2Fdb``.
    """
    return "/".join([API_PREFIX, _segment(name), *(_segment(part) for part in parts)])


def _decode_answer(body: str) -> Optional[LockAnswer]:
    try:
        return LockAnswer.from_body(body)
    except DecodeError:
        return None


def _to_outcome(response: httpx.Response, failure: OutcomeKind, decode: bool) -> Outcome:
    """Map one HTTP response onto an Outcome.

    Only 200 counts as success; any other status becomes ``failure``.
    """
    body = response.text
    if response.status_code != 200:
        return Outcome.failure(failure, body=body, status_code=response.status_code)
    answer = _decode_answer(body) if decode else None
    return Outcome.success(body, status_code=response.status_code, answer=answer)


class MutexClient:
    """Mutex coordination service client.

    Every method performs exactly one request and never raises for HTTP or
    network errors; they are reported through the returned Outcome.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport = None,
    ):
        """Initialize the client.

        Args:
            base_url: The base URL of the coordination service
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout, transport=transport)

    def _get(self, path: str, failure: OutcomeKind, decode: bool = False) -> Outcome:
        try:
            response = self.client.get(self.base_url + path)
        except httpx.RequestError as e:
            return Outcome.transport_failure(e)
        return _to_outcome(response, failure, decode)

    def acquire(self, name: str) -> Outcome:
        """Try once to lock the named mutex.

        Returns:
            SUCCESS with the decoded LockAnswer, or CONTENDED
        """
        return self._get(_path(name, "lock"), OutcomeKind.CONTENDED, decode=True)

    def inspect(self, name: str) -> Outcome:
        """Fetch the current state of the named mutex."""
        return self._get(_path(name), OutcomeKind.REJECTED)

    def renew(self, name: str, token: str) -> Outcome:
        """Extend a held lease.

        Returns:
            SUCCESS with the refreshed LockAnswer, or EXPIRED
        """
        return self._get(_path(name, "refresh", token), OutcomeKind.EXPIRED, decode=True)

    def release(self, name: str, token: str) -> Outcome:
        """Unlock a held lease."""
        return self._get(_path(name, "unlock", token), OutcomeKind.EXPIRED)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncMutexClient:
    """Async mutex coordination service client."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport = None,
    ):
        """Initialize the async client.

        Args:
            base_url: The base URL of the coordination service
            timeout: Per-request timeout in seconds
            transport: Optional httpx async transport, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _get(self, path: str, failure: OutcomeKind, decode: bool = False) -> Outcome:
        try:
            response = await self.client.get(self.base_url + path)
        except httpx.RequestError as e:
            return Outcome.transport_failure(e)
        return _to_outcome(response, failure, decode)

    async def acquire(self, name: str) -> Outcome:
        """Try once to lock the named mutex."""
        return await self._get(_path(name, "lock"), OutcomeKind.CONTENDED, decode=True)

    async def inspect(self, name: str) -> Outcome:
        """Fetch the current state of the named mutex."""
        return await self._get(_path(name), OutcomeKind.REJECTED)

    async def renew(self, name: str, token: str) -> Outcome:
        """Extend a held lease."""
        return await self._get(_path(name, "refresh", token), OutcomeKind.EXPIRED, decode=True)

    async def release(self, name: str, token: str) -> Outcome:
        """Unlock a held lease."""
        return await self._get(_path(name, "unlock", token), OutcomeKind.EXPIRED)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
