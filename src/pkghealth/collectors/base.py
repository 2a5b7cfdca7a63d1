"""
Abstract base class for data collectors.

Defines the interface that all per-package collectors implement, plus the
shared fan-out: one request per package, issued concurrently, each
isolated so a failure only affects its own package.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, Optional, TypeVar

import aiohttp

from pkghealth.config import DEFAULT_TIMEOUT
from pkghealth.core.exceptions import (
    NetworkError,
    PackageNotFoundError,
    PkgHealthError,
    RateLimitError,
)
from pkghealth.core.models import FetchOutcome
from pkghealth.core.validation import MAX_RESPONSE_SIZE, validate_response_size

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Collector(ABC, Generic[T]):
    """Abstract base class for data collectors.

    All collectors share session management, timeouts and error mapping.
    Specific collectors implement ``fetch`` for their data source.
    """

    # Maximum response size (10 MB) - can be overridden by subclasses
    MAX_RESPONSE_SIZE = MAX_RESPONSE_SIZE

    # Name used in error messages and logs
    SERVICE = "remote service"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
    ):
        """Initialize the collector.

        Args:
            session: Optional aiohttp session. If not provided, one will
                     be created when needed.
            timeout: Per-request timeout in seconds.
            user_agent: Optional User-Agent header value.
        """
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.user_agent = user_agent

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "Collector[T]":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @abstractmethod
    async def fetch(self, identifier: str) -> T:
        """Fetch data for the given package name.

        Args:
            identifier: The package name.

        Returns:
            The decoded data, specific to each collector type.

        Raises:
            PkgHealthError: If the fetch fails.
        """
        pass

    async def fetch_outcome(self, identifier: str) -> FetchOutcome[T]:
        """Fetch one package, turning any failure into an absent outcome.

        Cancellation is not a failure and propagates to the caller.
        """
        try:
            value = await self.fetch(identifier)
        except PkgHealthError as e:
            logger.warning("%s lookup failed for %s: %s", self.SERVICE, identifier, e)
            return FetchOutcome.absent(identifier, str(e))
        except Exception as e:
            logger.warning(
                "%s lookup failed unexpectedly for %s", self.SERVICE, identifier, exc_info=True
            )
            return FetchOutcome.absent(identifier, f"{type(e).__name__}: {e}")
        return FetchOutcome.success(identifier, value)

    async def fetch_many(self, identifiers: Iterable[str]) -> dict[str, FetchOutcome[T]]:
        """Fetch every distinct package concurrently and wait for all of them.

        Each fetch produces its own outcome; the mapping is assembled here
        once every fetch has settled.
        """
        names = list(dict.fromkeys(identifiers))
        outcomes = await asyncio.gather(*(self.fetch_outcome(name) for name in names))
        return {outcome.package: outcome for outcome in outcomes}

    async def _get_json(self, url: str, identifier: str) -> Any:
        """GET a JSON document with exactly one attempt.

        Raises:
            PackageNotFoundError: On 404.
            RateLimitError: On 429.
            NetworkError: On any other non-200 status, transport error,
                timeout, or undecodable body.
            ValidationError: If the response is larger than allowed.
        """
        try:
            async with self.session.get(
                url,
                headers=self._build_headers(),
                timeout=self.timeout,
            ) as resp:
                if resp.status == 404:
                    raise PackageNotFoundError(identifier, self.SERVICE)
                if resp.status == 429:
                    raise RateLimitError(self.SERVICE)
                if resp.status != 200:
                    raise NetworkError(url, resp.status)

                self._check_response_size(resp)
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise NetworkError(url, details=f"Invalid JSON: {e}")

        except asyncio.TimeoutError:
            raise NetworkError(url, details=f"Timed out after {self.timeout.total}s")
        except aiohttp.ClientError as e:
            raise NetworkError(url, details=str(e))

    def _build_headers(self) -> dict[str, str]:
        """Build common request headers.

        Override in subclasses to add authentication or other headers.
        """
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def _check_response_size(self, response: aiohttp.ClientResponse) -> None:
        """Check if response size is within acceptable limits.

        Args:
            response: The aiohttp response object.

        Raises:
            ValidationError: If the response is too large.
        """
        content_length = response.headers.get("Content-Length")
        if content_length is None:
            return
        try:
            size = int(content_length)
        except ValueError:
            # Malformed header; let the body decide
            return
        validate_response_size(size, self.MAX_RESPONSE_SIZE)
