"""Page retrieval across client identity profiles."""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Iterable, Iterator

import httpx

from pagevault.config import get_fetch_config, get_identity_profiles
from pagevault.errors import FetchError, FetchErrorKind
from pagevault.models import FetchAttempt, IdentityProfile, ProbeResult
from pagevault.rotation import try_in_order

logger = logging.getLogger(__name__)

_STATUS_KINDS = {
    403: FetchErrorKind.FORBIDDEN,
    404: FetchErrorKind.PAGE_NOT_FOUND,
    429: FetchErrorKind.RATE_LIMITED,
}

# Resolver messages differ between libc, macOS and Windows
_DNS_FAILURE_HINTS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "no address associated",
    "temporary failure in name resolution",
)


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_error(exc: Exception) -> FetchError:
    """Map an httpx failure to a FetchError with a stable kind."""
    message = str(exc) or type(exc).__name__

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return FetchError(
            _STATUS_KINDS.get(status, FetchErrorKind.OTHER),
            f"HTTP {status} for {exc.request.url}",
            status_code=status,
        )
    if isinstance(exc, httpx.TimeoutException):
        return FetchError(FetchErrorKind.TIMEOUT, message)

    for err in _exception_chain(exc):
        if isinstance(err, socket.gaierror):
            return FetchError(FetchErrorKind.NOT_FOUND, message)
        if isinstance(err, ConnectionRefusedError):
            return FetchError(FetchErrorKind.CONNECTION_REFUSED, message)
        if isinstance(err, TimeoutError):
            return FetchError(FetchErrorKind.TIMEOUT, message)

    lowered = message.lower()
    if any(hint in lowered for hint in _DNS_FAILURE_HINTS):
        return FetchError(FetchErrorKind.NOT_FOUND, message)
    if "connection refused" in lowered:
        return FetchError(FetchErrorKind.CONNECTION_REFUSED, message)
    return FetchError(FetchErrorKind.OTHER, message)


class Fetcher:
    """Fetch raw HTML, trying each identity profile in turn.

    ``verify_tls`` comes from config and defaults to False so that sites with
    self-signed or misconfigured certificates can still be scraped.
    """

    def __init__(
        self,
        config: dict | None = None,
        profiles: Iterable[IdentityProfile] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        cfg = get_fetch_config(config)
        self.timeout = cfg["timeout"]
        self.max_redirects = cfg["max_redirects"]
        self.verify_tls = cfg["verify_tls"]
        self.probe_timeout = cfg["probe_timeout"]
        self.profiles = (
            list(profiles) if profiles is not None else get_identity_profiles(config)
        )
        if not self.profiles:
            raise ValueError("Fetcher needs at least one identity profile")
        self._transport = transport
        # Requests abandoned by a cancelled caller, kept alive until they finish
        self._background: set[asyncio.Task] = set()

        if not self.verify_tls:
            logger.debug("TLS certificate verification disabled for page fetches")

    def _client(self, timeout: float) -> httpx.AsyncClient:
        kwargs = {
            "timeout": timeout,
            "follow_redirects": True,
            "max_redirects": self.max_redirects,
            "verify": self.verify_tls,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def fetch(self, url: str, attempts: list[FetchAttempt] | None = None) -> str:
        """Return the first non-empty body; raise the last FetchError if none."""

        def record_failure(profile: IdentityProfile, exc: Exception) -> None:
            if attempts is not None:
                attempts.append(
                    FetchAttempt(
                        profile=profile,
                        ok=False,
                        error_kind=exc.kind.value,
                        message=exc.message,
                    ),
                )

        async def attempt(profile: IdentityProfile) -> str:
            body = await self._attempt(url, profile)
            if attempts is not None:
                attempts.append(FetchAttempt(profile=profile, ok=True, body=body))
            return body

        body = await try_in_order(
            attempt, self.profiles,
            retry_on=(FetchError,),
            on_failure=record_failure,
        )
        logger.info("Fetched %s (%d chars)", url, len(body))
        return body

    async def _attempt(self, url: str, profile: IdentityProfile) -> str:
        """Run one GET so that a cancelled caller does not abort it mid-flight."""
        logger.info("Fetching %s as %s", url, profile.name)
        task = asyncio.ensure_future(self._get(url, profile))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.done():
                logger.debug("Caller cancelled; leaving request to %s in background", url)
                self._background.add(task)
                task.add_done_callback(self._discard)
            raise

    def _discard(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled():
            # Result of an abandoned request is dropped
            task.exception()

    async def _request(
        self, method: str, url: str, profile: IdentityProfile, timeout: float,
    ) -> httpx.Response:
        async with self._client(timeout) as client:
            resp = await client.request(method, url, headers=profile.request_headers())
            resp.raise_for_status()
            return resp

    async def _bounded(
        self, method: str, url: str, profile: IdentityProfile, timeout: float,
    ) -> httpx.Response:
        """One request, capped at ``timeout`` seconds end to end.

        httpx timeouts apply to each network operation; this caps the whole
        exchange, including a body that arrives a byte at a time.
        """
        try:
            return await asyncio.wait_for(
                self._request(method, url, profile, timeout), timeout,
            )
        except asyncio.TimeoutError as exc:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                f"No complete response from {url} within {timeout:g}s",
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise classify_error(exc) from exc

    async def _get(self, url: str, profile: IdentityProfile) -> str:
        resp = await self._bounded("GET", url, profile, self.timeout)
        body = resp.text
        if not body:
            raise FetchError(FetchErrorKind.OTHER, f"Empty response body from {url}")
        return body

    async def probe(self, url: str) -> ProbeResult:
        """HEAD the URL to check whether it is reachable."""
        try:
            resp = await self._bounded("HEAD", url, self.profiles[0], self.probe_timeout)
        except FetchError as exc:
            logger.info("Probe of %s failed: %s", url, exc.message)
            return ProbeResult(url=url, accessible=False, error=exc.message)

        return ProbeResult(
            url=url,
            accessible=True,
            status=resp.status_code,
            headers=dict(resp.headers),
        )
