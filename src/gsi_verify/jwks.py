"""Google JWKS fetcher and HTTP-cache-aware key cache.

Features:
- Conditional GET (If-None-Match / If-Modified-Since) when a previous response exists
- Freshness window from Cache-Control max-age (minus Age), Expires as fallback
- 304 Not Modified keeps the parsed keys and only extends the freshness window
- Fetch failures propagate; stale keys are never served after a failed refresh
- Copy-on-write cache slot, async-safe refresh via asyncio.Lock
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from email.utils import parsedate_to_datetime

import httpx
from jwt import PyJWK

from gsi_verify.errors import KeyFetchError
from gsi_verify.keys import KeySource, parse_jwks

logger = logging.getLogger("gsi_verify.jwks")

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"


@dataclass(frozen=True, slots=True)
class CacheValidators:
    """HTTP response metadata that decides whether cached keys may be reused."""

    status: int
    fetched_at: float
    max_age: float | None = None
    no_cache: bool = False
    etag: str | None = None
    last_modified: str | None = None

    @classmethod
    def from_response(cls, response: httpx.Response, fetched_at: float) -> "CacheValidators":
        no_cache, max_age = _parse_cache_control(response.headers.get("Cache-Control"))
        if max_age is None:
            max_age = _expires_lifetime(response.headers)
        if max_age is not None:
            max_age = max(0.0, max_age - _parse_age(response.headers.get("Age")))
        return cls(
            status=response.status_code,
            fetched_at=fetched_at,
            max_age=max_age,
            no_cache=no_cache,
            etag=response.headers.get("ETag"),
            last_modified=response.headers.get("Last-Modified"),
        )

    def is_fresh(self, now: float) -> bool:
        if self.no_cache or self.max_age is None:
            return False
        return (now - self.fetched_at) < self.max_age

    def conditional_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.etag:
            headers["If-None-Match"] = self.etag
        if self.last_modified:
            headers["If-Modified-Since"] = self.last_modified
        return headers

    def revalidated(self, response: httpx.Response, fetched_at: float) -> "CacheValidators":
        """Merge a 304 response into these validators (RFC 9111 §4.3.4)."""
        fresh = CacheValidators.from_response(response, fetched_at)
        has_freshness = (
            "Cache-Control" in response.headers or "Expires" in response.headers
        )
        return replace(
            self,
            status=response.status_code,
            fetched_at=fetched_at,
            max_age=fresh.max_age if has_freshness else self.max_age,
            no_cache=fresh.no_cache if has_freshness else self.no_cache,
            etag=fresh.etag or self.etag,
            last_modified=fresh.last_modified or self.last_modified,
        )


@dataclass(frozen=True, slots=True)
class CachedJWKS:
    """One cache entry: the parsed key set paired with its HTTP validators."""

    keys: tuple[PyJWK, ...]
    validators: CacheValidators


class JWKSFetcher(KeySource):
    """Fetches Google's public keys from the certs endpoint.

    Used directly it never caches; wrap it in ``JWKSCache`` for reuse.

    Args:
        jwks_url: URL of the JWKS endpoint (default Google's v3 certs).
        http_timeout: HTTP request timeout in seconds (default 10).
        clock: Monotonic clock used to stamp responses.
    """

    def __init__(
        self,
        jwks_url: str = GOOGLE_CERTS_URL,
        *,
        http_timeout: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        _transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._jwks_url = jwks_url
        self._http_timeout = http_timeout
        self._clock = clock
        self._transport = _transport

    @property
    def jwks_url(self) -> str:
        return self._jwks_url

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    async def get_keys(self) -> tuple[PyJWK, ...]:
        entry = await self.fetch()
        return entry.keys

    async def fetch(self, previous: CachedJWKS | None = None) -> CachedJWKS:
        """Fetch the key set, revalidating ``previous`` when it has validators.

        Raises:
            KeyFetchError: On network failure, timeout, unexpected HTTP status,
                or a body that is not a valid key set.
        """
        headers = previous.validators.conditional_headers() if previous else {}

        kwargs: dict = {"timeout": self._http_timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                response = await client.get(self._jwks_url, headers=headers)
        except httpx.TimeoutException as e:
            raise KeyFetchError(f"Timed out fetching JWKS from {self._jwks_url}", self._jwks_url) from e
        except httpx.HTTPError as e:
            raise KeyFetchError(f"Failed to fetch JWKS from {self._jwks_url}: {e}", self._jwks_url) from e

        fetched_at = self._clock()

        if response.status_code == 304 and previous is not None:
            logger.debug("JWKS not modified, keeping %d keys", len(previous.keys))
            return CachedJWKS(
                keys=previous.keys,
                validators=previous.validators.revalidated(response, fetched_at),
            )

        if response.status_code != 200:
            raise KeyFetchError(
                f"JWKS endpoint {self._jwks_url} returned HTTP {response.status_code}",
                self._jwks_url,
            )

        try:
            keys = parse_jwks(response.json())
        except ValueError as e:
            raise KeyFetchError(f"Malformed JWKS from {self._jwks_url}: {e}", self._jwks_url) from e

        logger.debug("JWKS fetched: %d keys loaded", len(keys))
        return CachedJWKS(
            keys=keys,
            validators=CacheValidators.from_response(response, fetched_at),
        )


class JWKSCache(KeySource):
    """Reuses fetched keys for as long as the HTTP caching headers allow.

    Readers always see a complete ``CachedJWKS`` snapshot; a refresh builds a
    new entry and swaps it in. Share one instance between verifiers by
    passing it explicitly.

    Refreshes are serialised with an ``asyncio.Lock``, so an instance belongs
    to one event loop. Threads running their own loops need a cache each.

    Args:
        fetcher: The remote key source to cache.
        clock: Monotonic clock, must match the fetcher's.
    """

    def __init__(
        self,
        fetcher: JWKSFetcher | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._fetcher = fetcher or JWKSFetcher()
        self._clock = clock or self._fetcher.clock
        self._entry: CachedJWKS | None = None
        self._lock = asyncio.Lock()

    @property
    def entry(self) -> CachedJWKS | None:
        return self._entry

    def invalidate(self) -> None:
        """Drop the cached entry; the next lookup fetches unconditionally."""
        self._entry = None

    async def get_keys(self) -> tuple[PyJWK, ...]:
        entry = self._entry
        if entry is not None and entry.validators.is_fresh(self._clock()):
            return entry.keys

        async with self._lock:
            entry = self._entry
            if entry is not None and entry.validators.is_fresh(self._clock()):
                return entry.keys
            new_entry = await self._fetcher.fetch(previous=entry)
            self._entry = new_entry
            return new_entry.keys


def _parse_cache_control(cache_control: str | None) -> tuple[bool, float | None]:
    """Extract (no_cache, max_age) from a Cache-Control header string."""
    if not cache_control:
        return False, None
    no_cache = False
    max_age: float | None = None
    for segment in cache_control.split(","):
        directive, _, value = segment.strip().partition("=")
        directive = directive.strip().lower()
        if directive in ("no-cache", "no-store"):
            no_cache = True
        elif directive == "max-age":
            try:
                max_age = float(int(value.strip().strip('"')))
            except ValueError:
                max_age = None
    return no_cache, max_age


def _parse_age(age: str | None) -> float:
    if not age:
        return 0.0
    try:
        return float(max(0, int(age.strip())))
    except ValueError:
        return 0.0


def _expires_lifetime(headers: httpx.Headers) -> float | None:
    """Lifetime implied by Expires relative to Date, when both are present."""
    expires = headers.get("Expires")
    date = headers.get("Date")
    if not expires or not date:
        return None
    try:
        lifetime = parsedate_to_datetime(expires) - parsedate_to_datetime(date)
    except (TypeError, ValueError):
        # Unparsable Expires means already expired
        return 0.0
    return max(0.0, lifetime.total_seconds())
