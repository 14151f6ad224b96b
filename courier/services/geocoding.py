import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Protocol

import httpx
from httpx import AsyncClient
from pydantic import ValidationError

from courier.core.config import Settings, settings
from courier.schemas.address import Address
from courier.schemas.geocoding import GeocodeCandidate, GeocodeFailureKind, GeocodingResult
from courier.services.address_validation import format_address

NOT_FOUND_MESSAGE = "Address not found. Please verify the address is correct."
INVALID_RESPONSE_MESSAGE = "Invalid response from geocoding service"
GENERIC_FAILURE_MESSAGE = "Failed to geocode address"


def address_key(address: Address) -> str:
    """Lower-cased single-line address with each field trimmed; the geocode cache key."""
    return ", ".join(
        [
            address.street.strip(),
            address.city.strip(),
            f"{address.state.strip()} {address.zip_code.strip()}",
        ]
    ).lower()


class GeocoderHTTPError(Exception):
    """The geocoding service answered with a non-success status."""

    def __init__(self, status_code: int):
        super().__init__(f"Geocoding API error: {status_code}")
        self.status_code = status_code


class GeocoderResponseError(Exception):
    """The geocoding service answered 2xx with a body we cannot use."""


class GeocoderBackend(Protocol):
    async def search(self, address: Address) -> list[GeocodeCandidate]: ...


class NominatimBackend:
    """OpenStreetMap Nominatim structured search.

    Nominatim rejects requests without an identifying User-Agent, so one is always sent.
    """

    def __init__(
        self,
        base_url: str = settings.NOMINATIM_URL,
        user_agent: str = settings.GEOCODER_USER_AGENT,
        timeout: float = settings.GEOCODE_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport
        self.logger = logging.getLogger(__name__)

    def build_params(self, address: Address) -> dict[str, str]:
        return {
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "postalcode": address.zip_code,
            "country": "United States",
            "format": "json",
            "limit": "1",
            "addressdetails": "1",
        }

    async def search(self, address: Address) -> list[GeocodeCandidate]:
        params = self.build_params(address)
        async with AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        ) as client:
            r = await client.get(self.base_url, params=params)

        if not r.is_success:
            self.logger.error(
                "Geocoding upstream HTTP error %s for address '%s': %s",
                r.status_code,
                format_address(address),
                r.text,
            )
            raise GeocoderHTTPError(r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            raise GeocoderResponseError(f"Response body is not JSON: {e}") from e
        if not isinstance(data, list):
            raise GeocoderResponseError(f"Expected a JSON array, got {type(data).__name__}")

        candidates = []
        for item in data[:1]:
            try:
                candidates.append(
                    GeocodeCandidate(
                        latitude=item["lat"],
                        longitude=item["lon"],
                        display_name=item.get("display_name"),
                    )
                )
            except (KeyError, TypeError, AttributeError, ValidationError) as e:
                raise GeocoderResponseError(f"Unexpected candidate format: {e}") from e
        return candidates


# Offline fallback table, keyed like the geocode cache (see address_key)
DEFAULT_STATIC_ENTRIES: dict[str, GeocodeCandidate] = {
    "350 5th ave, new york, ny 10118": GeocodeCandidate(
        latitude=40.748817,
        longitude=-73.985428,
        display_name="Empire State Building, 350, 5th Avenue, Manhattan, New York, 10118",
    ),
    "11 wall st, new york, ny 10005": GeocodeCandidate(
        latitude=40.706857,
        longitude=-74.011261,
        display_name="New York Stock Exchange, 11, Wall Street, Manhattan, New York, 10005",
    ),
    "1 e 161st st, bronx, ny 10451": GeocodeCandidate(
        latitude=40.829643,
        longitude=-73.926175,
        display_name="Yankee Stadium, 1, East 161st Street, The Bronx, New York, 10451",
    ),
}


class StaticGeocoderBackend:
    """Resolves addresses from a fixed table; used when no live geocoder is available."""

    def __init__(self, entries: Mapping[str, GeocodeCandidate] = DEFAULT_STATIC_ENTRIES):
        self.entries = {key.lower(): candidate for key, candidate in entries.items()}

    async def search(self, address: Address) -> list[GeocodeCandidate]:
        candidate = self.entries.get(address_key(address))
        return [candidate] if candidate else []


class RateLimiter:
    """Keeps outbound requests at least ``min_interval`` seconds apart.

    The lock is held across the wait, so concurrent callers queue up and each
    one is stamped just before its request goes out.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_request(self) -> float | None:
        return self._last_request

    async def wait(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    await self._sleep(self.min_interval - elapsed)
            self._last_request = self._clock()


class GeocodeClient:
    """Address -> coordinates with an in-memory cache and a client-side rate limit.

    Every outcome is returned as a GeocodingResult; lookups never raise for
    network or service failures. Definitive outcomes (match, no match, HTTP
    error status, unusable body) are cached for the life of the client.
    Transport faults such as DNS failures and timeouts are not, so the next
    call for that address tries again.
    """

    def __init__(
        self,
        backend: GeocoderBackend,
        *,
        min_interval: float = 1.0,
        rate_limiter: RateLimiter | None = None,
    ):
        self.backend = backend
        self.rate_limiter = rate_limiter or RateLimiter(min_interval)
        self._cache: dict[str, GeocodingResult] = {}
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._key_waiters: dict[str, int] = {}
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "GeocodeClient":
        if config.GEOCODER_BACKEND == "nominatim":
            backend: GeocoderBackend = NominatimBackend(
                base_url=config.NOMINATIM_URL,
                user_agent=config.GEOCODER_USER_AGENT,
                timeout=config.GEOCODE_TIMEOUT_SECONDS,
            )
        elif config.GEOCODER_BACKEND == "static":
            backend = StaticGeocoderBackend()
        else:
            raise ValueError(f"Unknown geocoder backend: {config.GEOCODER_BACKEND}")
        return cls(backend, min_interval=config.GEOCODE_MIN_INTERVAL_SECONDS)

    @staticmethod
    def cache_key(address: Address) -> str:
        return address_key(address)

    async def geocode_address(self, address: Address) -> GeocodingResult:
        key = self.cache_key(address)
        cached = self._cache.get(key)
        if cached is not None:
            self.logger.debug("Geocode cache hit for '%s'", key)
            return cached

        # Concurrent lookups of one address wait for the first to finish
        lock = self._key_locks.setdefault(key, asyncio.Lock())
        self._key_waiters[key] = self._key_waiters.get(key, 0) + 1
        try:
            async with lock:
                cached = self._cache.get(key)
                if cached is not None:
                    return cached

                result, cacheable = await self._lookup(address)
                if cacheable:
                    self._cache[key] = result
                return result
        finally:
            # Drop the lock once nobody is holding or waiting on it
            self._key_waiters[key] -= 1
            if not self._key_waiters[key]:
                del self._key_waiters[key]
                del self._key_locks[key]

    @property
    def pending_lookups(self) -> int:
        return len(self._key_locks)

    async def _lookup(self, address: Address) -> tuple[GeocodingResult, bool]:
        await self.rate_limiter.wait()
        try:
            candidates = await self.backend.search(address)
        except GeocoderHTTPError as e:
            return GeocodingResult.failure(str(e), GeocodeFailureKind.SERVICE_ERROR), True
        except GeocoderResponseError as e:
            self.logger.error(
                "Invalid geocoding response for address '%s': %s", format_address(address), e
            )
            result = GeocodingResult.failure(
                INVALID_RESPONSE_MESSAGE, GeocodeFailureKind.INVALID_RESPONSE
            )
            return result, True
        except httpx.HTTPError as e:
            self.logger.warning(
                "Geocoding request failed for address '%s': %r", format_address(address), e
            )
            message = str(e) or GENERIC_FAILURE_MESSAGE
            return GeocodingResult.failure(message, GeocodeFailureKind.NETWORK_ERROR), False

        if not candidates:
            self.logger.warning("No geocoding match for address '%s'", format_address(address))
            return GeocodingResult.failure(NOT_FOUND_MESSAGE, GeocodeFailureKind.NOT_FOUND), True

        best = candidates[0]
        return GeocodingResult.ok(best.coordinates, best.display_name), True

    async def geocode_multiple_addresses(
        self, addresses: Iterable[Address]
    ) -> list[GeocodingResult]:
        """Geocode one address after another, in input order."""
        results = []
        for address in addresses:
            results.append(await self.geocode_address(address))
        return results

    def clear_geocode_cache(self) -> None:
        self._cache.clear()

    def get_geocode_cache_size(self) -> int:
        return len(self._cache)
