import httpx
import pytest

from courier.schemas.address import Address


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it was asked to send."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def call_count(self) -> int:
        return len(self.requests)


def nominatim_match(lat: str, lon: str, display_name: str = "Somewhere, United States") -> list:
    return [{"lat": lat, "lon": lon, "display_name": display_name, "address": {}}]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def valid_address() -> Address:
    return Address(street="350 5th Ave", city="New York", state="NY", zip_code="10118")


@pytest.fixture
def other_address() -> Address:
    return Address(street="11 Wall St", city="New York", state="NY", zip_code="10005")
