from datetime import date

import pytest

from courier.schemas.address import Address
from courier.schemas.route import RouteDistance, RouteSegments, ServiceType
from courier.services.distance import HUB_LOCATION, calculate_route_distance
from courier.services.geocoding import (
    DEFAULT_STATIC_ENTRIES,
    NOT_FOUND_MESSAGE,
    GeocodeClient,
    StaticGeocoderBackend,
)
from courier.services.route_quote import (
    AddressValidationError,
    GeocodingFailedError,
    RouteQuoteService,
    calculate_quote,
    estimate_eta,
)

MONDAY = date(2026, 10, 19)


class CountingBackend(StaticGeocoderBackend):
    def __init__(self):
        super().__init__()
        self.searched: list[Address] = []

    async def search(self, address):
        self.searched.append(address)
        return await super().search(address)


@pytest.fixture
def backend() -> CountingBackend:
    return CountingBackend()


@pytest.fixture
def service(backend) -> RouteQuoteService:
    return RouteQuoteService(GeocodeClient(backend, min_interval=0))


def route_of(total_miles: float) -> RouteDistance:
    return RouteDistance(
        total_miles=total_miles,
        total_kilometers=round(total_miles * 1.60934, 1),
        segments=RouteSegments(company_to_pickup=0, pickup_to_dropoff=total_miles),
    )


class TestCalculateQuote:
    def test_standard_with_route(self):
        quote = calculate_quote(5, ServiceType.STANDARD, route_of(7.2), today=MONDAY)

        assert quote.base_price == 20
        assert quote.distance_price == 14
        assert quote.price == 34
        assert quote.eta == "Thu, Oct 22"

    def test_express_multiplier(self):
        quote = calculate_quote(5, ServiceType.EXPRESS, route_of(7.2), today=MONDAY)

        assert quote.base_price == 30
        assert quote.distance_price == 22
        assert quote.price == 52
        assert quote.eta == "Tue, Oct 20"

    def test_same_day_without_route(self):
        quote = calculate_quote(2, ServiceType.SAME_DAY, today=MONDAY)

        assert quote.base_price == 35
        assert quote.distance_price == 0
        assert quote.price == 35
        assert quote.eta == "Today by 8:00 PM"


def test_standard_eta_crosses_month():
    assert estimate_eta(ServiceType.STANDARD, date(2026, 10, 30)) == "Mon, Nov 2"


async def test_quote_route(service, valid_address, other_address, backend):
    result = await service.quote_route(valid_address, other_address, 3, ServiceType.EXPRESS)

    pickup = DEFAULT_STATIC_ENTRIES["350 5th ave, new york, ny 10118"].coordinates
    dropoff = DEFAULT_STATIC_ENTRIES["11 wall st, new york, ny 10005"].coordinates
    expected_route = calculate_route_distance(pickup, dropoff, HUB_LOCATION)

    assert result.pickup.coordinates == pickup
    assert result.dropoff.coordinates == dropoff
    assert result.route == expected_route
    assert result.formatted_distance == f"{expected_route.total_miles:.1f} mi"
    assert result.estimated_delivery_time.endswith("minutes")
    assert result.quote == calculate_quote(3, ServiceType.EXPRESS, expected_route)
    assert backend.searched == [valid_address, other_address]


async def test_invalid_address_skips_geocoding(service, valid_address, backend):
    bad_dropoff = Address(street="Main Street", city="Boise", state="ZZ", zip_code="83702")

    with pytest.raises(AddressValidationError) as excinfo:
        await service.quote_route(valid_address, bad_dropoff, 1)

    assert excinfo.value.errors == {
        "pickup": {},
        "dropoff": {
            "street": "Street address must include a number",
            "state": "Please select a valid US state",
        },
    }
    assert backend.searched == []


async def test_unresolvable_dropoff(service, valid_address):
    unknown = Address(street="1 Elm St", city="Boise", state="ID", zip_code="83702")

    with pytest.raises(GeocodingFailedError) as excinfo:
        await service.quote_route(valid_address, unknown, 1)

    assert str(excinfo.value) == f"Dropoff address: {NOT_FOUND_MESSAGE}"


async def test_unresolvable_pickup(service, other_address):
    unknown = Address(street="1 Elm St", city="Boise", state="ID", zip_code="83702")

    with pytest.raises(GeocodingFailedError) as excinfo:
        await service.quote_route(unknown, other_address, 1)

    assert str(excinfo.value).startswith("Pickup address: ")
