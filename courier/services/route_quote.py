import logging
from datetime import date, timedelta

from courier.schemas.address import Address, ValidationResult
from courier.schemas.geocoding import Coordinates
from courier.schemas.route import Quote, RouteDistance, RouteQuote, ServiceType
from courier.services.address_validation import AddressValidator, address_validator
from courier.services.distance import (
    HUB_LOCATION,
    calculate_route_distance,
    estimate_delivery_time,
    format_distance,
    round_half_up,
)
from courier.services.geocoding import GeocodeClient

BASE_PRICE = 10
PRICE_PER_WEIGHT_UNIT = 2
PRICE_PER_MILE = 2

SERVICE_MULTIPLIERS: dict[ServiceType, float] = {
    ServiceType.STANDARD: 1,
    ServiceType.EXPRESS: 1.5,
    ServiceType.SAME_DAY: 2.5,
}

STANDARD_DELIVERY_DAYS = 3


class RouteQuoteError(Exception):
    pass


class AddressValidationError(RouteQuoteError):
    def __init__(self, pickup: ValidationResult, dropoff: ValidationResult):
        super().__init__("Pickup or dropoff address is invalid")
        self.pickup = pickup
        self.dropoff = dropoff

    @property
    def errors(self) -> dict[str, dict[str, str]]:
        return {"pickup": self.pickup.errors, "dropoff": self.dropoff.errors}


class GeocodingFailedError(RouteQuoteError):
    pass


def _format_eta_date(day: date) -> str:
    # e.g. "Tue, Oct 20"
    return f"{day:%a}, {day:%b} {day.day}"


def estimate_eta(service_type: ServiceType, today: date | None = None) -> str:
    today = today or date.today()
    if service_type == ServiceType.SAME_DAY:
        return "Today by 8:00 PM"
    if service_type == ServiceType.EXPRESS:
        return _format_eta_date(today + timedelta(days=1))
    return _format_eta_date(today + timedelta(days=STANDARD_DELIVERY_DAYS))


def calculate_quote(
    weight: float,
    service_type: ServiceType = ServiceType.STANDARD,
    route: RouteDistance | None = None,
    today: date | None = None,
) -> Quote:
    """
    Price a shipment: $10 base, $2 per weight unit, $2 per route mile, scaled by the
    service multiplier. Without a route only the base and weight charges apply.
    """
    base = BASE_PRICE + weight * PRICE_PER_WEIGHT_UNIT
    distance = route.total_miles * PRICE_PER_MILE if route else 0
    multiplier = SERVICE_MULTIPLIERS[service_type]

    return Quote(
        price=int(round_half_up((base + distance) * multiplier)),
        base_price=int(round_half_up(base * multiplier)),
        distance_price=int(round_half_up(distance * multiplier)),
        eta=estimate_eta(service_type, today),
    )


class RouteQuoteService:
    def __init__(
        self,
        client: GeocodeClient,
        origin: Coordinates = HUB_LOCATION,
        validator: AddressValidator = address_validator,
    ):
        self.client = client
        self.origin = origin
        self.validator = validator
        self.logger = logging.getLogger(__name__)

    async def quote_route(
        self,
        pickup: Address,
        dropoff: Address,
        weight: float,
        service_type: ServiceType = ServiceType.STANDARD,
    ) -> RouteQuote:
        pickup_validation = self.validator.validate_address(pickup)
        dropoff_validation = self.validator.validate_address(dropoff)
        if not pickup_validation.is_valid or not dropoff_validation.is_valid:
            raise AddressValidationError(pickup_validation, dropoff_validation)

        pickup_result, dropoff_result = await self.client.geocode_multiple_addresses(
            [pickup, dropoff]
        )
        if not pickup_result.success:
            raise GeocodingFailedError(f"Pickup address: {pickup_result.error}")
        if not dropoff_result.success:
            raise GeocodingFailedError(f"Dropoff address: {dropoff_result.error}")

        route = calculate_route_distance(
            pickup_result.coordinates, dropoff_result.coordinates, self.origin
        )
        self.logger.info(
            "Quoted %s route of %.1f mi for pickup '%s'",
            service_type.value,
            route.total_miles,
            pickup_result.display_name,
        )
        return RouteQuote(
            pickup=pickup_result,
            dropoff=dropoff_result,
            route=route,
            formatted_distance=format_distance(route.total_miles),
            estimated_delivery_time=estimate_delivery_time(route.total_miles),
            quote=calculate_quote(weight, service_type, route),
        )
