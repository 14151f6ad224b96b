import math

from courier.core.config import settings
from courier.schemas.geocoding import Coordinates
from courier.schemas.route import RouteDistance, RouteSegments

EARTH_RADIUS_MILES = 3958.8
KILOMETERS_PER_MILE = 1.60934
FEET_PER_MILE = 5280

LOCAL_SPEED_MPH = 30
LONG_DISTANCE_SPEED_MPH = 60
LONG_DISTANCE_THRESHOLD_MILES = 50

HUB_LOCATION = Coordinates(latitude=settings.HUB_LATITUDE, longitude=settings.HUB_LONGITUDE)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _require_finite(miles: float) -> None:
    if not math.isfinite(miles):
        raise ValueError(f"Distance must be a finite number, got {miles!r}")


def calculate_distance(a: Coordinates, b: Coordinates) -> float:
    """
    Great-circle distance in miles between two points (haversine).
    Coordinates are not range-checked.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    delta_lat = math.radians(b.latitude - a.latitude)
    delta_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_MILES * c


def miles_to_kilometers(miles: float) -> float:
    return miles * KILOMETERS_PER_MILE


def kilometers_to_miles(kilometers: float) -> float:
    return kilometers / KILOMETERS_PER_MILE


def calculate_route_distance(
    pickup: Coordinates, dropoff: Coordinates, origin: Coordinates = HUB_LOCATION
) -> RouteDistance:
    """
    Distance of the hub -> pickup -> dropoff trip.

    Each reported figure is rounded on its own, so the rounded total can differ from
    the sum of the rounded segments by up to 0.1 mile.
    """
    company_to_pickup = calculate_distance(origin, pickup)
    pickup_to_dropoff = calculate_distance(pickup, dropoff)
    total_miles = company_to_pickup + pickup_to_dropoff

    return RouteDistance(
        total_miles=round_half_up(total_miles, 1),
        total_kilometers=round_half_up(miles_to_kilometers(total_miles), 1),
        segments=RouteSegments(
            company_to_pickup=round_half_up(company_to_pickup, 1),
            pickup_to_dropoff=round_half_up(pickup_to_dropoff, 1),
        ),
    )


def format_distance(miles: float) -> str:
    _require_finite(miles)
    if miles < 1:
        return f"{int(round_half_up(miles * FEET_PER_MILE))} ft"
    return f"{miles:.1f} mi"


def estimate_delivery_time(miles: float) -> str:
    """Rough driving time: 30 mph for local trips, 60 mph from 50 miles up."""
    _require_finite(miles)
    speed = LOCAL_SPEED_MPH if miles < LONG_DISTANCE_THRESHOLD_MILES else LONG_DISTANCE_SPEED_MPH
    hours = miles / speed

    if hours < 1:
        return f"{int(round_half_up(hours * 60))} minutes"
    if hours < 24:
        return f"{hours:.1f} hours"
    days = math.ceil(hours / 24)
    return f"{days} day{'s' if days > 1 else ''}"
