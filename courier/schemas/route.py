from enum import Enum

from pydantic import BaseModel, Field

from courier.schemas.address import Address
from courier.schemas.geocoding import GeocodingResult


class ServiceType(str, Enum):
    STANDARD = "STANDARD"
    EXPRESS = "EXPRESS"
    SAME_DAY = "SAME_DAY"


class RouteSegments(BaseModel):
    company_to_pickup: float
    pickup_to_dropoff: float


class RouteDistance(BaseModel):
    """Hub -> pickup -> dropoff distance, every figure rounded to one decimal"""

    total_miles: float
    total_kilometers: float
    segments: RouteSegments


class Quote(BaseModel):
    price: int
    base_price: int
    distance_price: int
    eta: str


class RouteQuoteRequest(BaseModel):
    pickup: Address
    dropoff: Address
    weight: float = Field(ge=0)
    service_type: ServiceType = ServiceType.STANDARD


class RouteQuote(BaseModel):
    pickup: GeocodingResult
    dropoff: GeocodingResult
    route: RouteDistance
    formatted_distance: str
    estimated_delivery_time: str
    quote: Quote
