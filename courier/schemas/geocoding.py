from enum import Enum

from pydantic import BaseModel, model_validator


class Coordinates(BaseModel):
    """Latitude/longitude pair in decimal degrees"""

    latitude: float
    longitude: float

    class Config:
        frozen = True


class GeocodeCandidate(BaseModel):
    """A single match returned by a geocoder backend"""

    latitude: float
    longitude: float
    display_name: str | None = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class GeocodeFailureKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    SERVICE_ERROR = "SERVICE_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    NETWORK_ERROR = "NETWORK_ERROR"


class GeocodingResult(BaseModel):
    """Outcome of a geocode lookup: either coordinates or an error message, never both"""

    success: bool
    coordinates: Coordinates | None = None
    display_name: str | None = None
    error: str | None = None
    failure_kind: GeocodeFailureKind | None = None

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_outcome_shape(self) -> "GeocodingResult":
        if self.success:
            if self.coordinates is None or self.error is not None or self.failure_kind is not None:
                raise ValueError("successful result must carry coordinates and no error")
        elif self.coordinates is not None or not self.error or self.failure_kind is None:
            raise ValueError("failed result must carry an error, its kind and no coordinates")
        return self

    @classmethod
    def ok(cls, coordinates: Coordinates, display_name: str | None = None) -> "GeocodingResult":
        return cls(success=True, coordinates=coordinates, display_name=display_name)

    @classmethod
    def failure(cls, error: str, kind: GeocodeFailureKind) -> "GeocodingResult":
        return cls(success=False, error=error, failure_kind=kind)
