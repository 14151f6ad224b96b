import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from courier.schemas.address import Address, State, ValidationResult
from courier.schemas.geocoding import GeocodeFailureKind, GeocodingResult
from courier.services.address_validation import US_STATES, validate_address
from courier.services.geocoding import GeocodeClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter()


def get_geocode_client(request: Request) -> GeocodeClient:
    return request.app.state.geocode_client


@router.get("/states", response_model=list[State])
async def get_states() -> list[State]:
    return [State(code=code, name=name) for code, name in US_STATES.items()]


@router.post("/validate", response_model=ValidationResult)
async def validate(address: Annotated[Address, Body(...)]) -> ValidationResult:
    return validate_address(address)


@router.post("/geocode", response_model=GeocodingResult)
async def geocode_address(
    address: Annotated[Address, Body(...)],
    client: Annotated[GeocodeClient, Depends(get_geocode_client)],
) -> GeocodingResult:
    """
    Validate an address and resolve it to coordinates.
    Invalid addresses are rejected before any geocoder request is made.
    """
    validation = validate_address(address)
    if not validation.is_valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=validation.errors,
        )

    result = await client.geocode_address(address)
    if result.success:
        return result

    logger.info("Geocoding failed for '%s': %s", address.street, result.error)
    if result.failure_kind == GeocodeFailureKind.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)
