from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status

from courier.api.endpoints.geocoding import get_geocode_client
from courier.schemas.route import RouteQuote, RouteQuoteRequest
from courier.services.geocoding import GeocodeClient
from courier.services.route_quote import (
    AddressValidationError,
    GeocodingFailedError,
    RouteQuoteService,
)

router = APIRouter()


@router.post("/quote", response_model=RouteQuote)
async def quote_route(
    quote_request: Annotated[RouteQuoteRequest, Body(...)],
    client: Annotated[GeocodeClient, Depends(get_geocode_client)],
) -> RouteQuote:
    service = RouteQuoteService(client)
    try:
        return await service.quote_route(
            quote_request.pickup,
            quote_request.dropoff,
            quote_request.weight,
            quote_request.service_type,
        )
    except AddressValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors
        ) from e
    except GeocodingFailedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
