from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courier.api.endpoints import geocoding, health, route
from courier.core.config import settings
from courier.services.geocoding import GeocodeClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One client per process: its cache and rate limiter are shared by all requests
    app.state.geocode_client = GeocodeClient.from_settings(settings)
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins in development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="", tags=["health"])

app.include_router(geocoding.router, prefix="/geocoding", tags=["geocoding"])

app.include_router(route.router, prefix="/route", tags=["route"])
