from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "CourierOS"
    # "nominatim" for the live OpenStreetMap service, "static" for the offline table
    GEOCODER_BACKEND: str = "nominatim"
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org/search"
    GEOCODER_USER_AGENT: str = "CourierOS-App/1.0"
    GEOCODE_MIN_INTERVAL_SECONDS: float = 1.0
    GEOCODE_TIMEOUT_SECONDS: float = 10.0
    HUB_LATITUDE: float = 40.7128
    HUB_LONGITUDE: float = -74.0060

    class Config:
        env_file = ".env"


settings = Settings()
