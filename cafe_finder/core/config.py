from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Google Places (empty key = permanent mock mode, not an error)
    GOOGLE_PLACES_API_KEY: str = ""
    GOOGLE_NEARBY_URL: str = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
    PROVIDER_TIMEOUT_SECONDS: float = 5.0

    # Search defaults: 5000 for city profile, 25000 for wide-area profile
    DEFAULT_RADIUS: int = 5000
    MAX_RADIUS: int = 50000

    # In-memory cache
    CACHE_TTL_SECONDS: float = 300
    CACHE_MAX_ENTRIES: int = 100

    # Synthetic fallback
    MOCK_BATCH_SIZE: int = 10

    LOGGER: int = 20
    LOG_DIRECTORY: str = "logs"

    model_config = SettingsConfigDict(
        # Look for .env in the current folder OR the parent folder
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
