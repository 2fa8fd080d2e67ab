import logging
import random
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from cafe_finder.core.config import Settings, settings as default_settings
from cafe_finder.core.logger import logs
from cafe_finder.repos.cache_repo import MemoryCache
from cafe_finder.routes.cafes_route import router as cafes_router
from cafe_finder.services.Cafe_service import CafeSearchService
from cafe_finder.services.Places_service import PlacesService
from cafe_finder.services.metrics import PerformanceTracker


@asynccontextmanager
async def lifespan(app: FastAPI):
    mode = "google" if app.state.settings.GOOGLE_PLACES_API_KEY else "mock"
    logs.log(logging.INFO, f"Café Finder starting (provider mode: {mode})")
    yield
    # The cache lives exactly as long as the process serving it
    app.state.cafe_service.clear_cache()
    logs.log(logging.INFO, "Café Finder stopped")


def create_app(
    app_settings: Optional[Settings] = None,
    rng: Optional[random.Random] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    cache: Optional[MemoryCache] = None,
) -> FastAPI:
    """
    Builds the app with its own cache and provider.
    Tests pass a seeded rng, a mock transport or a cache with a fake clock.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(title="Café Finder", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.cafe_service = CafeSearchService(
        provider=PlacesService(
            api_key=app_settings.GOOGLE_PLACES_API_KEY,
            base_url=app_settings.GOOGLE_NEARBY_URL,
            timeout=app_settings.PROVIDER_TIMEOUT_SECONDS,
            mock_batch_size=app_settings.MOCK_BATCH_SIZE,
            rng=rng,
            transport=transport,
        ),
        cache=cache or MemoryCache(
            ttl_seconds=app_settings.CACHE_TTL_SECONDS,
            max_entries=app_settings.CACHE_MAX_ENTRIES,
        ),
        metrics=PerformanceTracker(),
    )
    app.include_router(cafes_router)

    # --- Root Endpoint ---
    @app.get("/")
    async def root():
        return {
            "message": "Welcome to Café Finder API",
            "status": "running",
            "endpoints": {
                "health": "/health",
                "cafes": "/api/cafes",
                "metrics": "/api/cafes/metrics",
                "docs": "/docs"
            },
            "version": "1.0.0"
        }

    # --- Health Check ---
    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "Café Finder"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cafe_finder.main:app", host="0.0.0.0", port=8000, reload=True)
