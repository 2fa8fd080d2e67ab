import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from cafe_finder.core.config import Settings
from cafe_finder.core.logger import logs
from cafe_finder.models.cafe_model import CafeSearchResponse, ErrorResponse, MetricsResponse
from cafe_finder.services.Cafe_service import (
    CafeSearchService,
    CafeSearchValidationError,
    parse_search_params,
)

router = APIRouter(prefix="/api/cafes", tags=["cafes"])

# --- Dependency Injection ---
def get_cafe_service(request: Request) -> CafeSearchService:
    return request.app.state.cafe_service

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def _error(status_code: int, error: str) -> JSONResponse:
    body = ErrorResponse(error=error).model_dump(by_alias=True, exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)

@router.get(
    "",
    response_model=CafeSearchResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search_cafes(
    lat: Optional[str] = Query(None),
    lng: Optional[str] = Query(None),
    radius: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    page_token: Optional[str] = Query(None, alias="pageToken"),
    service: CafeSearchService = Depends(get_cafe_service),
    app_settings: Settings = Depends(get_settings),
):
    """
    Nearby cafés around (lat, lng). Query values are taken as raw strings
    so bad input gets our 400 envelope instead of FastAPI's 422.
    """
    try:
        params = parse_search_params(
            lat,
            lng,
            radius=radius,
            query=query,
            page_token=page_token,
            default_radius=app_settings.DEFAULT_RADIUS,
            max_radius=app_settings.MAX_RADIUS,
        )
        return await service.search(params)
    except CafeSearchValidationError as e:
        logs.log(logging.WARNING, f"Rejected café search: {e.message}", extra={"lat": lat, "lng": lng})
        return _error(400, e.message)
    except Exception as e:
        logs.log(logging.ERROR, f"Error in café search: {str(e)}")
        service.record_error()
        return _error(500, "Internal server error")

@router.get("/metrics", response_model=MetricsResponse)
async def cafe_metrics(service: CafeSearchService = Depends(get_cafe_service)):
    return MetricsResponse(data=service.metrics_snapshot())

@router.delete("/cache")
async def clear_cafe_cache(service: CafeSearchService = Depends(get_cafe_service)):
    cleared = service.clear_cache()
    return {"success": True, "data": {"cleared": cleared}}
