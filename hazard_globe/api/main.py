"""
Hazard Globe API
FastAPI backend serving typhoon, earthquake and weather data to the globe viewer

Features:
- Active typhoons from an ordered chain of tracking agencies
- USGS earthquakes from the last 7 days
- Low-pressure areas deepened from live pressure readings
- Per-location weather and forecast for detail cards
- PAGASA naming and Philippine Area of Responsibility helpers
"""

import logging
from typing import Optional, List, Dict, Any

from fastapi import FastAPI, HTTPException, Query, Path
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..config import get_settings
from ..processing.geo import distance_to_region_km, is_in_region
from ..processing.names import clean_name, local_name
from .hazards import HazardRefresher, HazardService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Hazard Globe API",
    description="Typhoon tracks, earthquakes and low-pressure areas for the hazard globe",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

hazard_service = HazardService(settings=settings)
refresher = HazardRefresher(hazard_service)


# ============================================================================
# Pydantic Models
# ============================================================================

class RegionCheck(BaseModel):
    """Whether a coordinate lies inside the Philippine Area of Responsibility"""
    lat: float
    lon: float
    is_in_region: bool
    distance_to_region_km: float = Field(..., description="0 when inside the region")


class NameLookup(BaseModel):
    """PAGASA name for an international storm name"""
    international_name: str
    local_name: Optional[str] = Field(None, description="Absent when PAGASA has no name on record")


class WeatherResponse(BaseModel):
    """Current weather, or null when unavailable"""
    lat: float
    lon: float
    configured: bool = Field(..., description="False when no weather credential is set")
    weather: Optional[Dict[str, Any]] = None


class ForecastResponse(BaseModel):
    """Short-range forecast, or null when unavailable"""
    lat: float
    lon: float
    configured: bool
    forecast: Optional[List[Dict[str, Any]]] = None


# ============================================================================
# Lifecycle
# ============================================================================

@app.on_event("startup")
async def start_refresher():
    """Begin periodic hazard refreshes"""
    refresher.start()


@app.on_event("shutdown")
async def stop_refresher():
    await refresher.stop()
    await hazard_service.aclose()


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Custom HTTP exception handler with consistent format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTPException",
            "detail": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request, exc: RequestValidationError):
    """Handle out-of-range or missing query parameters"""
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "detail": "Invalid input provided",
            "status_code": 422
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors without leaking upstream messages"""
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "detail": "An unexpected error occurred. Please try again later.",
            "status_code": 500
        }
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/", tags=["General"])
async def root():
    """API root endpoint"""
    return {
        "message": "Hazard Globe API",
        "version": __version__,
        "documentation": "/docs",
        "endpoints": {
            "health": "/api/health",
            "hazards": "/api/hazards",
            "storms": "/api/storms",
            "earthquakes": "/api/earthquakes",
            "weather": "/api/weather/current",
            "forecast": "/api/weather/forecast",
            "region": "/api/region/check",
            "names": "/api/names/{name}",
        }
    }


@app.get("/api/health", tags=["General"])
async def health():
    """Health check endpoint"""
    snapshot = refresher.snapshot
    return {
        "status": "healthy",
        "version": __version__,
        "weather_configured": hazard_service.weather.configured,
        "refresh_running": refresher.running,
        "refresh_interval_s": refresher.interval,
        "last_refresh_ms": snapshot.fetched_at_ms if snapshot else None,
        "storm_sources": [s.name for s in hazard_service.storms.sources],
    }


@app.get("/api/hazards", tags=["Hazards"])
async def get_hazards():
    """
    Latest storms, earthquakes and low-pressure areas in one response.

    Served from the periodic refresh; the first call loads a snapshot if
    the refresh has not produced one yet.
    """
    snapshot = await refresher.latest()
    return snapshot.to_dict()


@app.get("/api/storms", tags=["Hazards"])
async def get_storms():
    """
    Active tropical cyclones.

    An empty list means no source reported an active storm.
    """
    storms = await hazard_service.storms.fetch_storms()
    return {"storms": [s.to_dict() for s in storms], "count": len(storms)}


@app.get("/api/earthquakes", tags=["Hazards"])
async def get_earthquakes(
    min_magnitude: float = Query(4.5, ge=0.0, le=10.0, description="Minimum magnitude"),
    limit: int = Query(50, ge=1, le=500, description="Maximum number of events"),
):
    """
    Earthquakes from the last 7 days, strongest first.

    Example: `/api/earthquakes?min_magnitude=5&limit=20`
    """
    quakes = await hazard_service.quakes.fetch_quakes(min_magnitude, limit)
    return {
        "min_magnitude": min_magnitude,
        "earthquakes": [q.to_dict() for q in quakes],
        "count": len(quakes),
    }


@app.get("/api/weather/current", response_model=WeatherResponse, tags=["Weather"])
async def get_current_weather(
    lat: float = Query(..., ge=-90.0, le=90.0, description="Latitude"),
    lon: float = Query(..., ge=-180.0, le=180.0, description="Longitude"),
):
    """
    Current weather at a coordinate.

    `weather` is null when no provider is configured or the providers failed;
    `configured` tells the two apart.
    """
    weather = await hazard_service.weather.fetch_current(lat, lon)
    return WeatherResponse(
        lat=lat,
        lon=lon,
        configured=hazard_service.weather.configured,
        weather=weather.to_dict() if weather else None,
    )


@app.get("/api/weather/forecast", response_model=ForecastResponse, tags=["Weather"])
async def get_weather_forecast(
    lat: float = Query(..., ge=-90.0, le=90.0, description="Latitude"),
    lon: float = Query(..., ge=-180.0, le=180.0, description="Longitude"),
):
    """Up to five forecast steps at a coordinate"""
    forecast = await hazard_service.weather.fetch_forecast(lat, lon)
    return ForecastResponse(
        lat=lat,
        lon=lon,
        configured=hazard_service.weather.configured,
        forecast=[entry.to_dict() for entry in forecast] if forecast is not None else None,
    )


@app.get("/api/region/check", response_model=RegionCheck, tags=["Helpers"])
async def check_region(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
):
    """Check a coordinate against the Philippine Area of Responsibility"""
    return RegionCheck(
        lat=lat,
        lon=lon,
        is_in_region=is_in_region(lat, lon),
        distance_to_region_km=round(distance_to_region_km(lat, lon), 1),
    )


@app.get("/api/names/{name}", response_model=NameLookup, tags=["Helpers"])
async def lookup_name(
    name: str = Path(..., min_length=2, max_length=100, description="International name, e.g. 'Typhoon Mawar'")
):
    """Resolve the PAGASA local name for a storm"""
    return NameLookup(international_name=clean_name(name), local_name=local_name(name))


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
