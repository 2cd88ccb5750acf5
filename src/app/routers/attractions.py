"""Attractions API — CRUD, search, proximity and category listing.

Endpoints:
  GET    /api/attractions            — Full collection
  GET    /api/attractions/search     — Filter by ?query= and/or ?category=
  GET    /api/attractions/nearby     — Filter by ?lat=&lng=&radius= (km)
  GET    /api/attractions/{id}       — Single attraction
  POST   /api/attractions            — Create
  PUT    /api/attractions/{id}       — Merge-update
  DELETE /api/attractions/{id}       — Delete
  GET    /api/categories             — Distinct categories
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from app.config import settings
from catalogue import (
    BadRequest,
    CatalogueError,
    FeatureRepository,
    NotFound,
    PersistenceFailure,
    ValidationError,
)
from catalogue import query as catalogue_query
from catalogue.geojson import encode_collection, encode_feature

router = APIRouter(prefix="/api", tags=["attractions"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class AttractionIn(BaseModel):
    """Body of POST /api/attractions."""
    properties: Optional[dict[str, Any]] = None
    geometry: Optional[dict[str, Any]] = None


class AttractionPatch(BaseModel):
    """Body of PUT /api/attractions/{id}. Omitted parts are left unchanged."""
    properties: Optional[dict[str, Any]] = None
    geometry: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_repository(request: Request) -> FeatureRepository:
    """Repository created at startup and stored on app state."""
    return request.app.state.repository


def _error_response(exc: CatalogueError) -> JSONResponse:
    """Map a catalogue error to its HTTP response."""
    if isinstance(exc, ValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Missing required fields", "fields": exc.missing},
        )
    if isinstance(exc, NotFound):
        return JSONResponse(status_code=404, content={"error": "Attraction not found"})
    if isinstance(exc, BadRequest):
        return JSONResponse(status_code=400, content={"error": str(exc)})
    if isinstance(exc, PersistenceFailure):
        return JSONResponse(status_code=500, content={"error": str(exc)})
    logger.warning(f"Unmapped catalogue error: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

@router.get("/attractions")
def list_attractions(repo: FeatureRepository = Depends(get_repository)):
    """Return every attraction as a GeoJSON FeatureCollection."""
    return encode_collection(repo.get_all())


@router.get("/attractions/search")
def search_attractions(
    query: Optional[str] = None,
    category: Optional[str] = None,
    repo: FeatureRepository = Depends(get_repository),
):
    """Search by name/attraction text and/or exact category."""
    result = catalogue_query.search(repo.get_all(), query=query, category=category)
    return encode_collection(result)


@router.get("/attractions/nearby")
def nearby_attractions(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    repo: FeatureRepository = Depends(get_repository),
):
    """Attractions within ``radius`` km (default 5) of lat/lng."""
    if not lat or not lng:
        return _error_response(BadRequest("Latitude and longitude are required"))
    try:
        result = catalogue_query.find_nearby(
            repo.get_all(),
            lat,
            lng,
            radius_km=radius if radius else settings.default_radius_km,
            km_per_degree=settings.km_per_degree,
        )
    except BadRequest as e:
        return _error_response(e)
    return encode_collection(result)


@router.get("/attractions/{attraction_id}")
def get_attraction(attraction_id: int, repo: FeatureRepository = Depends(get_repository)):
    """Return a single attraction."""
    try:
        return encode_feature(repo.get_by_id(attraction_id))
    except NotFound as e:
        return _error_response(e)


@router.get("/categories")
def list_categories(repo: FeatureRepository = Depends(get_repository)):
    """Distinct CATEGORY values, in order of first appearance."""
    return {"categories": catalogue_query.list_categories(repo.get_all())}


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

@router.post("/attractions", status_code=201)
def create_attraction(body: AttractionIn, repo: FeatureRepository = Depends(get_repository)):
    """Create an attraction. NAME, CATEGORY, ADDRESS_FULL and CITY are required."""
    try:
        feature = repo.create(body.properties, body.geometry)
    except (ValidationError, PersistenceFailure) as e:
        return _error_response(e)
    return encode_feature(feature)


@router.put("/attractions/{attraction_id}")
def update_attraction(
    attraction_id: int,
    body: AttractionPatch,
    repo: FeatureRepository = Depends(get_repository),
):
    """Merge properties into an attraction; replace geometry if given."""
    try:
        feature = repo.update(attraction_id, body.properties, body.geometry)
    except (NotFound, PersistenceFailure) as e:
        return _error_response(e)
    return encode_feature(feature)


@router.delete("/attractions/{attraction_id}", status_code=204)
def delete_attraction(attraction_id: int, repo: FeatureRepository = Depends(get_repository)):
    """Delete an attraction."""
    try:
        repo.delete(attraction_id)
    except (NotFound, PersistenceFailure) as e:
        return _error_response(e)
    return Response(status_code=204)
