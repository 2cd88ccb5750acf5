"""Attractions catalogue — a GeoJSON-file backed feature store.

DocumentStore owns the file, FeatureRepository does CRUD on it, and the
query module filters snapshots by text, category and proximity.
"""

from catalogue.errors import (
    BadRequest,
    CatalogueError,
    NotFound,
    PersistenceFailure,
    ValidationError,
)
from catalogue.feature import Feature, FeatureCollection, Geometry
from catalogue.repository import FeatureRepository
from catalogue.store import DocumentStore

__all__ = [
    "BadRequest",
    "CatalogueError",
    "DocumentStore",
    "Feature",
    "FeatureCollection",
    "FeatureRepository",
    "Geometry",
    "NotFound",
    "PersistenceFailure",
    "ValidationError",
]
