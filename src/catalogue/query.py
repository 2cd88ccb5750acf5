"""Read-only queries over a collection snapshot.

None of these functions modify the collection they are given; results are
new FeatureCollections that share the source CRS.
"""

from __future__ import annotations

import math
from typing import Any

from catalogue.errors import BadRequest
from catalogue.feature import Feature, FeatureCollection

SEARCH_RESULTS_NAME = "Search Results"
NEARBY_RESULTS_NAME = "Nearby Attractions"

DEFAULT_RADIUS_KM = 5.0
# Rough length of one degree of latitude.
KM_PER_DEGREE = 111.0


def search(
    collection: FeatureCollection,
    query: str | None = None,
    category: str | None = None,
) -> FeatureCollection:
    """Filter by free text and/or category.

    Text matches a case-insensitive substring of NAME or ATTRACTION. Category
    must equal CATEGORY ignoring case. With both, a feature must match both.
    """
    features = list(collection.features)

    if query:
        needle = query.lower()
        features = [
            f for f in features
            if needle in _lower(f.get("NAME")) or needle in _lower(f.get("ATTRACTION"))
        ]

    if category:
        wanted = category.lower()
        features = [
            f for f in features
            if f.get("CATEGORY") is not None and _lower(f.get("CATEGORY")) == wanted
        ]

    return collection.derive(SEARCH_RESULTS_NAME, features)


def find_nearby(
    collection: FeatureCollection,
    lat: Any,
    lng: Any,
    radius_km: Any = DEFAULT_RADIUS_KM,
    km_per_degree: float = KM_PER_DEGREE,
) -> FeatureCollection:
    """Features whose first point lies within ``radius_km`` of (lat, lng).

    Distance is the planar length of the degree offset scaled to kilometres,
    which is only accurate over short ranges. Features with no extractable
    point are skipped.

    Raises:
        BadRequest: If lat or lng is missing, or any argument is not numeric.
    """
    if lat is None or lng is None or lat == "" or lng == "":
        raise BadRequest("Latitude and longitude are required")
    origin_lat = _parse_float(lat, "lat")
    origin_lng = _parse_float(lng, "lng")
    radius = DEFAULT_RADIUS_KM if radius_km is None else _parse_float(radius_km, "radius")

    nearby = [
        f for f in collection.features
        if _within(f, origin_lat, origin_lng, radius, km_per_degree)
    ]
    return collection.derive(NEARBY_RESULTS_NAME, nearby)


def distance_km(
    lat1: float, lng1: float, lat2: float, lng2: float,
    km_per_degree: float = KM_PER_DEGREE,
) -> float:
    """Approximate distance: Euclidean length in degrees times km per degree."""
    return math.hypot(lat1 - lat2, lng1 - lng2) * km_per_degree


def list_categories(collection: FeatureCollection) -> list[str]:
    """Distinct CATEGORY values in order of first appearance."""
    seen: dict[str, None] = {}
    for feature in collection.features:
        category = feature.get("CATEGORY")
        if not category:
            continue
        try:
            seen.setdefault(category, None)
        except TypeError:
            # unhashable values such as lists
            continue
    return list(seen)


def _within(
    feature: Feature, lat: float, lng: float, radius: float, km_per_degree: float
) -> bool:
    if feature.geometry is None:
        return False
    point = feature.geometry.first_point()
    if point is None:
        return False
    f_lng, f_lat = point
    return distance_km(f_lat, f_lng, lat, lng, km_per_degree) <= radius


def _parse_float(value: Any, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"Parameter '{name}' must be a number, got {value!r}")
    if math.isnan(result):
        raise BadRequest(f"Parameter '{name}' must be a number, got {value!r}")
    return result


def _lower(value: Any) -> str:
    if value is None:
        return ""
    return str(value).lower()
