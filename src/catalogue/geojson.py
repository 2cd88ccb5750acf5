"""GeoJSON codec for the catalogue document using stdlib json.

The document is a FeatureCollection whose features keep their identifier in
``properties._id``. Decoding moves it onto ``Feature.id``; encoding puts it
back as the first property key.
"""

from __future__ import annotations

import json
from typing import Any

from catalogue.feature import (
    DEFAULT_COLLECTION_NAME,
    Feature,
    FeatureCollection,
    Geometry,
)

ID_KEY = "_id"

_COLLECTION_KEYS = ("type", "name", "crs", "features")
_FEATURE_KEYS = ("type", "properties", "geometry")


def parse_collection(geojson_string: str) -> FeatureCollection:
    """Parse a GeoJSON document string into a FeatureCollection.

    Raises:
        ValueError: If the content is not JSON or not a FeatureCollection.
    """
    try:
        data = json.loads(geojson_string)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValueError(f"Invalid GeoJSON: {e}") from e
    return decode_collection(data)


def decode_collection(data: Any) -> FeatureCollection:
    """Convert a decoded GeoJSON dict into a FeatureCollection."""
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise ValueError("Document is not a GeoJSON FeatureCollection")

    raw_features = data.get("features") or []
    if not isinstance(raw_features, list):
        raise ValueError("FeatureCollection 'features' must be a list")

    return FeatureCollection(
        name=data.get("name", DEFAULT_COLLECTION_NAME),
        crs=data.get("crs"),
        features=[decode_feature(raw) for raw in raw_features if isinstance(raw, dict)],
        extra={k: v for k, v in data.items() if k not in _COLLECTION_KEYS},
    )


def decode_feature(raw: dict) -> Feature:
    """Convert one GeoJSON Feature dict into a Feature."""
    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}
    properties = dict(properties)

    feature_id = _as_identifier(properties.get(ID_KEY))
    if feature_id is not None:
        del properties[ID_KEY]

    return Feature(
        id=feature_id,
        properties=properties,
        geometry=decode_geometry(raw.get("geometry")),
        extra={k: v for k, v in raw.items() if k not in _FEATURE_KEYS},
    )


def decode_geometry(raw: Any) -> Geometry | None:
    """Convert a GeoJSON geometry dict into a Geometry, or None if absent."""
    if not isinstance(raw, dict):
        return None
    return Geometry(type=str(raw.get("type", "")), coordinates=raw.get("coordinates"))


def encode_collection(collection: FeatureCollection) -> dict:
    """Export a FeatureCollection to a GeoJSON dict."""
    data: dict[str, Any] = {
        "type": "FeatureCollection",
        "name": collection.name,
        "crs": collection.crs,
    }
    data.update(collection.extra)
    data["features"] = [encode_feature(f) for f in collection.features]
    return data


def encode_feature(feature: Feature) -> dict:
    """Export a Feature to a GeoJSON Feature dict."""
    properties: dict[str, Any] = {}
    if feature.id is not None:
        properties[ID_KEY] = feature.id
    properties.update(feature.properties)

    data: dict[str, Any] = {"type": "Feature", "properties": properties}
    data["geometry"] = encode_geometry(feature.geometry)
    data.update(feature.extra)
    return data


def encode_geometry(geometry: Geometry | None) -> dict | None:
    if geometry is None:
        return None
    return {"type": geometry.type, "coordinates": geometry.coordinates}


def dump_collection(collection: FeatureCollection) -> str:
    """Serialize a FeatureCollection to an indented GeoJSON string."""
    return json.dumps(encode_collection(collection), indent=2, ensure_ascii=False)


def _as_identifier(value: Any) -> int | None:
    """Non-negative integer id, accepting integral floats such as 3.0."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 0:
        return value
    return None
