"""Feature and FeatureCollection dataclasses for the attractions catalogue.

All coordinates are stored in GeoJSON convention: [lng, lat] or [lng, lat, alt].
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from numbers import Real
from typing import Any

REQUIRED_PROPERTIES = ("NAME", "CATEGORY", "ADDRESS_FULL", "CITY")

DEFAULT_COLLECTION_NAME = "Places of Interest and Attractions - 4326"
DEFAULT_CRS_NAME = "urn:ogc:def:crs:OGC:1.3:CRS84"


def default_crs(name: str = DEFAULT_CRS_NAME) -> dict:
    """Named CRS descriptor in the legacy GeoJSON 2008 form."""
    return {"type": "name", "properties": {"name": name}}


@dataclass
class Geometry:
    """A tagged shape: a GeoJSON type name plus its raw coordinate tree.

    Attributes:
        type: GeoJSON geometry type ("Point", "MultiPoint", "Polygon", ...).
        coordinates: Nested coordinate arrays, kept exactly as read.
            Point: [lng, lat]
            MultiPoint: [[lng, lat], ...]
            Polygon: [[[lng, lat], ...]]  (list of rings)
    """

    type: str
    coordinates: Any = None

    @classmethod
    def default(cls) -> Geometry:
        """Placeholder geometry for attractions created without one."""
        return cls(type="MultiPoint", coordinates=[[0, 0]])

    def first_point(self) -> tuple[float, float] | None:
        """Return the first (lng, lat) pair in the coordinate tree.

        Descends into the first element of each nested list until it reaches
        a list of numbers. Returns None when no such pair exists.
        """
        node = self.coordinates
        while isinstance(node, (list, tuple)) and node:
            head = node[0]
            if _is_number(head):
                if len(node) < 2 or not _is_number(node[1]):
                    return None
                return float(node[0]), float(node[1])
            node = head
        return None


@dataclass
class Feature:
    """A single attraction.

    Attributes:
        id: Store-assigned identifier, unique within the collection. None for
            features read from a document that carries no usable `_id`.
        properties: Open key-value attributes (NAME, CATEGORY, ...). Never
            contains the id; the codec writes it as ``_id`` on disk.
        geometry: Shape of the attraction, or None if the document has none.
        extra: Any other top-level keys found on the feature, carried through.
    """

    id: int | None
    properties: dict[str, Any]
    geometry: Geometry | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass
class FeatureCollection:
    """The full catalogue document: metadata plus an ordered feature list.

    Attributes:
        name: Collection name, preserved verbatim.
        crs: Coordinate reference system descriptor, never interpreted.
        features: Features in document order.
        extra: Other top-level document keys, carried through.
    """

    name: str = DEFAULT_COLLECTION_NAME
    crs: dict | None = field(default_factory=default_crs)
    features: list[Feature] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.features)

    def ids(self) -> list[int | None]:
        return [f.id for f in self.features]

    def index_of(self, feature_id: int) -> int:
        """Index of the first feature with this id, or -1."""
        for idx, feature in enumerate(self.features):
            if feature.id == feature_id:
                return idx
        return -1

    def next_id(self) -> int:
        """Next identifier to allocate: max existing id + 1, or 1 if empty."""
        return max((f.id or 0 for f in self.features), default=0) + 1

    def derive(self, name: str, features: list[Feature]) -> FeatureCollection:
        """New collection with the same CRS and a different name/feature list."""
        return FeatureCollection(
            name=name,
            crs=copy.deepcopy(self.crs),
            features=list(features),
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)
