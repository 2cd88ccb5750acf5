"""FeatureRepository — CRUD over the catalogue document.

Each call loads a fresh collection from the DocumentStore, works on that
private copy and, for mutations, saves it back before returning:
  load() -> find / append / merge / remove -> save()
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from loguru import logger

from catalogue.errors import NotFound, PersistenceFailure, ValidationError
from catalogue.feature import REQUIRED_PROPERTIES, Feature, FeatureCollection, Geometry
from catalogue.geojson import ID_KEY, decode_geometry
from catalogue.store import DocumentStore


class FeatureRepository:
    """Create, read, update and delete attractions in a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all(self) -> FeatureCollection:
        """Return the whole collection as stored."""
        return self.store.load()

    def get_by_id(self, feature_id: int) -> Feature:
        """Return the first feature with this id.

        Raises:
            NotFound: If no feature matches.
        """
        collection = self.store.load()
        idx = collection.index_of(feature_id)
        if idx == -1:
            raise NotFound(feature_id)
        return collection.features[idx]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        properties: Mapping[str, Any] | None,
        geometry: Geometry | Mapping | None = None,
    ) -> Feature:
        """Append a new attraction with the next free id.

        Any id supplied in ``properties`` is discarded. Without a geometry the
        attraction is placed at (0, 0).

        Raises:
            ValidationError: If a required property is missing or empty.
            PersistenceFailure: If the document could not be saved.
        """
        props = dict(properties or {})
        missing = [key for key in REQUIRED_PROPERTIES if not props.get(key)]
        if missing:
            raise ValidationError(missing)
        props.pop(ID_KEY, None)

        with self.store.writing():
            collection = self.store.load()
            feature = Feature(
                id=collection.next_id(),
                properties=props,
                geometry=_as_geometry(geometry) or Geometry.default(),
            )
            collection.features.append(feature)
            if not self.store.save(collection):
                raise PersistenceFailure("save")

        logger.info(f"Attraction created: {feature.id} ({props['NAME']})")
        return feature

    def update(
        self,
        feature_id: int,
        properties: Mapping[str, Any] | None = None,
        geometry: Geometry | Mapping | None = None,
    ) -> Feature:
        """Merge a properties patch into an attraction.

        Keys in the patch overwrite existing ones, all other keys are kept and
        the id never changes. Geometry is replaced only when one is given.

        Raises:
            NotFound: If no feature has this id.
            PersistenceFailure: If the document could not be saved.
        """
        with self.store.writing():
            collection = self.store.load()
            idx = collection.index_of(feature_id)
            if idx == -1:
                raise NotFound(feature_id)

            current = collection.features[idx]
            merged = {**current.properties, **(properties or {})}
            merged.pop(ID_KEY, None)

            replacement = _as_geometry(geometry)
            updated = Feature(
                id=feature_id,
                properties=merged,
                geometry=replacement if replacement is not None else current.geometry,
                extra=current.extra,
            )
            collection.features[idx] = updated
            if not self.store.save(collection):
                raise PersistenceFailure("update")

        logger.info(f"Attraction updated: {feature_id}")
        return updated

    def delete(self, feature_id: int) -> None:
        """Remove the first attraction with this id.

        Raises:
            NotFound: If no feature has this id; the document is untouched.
            PersistenceFailure: If the document could not be saved.
        """
        with self.store.writing():
            collection = self.store.load()
            idx = collection.index_of(feature_id)
            if idx == -1:
                raise NotFound(feature_id)
            del collection.features[idx]
            if not self.store.save(collection):
                raise PersistenceFailure("delete")

        logger.info(f"Attraction deleted: {feature_id}")


def _as_geometry(geometry: Geometry | Mapping | None) -> Geometry | None:
    """Accept either a Geometry or a raw GeoJSON geometry mapping."""
    if geometry is None or isinstance(geometry, Geometry):
        return copy.deepcopy(geometry)
    return decode_geometry(dict(geometry))
