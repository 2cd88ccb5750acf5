"""Shared fixtures for catalogue tests."""

from __future__ import annotations

import json

import pytest

from catalogue import DocumentStore, FeatureRepository

from attraction_samples import make_document, make_feature


@pytest.fixture
def doc_path(tmp_path):
    return tmp_path / "tourist.geojson"


@pytest.fixture
def write_doc(doc_path):
    """Write a raw document dict to the test path."""
    def _write(data):
        doc_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return doc_path
    return _write


@pytest.fixture
def store(doc_path):
    return DocumentStore(doc_path)


@pytest.fixture
def repo(store):
    return FeatureRepository(store)


@pytest.fixture
def seeded(write_doc):
    """Document with three Toronto attractions, ids 1..3."""
    return write_doc(make_document([
        make_feature(1, "CN Tower", "Landmark", -79.3871, 43.6426, ATTRACTION="Observation deck"),
        make_feature(2, "High Park", "Park", -79.4637, 43.6465),
        make_feature(3, "Royal Ontario Museum", "Museum", -79.3948, 43.6677),
    ]))


@pytest.fixture
def valid_properties():
    return {
        "NAME": "Art Gallery of Ontario",
        "CATEGORY": "Museum",
        "ADDRESS_FULL": "317 Dundas St W",
        "CITY": "Toronto",
    }
