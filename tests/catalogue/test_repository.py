"""Tests for FeatureRepository — id allocation, merge-update, delete, failures."""

import json
import threading

import pytest

from catalogue import (
    FeatureRepository,
    Geometry,
    NotFound,
    PersistenceFailure,
    ValidationError,
)
from catalogue.store import DocumentStore

from attraction_samples import make_document, make_feature


@pytest.mark.unit
class TestReads:
    """get_all and get_by_id."""

    def test_get_all_returns_collection(self, repo, seeded):
        fc = repo.get_all()
        assert fc.ids() == [1, 2, 3]
        assert fc.name == "Places of Interest and Attractions - 4326"

    def test_get_all_on_missing_file_is_empty(self, repo):
        assert repo.get_all().features == []

    def test_get_by_id(self, repo, seeded):
        feature = repo.get_by_id(2)
        assert feature.properties["NAME"] == "High Park"

    def test_get_by_id_missing_raises(self, repo, seeded):
        with pytest.raises(NotFound) as exc_info:
            repo.get_by_id(99)
        assert exc_info.value.feature_id == 99

    def test_get_by_id_returns_first_match(self, repo, write_doc):
        write_doc(make_document([
            make_feature(1, "First", "Park"),
            make_feature(1, "Duplicate", "Park"),
        ]))
        assert repo.get_by_id(1).properties["NAME"] == "First"


@pytest.mark.unit
class TestCreate:
    """create() validation and id allocation."""

    def test_first_id_is_one(self, repo, valid_properties):
        assert repo.create(valid_properties).id == 1

    def test_id_is_max_plus_one(self, repo, write_doc, valid_properties):
        write_doc(make_document([
            make_feature(7, "A", "Park"),
            make_feature(3, "B", "Park"),
        ]))
        feature = repo.create(valid_properties)
        assert feature.id == 8
        assert all(feature.id > i for i in (7, 3))

    def test_deleted_id_is_not_reused(self, repo, seeded, valid_properties):
        repo.delete(2)
        assert repo.create(valid_properties).id == 4
        assert repo.get_all().ids() == [1, 3, 4]

    def test_get_after_create_is_equal(self, repo, seeded, valid_properties):
        created = repo.create(valid_properties)
        assert repo.get_by_id(created.id) == created

    def test_default_geometry(self, repo, valid_properties):
        feature = repo.create(valid_properties)
        assert feature.geometry == Geometry("MultiPoint", [[0, 0]])

    def test_geometry_from_mapping(self, repo, valid_properties):
        geometry = {"type": "Point", "coordinates": [-79.3925, 43.6536]}
        feature = repo.create(valid_properties, geometry)
        assert feature.geometry == Geometry("Point", [-79.3925, 43.6536])

    def test_client_id_is_ignored(self, repo, seeded, valid_properties):
        feature = repo.create({**valid_properties, "_id": 1})
        assert feature.id == 4
        assert "_id" not in feature.properties
        assert repo.get_all().ids() == [1, 2, 3, 4]

    def test_extra_properties_kept(self, repo, valid_properties):
        feature = repo.create({**valid_properties, "WEBSITE": "https://ago.ca", "ATTRACTION": "Gallery"})
        stored = repo.get_by_id(feature.id)
        assert stored.properties["WEBSITE"] == "https://ago.ca"
        assert stored.properties["ATTRACTION"] == "Gallery"

    def test_persisted_with_id_in_properties(self, repo, doc_path, valid_properties):
        repo.create(valid_properties)
        data = json.loads(doc_path.read_text(encoding="utf-8"))
        assert data["features"][0]["properties"]["_id"] == 1
        assert data["features"][0]["type"] == "Feature"

    def test_missing_city_rejected(self, repo, seeded, valid_properties):
        before = seeded.read_text(encoding="utf-8")
        props = dict(valid_properties)
        del props["CITY"]
        with pytest.raises(ValidationError) as exc_info:
            repo.create(props)
        assert exc_info.value.missing == ["CITY"]
        assert seeded.read_text(encoding="utf-8") == before

    def test_empty_values_count_as_missing(self, repo, valid_properties):
        props = {**valid_properties, "NAME": "", "ADDRESS_FULL": None}
        with pytest.raises(ValidationError) as exc_info:
            repo.create(props)
        assert exc_info.value.missing == ["NAME", "ADDRESS_FULL"]

    def test_no_properties_lists_all_required(self, repo):
        with pytest.raises(ValidationError) as exc_info:
            repo.create(None)
        assert exc_info.value.missing == ["NAME", "CATEGORY", "ADDRESS_FULL", "CITY"]

    def test_input_mapping_not_mutated(self, repo, valid_properties):
        props = {**valid_properties, "_id": 42}
        repo.create(props)
        assert props["_id"] == 42


@pytest.mark.unit
class TestUpdate:
    """update() merge semantics."""

    def test_patch_overwrites_and_preserves(self, repo, seeded):
        updated = repo.update(1, {"NAME": "CN Tower (EdgeWalk)", "HOURS": "9-22"})
        assert updated.properties["NAME"] == "CN Tower (EdgeWalk)"
        assert updated.properties["HOURS"] == "9-22"
        assert updated.properties["CATEGORY"] == "Landmark"
        assert updated.properties["ATTRACTION"] == "Observation deck"
        assert repo.get_by_id(1) == updated

    def test_id_cannot_be_changed(self, repo, seeded):
        updated = repo.update(2, {"_id": 50, "NAME": "High Park Zoo"})
        assert updated.id == 2
        assert "_id" not in updated.properties
        assert repo.get_all().ids() == [1, 2, 3]

    def test_geometry_untouched_without_replacement(self, repo, seeded):
        before = repo.get_by_id(3).geometry
        assert repo.update(3, {"CITY": "Toronto"}).geometry == before

    def test_geometry_replaced_wholesale(self, repo, seeded):
        geometry = {"type": "Point", "coordinates": [-79.39, 43.66]}
        updated = repo.update(3, None, geometry)
        assert updated.geometry == Geometry("Point", [-79.39, 43.66])
        assert updated.properties["NAME"] == "Royal Ontario Museum"

    def test_missing_id_raises(self, repo, seeded):
        before = seeded.read_text(encoding="utf-8")
        with pytest.raises(NotFound):
            repo.update(99, {"NAME": "Nowhere"})
        assert seeded.read_text(encoding="utf-8") == before

    def test_metadata_preserved(self, repo, write_doc):
        doc = make_document([make_feature(1, "A", "Park")])
        doc["name"] = "Toronto POI"
        path = write_doc(doc)
        repo.update(1, {"NAME": "B"})
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["name"] == "Toronto POI"
        assert data["crs"] == doc["crs"]


@pytest.mark.unit
class TestDelete:
    """delete() removal and not-found."""

    def test_delete_then_get_not_found(self, repo, seeded):
        repo.delete(2)
        with pytest.raises(NotFound):
            repo.get_by_id(2)
        assert repo.get_all().ids() == [1, 3]

    def test_delete_missing_leaves_collection(self, repo, seeded):
        with pytest.raises(NotFound):
            repo.delete(42)
        assert len(repo.get_all().features) == 3


@pytest.mark.unit
class TestPersistenceFailure:
    """A failed save is reported, distinct from other outcomes."""

    @pytest.fixture
    def failing_repo(self, store, seeded, monkeypatch):
        monkeypatch.setattr(store, "save", lambda collection: False)
        return FeatureRepository(store)

    def test_create(self, failing_repo, valid_properties):
        with pytest.raises(PersistenceFailure) as exc_info:
            failing_repo.create(valid_properties)
        assert str(exc_info.value) == "Failed to save attraction"
        assert failing_repo.get_all().ids() == [1, 2, 3]

    def test_update(self, failing_repo):
        with pytest.raises(PersistenceFailure) as exc_info:
            failing_repo.update(1, {"NAME": "X"})
        assert str(exc_info.value) == "Failed to update attraction"
        assert failing_repo.get_by_id(1).properties["NAME"] == "CN Tower"

    def test_delete(self, failing_repo):
        with pytest.raises(PersistenceFailure) as exc_info:
            failing_repo.delete(1)
        assert str(exc_info.value) == "Failed to delete attraction"
        assert failing_repo.get_all().ids() == [1, 2, 3]

    def test_not_found_still_wins(self, failing_repo):
        with pytest.raises(NotFound):
            failing_repo.delete(99)


@pytest.mark.unit
class TestConcurrentWrites:
    """Serialized writers never lose each other's creates."""

    def test_parallel_creates_get_unique_ids(self, doc_path, valid_properties):
        repo = FeatureRepository(DocumentStore(doc_path))
        repo.store.bootstrap()
        errors = []

        def worker(n):
            try:
                repo.create({**valid_properties, "NAME": f"Stop {n}"})
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert errors == []
        assert sorted(repo.get_all().ids()) == list(range(1, 17))


@pytest.mark.unit
class TestFloatIdentifiers:
    """Documents written by other tools may store ids as 3.0."""

    def test_float_id_reachable(self, repo, write_doc):
        write_doc(make_document([make_feature(3.0, "Casa Loma", "Landmark")]))
        assert repo.get_by_id(3).properties["NAME"] == "Casa Loma"

    def test_float_id_counts_for_allocation(self, repo, write_doc, valid_properties):
        write_doc(make_document([make_feature(3.0, "Casa Loma", "Landmark")]))
        assert repo.create(valid_properties).id == 4
