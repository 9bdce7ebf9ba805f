"""
Unit tests for pondcalc.storage: saved state, corruption and migration.
"""
import json

import pytest

from pondcalc import state as s
from pondcalc.settings import STORAGE_KEY, STORAGE_PATH_ENV
from pondcalc.storage import (
    KeyValueStore, clear_state, deserialize_state, load_state, save_preference, save_state,
    serialize_state, StoredStateError,
)


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(str(tmp_path / "storage.json"))


def assert_defaults(state, config):
    assert len(state.excavators) == 1
    assert len(state.trucks) == 1
    assert state.excavators.units[0].bucket_capacity == config.default_excavator.bucket_capacity
    assert state.trucks.units[0].capacity == config.default_truck.capacity
    assert state.pond == s.default_pond(config)
    assert state.result is not None


class TestKeyValueStore:
    def test_set_get_remove(self, store):
        assert store.get_item("a") is None
        assert store.set_item("a", "1")
        assert store.get_item("a") == "1"
        assert store.remove_item("a")
        assert store.get_item("a") is None

    def test_keys_are_independent(self, store):
        store.set_item("a", "1")
        store.set_item("b", "2")
        store.remove_item("a")
        assert store.get_item("b") == "2"

    def test_garbage_file_reads_as_empty(self, store):
        with open(store.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert store.get_item(STORAGE_KEY) is None

    def test_unwritable_location_returns_false(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        store = KeyValueStore(str(blocker / "storage.json"))
        assert store.set_item("a", "1") is False

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv(STORAGE_PATH_ENV, str(tmp_path / "x.json"))
        assert KeyValueStore.from_env().path == str(tmp_path / "x.json")


class TestRoundTrip:
    def test_save_then_load_restores_fleets_and_pond(self, store, config):
        state = s.initial_state(config)
        state = s.add_excavator(state, config)
        state = s.edit_field(state, "excavators.2.bucket_capacity", "4", config)
        state = s.set_unit_active(state, s.UnitKind.EXCAVATOR, 1, False)
        state = s.edit_field(state, "pond.depth", "9", config)
        state = s.set_preference(state, "ui_dark", True)
        state = s.recalculate(state, config)

        assert save_state(store, state)
        loaded = load_state(store, config)

        assert loaded.excavators.units == state.excavators.units
        assert loaded.trucks.units == state.trucks.units
        assert loaded.pond == state.pond
        assert loaded.preferences["ui_dark"] is True
        assert loaded.result == state.result
        # ids keep counting after the restored ones
        assert loaded.excavators.next_id == 3

    def test_banner_dismissal_is_not_persisted(self, store, config):
        state = s.dismiss_banner(s.initial_state(config))
        blob = serialize_state(state)
        assert "info_banner_dismissed" not in json.dumps(blob)

        save_state(store, state)
        assert not load_state(store, config).info_banner_dismissed

    def test_save_preference_persists_without_recalculating(self, store, config):
        state = s.edit_field(s.initial_state(config), "pond.depth", "x", config)

        updated = save_preference(store, state, "ui_dark", True)

        assert updated.preferences["ui_dark"] is True
        assert updated.result == state.result
        assert load_state(store, config).preferences["ui_dark"] is True

    def test_clear_state(self, store, config):
        save_state(store, s.initial_state(config))
        clear_state(store)
        assert store.get_item(STORAGE_KEY) is None


class TestBadStoredData:
    def test_nothing_saved_gives_defaults(self, store, config):
        assert_defaults(load_state(store, config), config)

    @pytest.mark.parametrize("blob", [
        "{this is not json",
        '{"corrupted": true}',
        "[1, 2, 3]",
        "null",
        '{"excavators": [], "trucks": [], "pond": {}}',
        '{"excavators": [{"id": 1, "bucketCapacity": "big", "cycleTime": 2}], "trucks": [], "pond": {}}',
    '{"pondLength": ' + "9" * 400 + "}",
    "[" * 100000 + "]" * 100000,
    ])
    def test_unusable_blob_gives_defaults(self, store, config, blob):
        store.set_item(STORAGE_KEY, blob)
        assert_defaults(load_state(store, config), config)

    @pytest.mark.parametrize("raw", [1e400, "1e999", "nan", "-inf"])
    def test_non_finite_number_rejected(self, config, raw):
        blob = serialize_state(s.initial_state(config))
        blob["pond"]["length"] = raw
        with pytest.raises(StoredStateError, match="pond.length"):
            deserialize_state(blob, config)

    @pytest.mark.parametrize("raw", ["false", 0, 1, "yes"])
    def test_is_active_must_be_boolean(self, config, raw):
        blob = serialize_state(s.initial_state(config))
        blob["trucks"][0]["isActive"] = raw
        with pytest.raises(StoredStateError, match="isActive"):
            deserialize_state(blob, config)

    def test_string_false_active_flag_gives_defaults(self, store, config):
        blob = serialize_state(s.initial_state(config))
        blob["excavators"][0]["isActive"] = "false"
        store.set_item(STORAGE_KEY, json.dumps(blob))
        assert_defaults(load_state(store, config), config)

    def test_deeply_nested_file_reads_as_empty(self, store):
        with open(store.path, "w", encoding="utf-8") as f:
            f.write("[" * 100000 + "]" * 100000)
        assert store.get_item(STORAGE_KEY) is None

    def test_duplicate_ids_rejected(self, config):
        unit = {"id": 1, "bucketCapacity": 2.5, "cycleTime": 2.0}
        truck = {"id": 1, "capacity": 12, "roundTripTime": 15}
        data = {
            "excavators": [unit, unit], "trucks": [truck],
            "pond": {"length": 1, "width": 1, "depth": 1, "workHoursPerDay": 8},
        }
        with pytest.raises(StoredStateError):
            deserialize_state(data, config)

    def test_out_of_range_saved_value_loads_but_flags_error(self, store, config):
        blob = serialize_state(s.initial_state(config))
        blob["pond"]["depth"] = 500
        store.set_item(STORAGE_KEY, json.dumps(blob))

        loaded = load_state(store, config)

        assert loaded.pond.depth == 500
        assert loaded.result is None
        assert loaded.error_for("pond.depth") is not None


class TestLegacyMigration:
    def test_flat_fields_seed_single_unit_fleets(self, store, config):
        store.set_item(STORAGE_KEY, json.dumps({
            "excavatorCapacity": "2.5",
            "truckCapacity": "15",
            "pondLength": "50",
            "pondWidth": "30",
        }))

        loaded = load_state(store, config)

        assert len(loaded.excavators) == 1
        assert len(loaded.trucks) == 1
        assert loaded.excavators.units[0].bucket_capacity == 2.5
        assert loaded.excavators.units[0].cycle_time == config.default_excavator.cycle_time
        assert loaded.trucks.units[0].capacity == 15.0
        assert loaded.pond.length == 50.0
        assert loaded.pond.depth == config.pond.depth
        assert loaded.result is not None

    def test_migrated_fleet_can_grow(self, store, config):
        store.set_item(STORAGE_KEY, json.dumps({"excavatorCapacity": "3"}))
        loaded = s.add_excavator(load_state(store, config), config)
        assert [u.id for u in loaded.excavators] == [1, 2]

    def test_legacy_garbage_value_gives_defaults(self, store, config):
        store.set_item(STORAGE_KEY, json.dumps({"pondLength": "fifty"}))
        assert_defaults(load_state(store, config), config)
