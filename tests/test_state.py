"""
Unit tests for pondcalc.state: the validate -> calculate pipeline.
"""
import math

import pytest

from pondcalc import state as s
from pondcalc.models import Bottleneck, ErrorKind, UnitKind


@pytest.fixture
def app(config):
    return s.initial_state(config)


class TestInitialState:
    def test_one_unit_each_and_a_result(self, app, config):
        assert len(app.excavators) == 1
        assert len(app.trucks) == 1
        assert app.pond.length == config.pond.length
        assert app.result is not None and app.result.is_valid
        assert app.last_valid_result == app.result
        assert not app.info_banner_dismissed

    def test_default_numbers(self, app):
        # 50 x 30 x 6 ft = 333.3 cy; truck 60/15 * 12 * 0.8 = 38.4 cy/hr
        assert app.result.bottleneck is Bottleneck.HAULING
        assert app.result.hauling_rate == pytest.approx(38.4)
        assert app.result.timeline_days == math.ceil((9000 / 27) / 38.4 / 8)


class TestEditField:
    def test_valid_edit_updates_value(self, app, config):
        new = s.edit_field(app, "pond.depth", "10", config)
        assert new.pond.depth == 10.0
        assert "pond.depth" not in new.raw_inputs
        assert new.error_for("pond.depth") is None
        assert app.pond.depth == config.pond.depth

    def test_invalid_edit_keeps_value_and_records_error(self, app, config):
        new = s.edit_field(app, "excavators.1.bucket_capacity", "-1", config)
        assert new.excavators.get(1).bucket_capacity == 2.5
        assert new.raw_inputs["excavators.1.bucket_capacity"] == "-1"
        assert new.error_for("excavators.1.bucket_capacity").kind is ErrorKind.OUT_OF_RANGE
        assert s.display_text(new, "excavators.1.bucket_capacity") == "-1"

    def test_fixing_a_field_clears_its_error(self, app, config):
        bad = s.edit_field(app, "trucks.1.capacity", "abc", config)
        good = s.edit_field(bad, "trucks.1.capacity", "20", config)
        assert good.error_for("trucks.1.capacity") is None
        assert good.trucks.get(1).capacity == 20.0
        assert s.display_text(good, "trucks.1.capacity") == "20"

    def test_edit_for_removed_unit_is_ignored(self, app, config):
        assert s.edit_field(app, "excavators.42.cycle_time", "2", config) is app

    @pytest.mark.parametrize("key", ["pond", "pond.volume", "boats.1.capacity", "trucks.x.capacity", "trucks.1.cycle_time"])
    def test_unknown_field_key_raises(self, key):
        with pytest.raises(KeyError):
            s.field_kind_for(key)


class TestRecalculate:
    def test_invalid_input_suppresses_result_and_keeps_last_valid(self, app, config):
        previous = app.result
        new = s.recalculate(s.edit_field(app, "excavators.1.bucket_capacity", "-1", config), config)

        assert new.result is None
        assert new.has_errors
        assert new.last_valid_result == previous
        assert new.is_stale

    def test_recovering_produces_fresh_result(self, app, config):
        broken = s.recalculate(s.edit_field(app, "pond.length", "abc", config), config)
        fixed = s.recalculate(s.edit_field(broken, "pond.length", "100", config), config)
        assert fixed.result is not None
        assert not fixed.is_stale
        assert fixed.result.total_volume == pytest.approx(100 * 30 * 6 / 27)
        assert fixed.last_valid_result == fixed.result

    def test_typed_error_reported_once(self, app, config):
        new = s.recalculate(s.edit_field(app, "pond.depth", "", config), config)
        assert [e.field for e in new.errors] == ["pond.depth"]
        assert new.errors[0].kind is ErrorKind.REQUIRED

    def test_all_trucks_inactive_is_a_fleet_error(self, app, config):
        new = s.recalculate(s.set_unit_active(app, UnitKind.TRUCK, 1, False), config)
        assert new.result is None
        assert new.error_for("trucks").kind is ErrorKind.FLEET_CONSTRAINT

    def test_adding_excavator_never_increases_days(self, app, config):
        loaded = app
        for _ in range(3):
            loaded = s.add_truck(loaded, config)
        before = s.recalculate(loaded, config).result.timeline_days
        after = s.recalculate(s.add_excavator(loaded, config), config).result.timeline_days
        assert after <= before


class TestFleetEdits:
    def test_add_and_remove(self, app, config):
        two = s.add_excavator(app, config)
        assert [u.id for u in two.excavators] == [1, 2]
        assert two.excavators.get(2).name == "Excavator 2"
        one = s.remove_excavator(two, 2)
        assert [u.id for u in one.excavators] == [1]

    def test_cannot_remove_last_truck(self, app):
        assert s.remove_truck(app, 1) is app

    def test_add_beyond_limit_is_rejected(self, app, config):
        state = app
        for _ in range(config.fleet_limits.max_excavators + 3):
            state = s.add_excavator(state, config)
        assert len(state.excavators) == config.fleet_limits.max_excavators

    def test_remove_drops_pending_text_for_that_unit(self, app, config):
        state = s.add_truck(app, config)
        state = s.edit_field(state, "trucks.2.capacity", "oops", config)
        state = s.edit_field(state, "pond.width", "oops", config)
        state = s.remove_truck(state, 2)
        assert "trucks.2.capacity" not in state.raw_inputs
        assert "pond.width" in state.raw_inputs

    def test_apply_preset_overwrites_specs(self, app, config):
        preset = config.excavator_presets[-1]
        state = s.edit_field(app, "excavators.1.cycle_time", "bad", config)
        state = s.apply_preset(state, UnitKind.EXCAVATOR, 1, preset)
        unit = state.excavators.get(1)
        assert (unit.name, unit.bucket_capacity, unit.cycle_time) == (
            preset.name, preset.bucket_capacity, preset.cycle_time
        )
        assert state.error_for("excavators.1.cycle_time") is None

    def test_rename_strips_whitespace(self, app):
        assert s.rename_unit(app, UnitKind.TRUCK, 1, "  Red truck ").trucks.get(1).name == "Red truck"


class TestPreferences:
    def test_dismiss_banner(self, app):
        assert s.dismiss_banner(app).info_banner_dismissed
        assert not app.info_banner_dismissed

    def test_set_preference_returns_new_mapping(self, app):
        new = s.set_preference(app, "ui_dark", True)
        assert new.preferences["ui_dark"] is True
        assert "ui_dark" not in app.preferences
