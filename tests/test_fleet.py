"""
Unit tests for pondcalc.fleet.
"""
from pondcalc import fleet as fl
from pondcalc.models import Excavator


def make(uid):
    return Excavator(id=uid, name=f"Excavator {uid}", bucket_capacity=2.5, cycle_time=2.0)


class TestAddUnit:
    def test_add_appends_with_fresh_id(self):
        fleet = fl.fleet_of(make(1))
        fleet = fl.add_unit(fleet, make, max_units=10)
        assert [u.id for u in fleet] == [1, 2]
        assert fleet.next_id == 3

    def test_add_at_max_is_rejected(self):
        fleet = fl.fleet_of(make(1))
        for _ in range(20):
            fleet = fl.add_unit(fleet, make, max_units=10)
        assert len(fleet) == 10
        assert not fl.can_add(fleet, 10)

    def test_add_does_not_mutate_input(self):
        original = fl.fleet_of(make(1))
        fl.add_unit(original, make, max_units=10)
        assert len(original) == 1

    def test_ids_are_not_reused_after_removal(self):
        fleet = fl.fleet_of(make(1), make(2))
        fleet = fl.remove_unit(fleet, 2)
        fleet = fl.add_unit(fleet, make, max_units=10)
        assert [u.id for u in fleet] == [1, 3]


class TestRemoveUnit:
    def test_remove_last_unit_is_rejected(self):
        fleet = fl.fleet_of(make(1))
        assert fl.remove_unit(fleet, 1) is fleet
        assert not fl.can_remove(fleet)

    def test_remove_matching_unit(self):
        fleet = fl.fleet_of(make(1), make(2), make(3))
        assert [u.id for u in fl.remove_unit(fleet, 2)] == [1, 3]

    def test_remove_unknown_id_is_noop(self):
        fleet = fl.fleet_of(make(1), make(2))
        assert fl.remove_unit(fleet, 99) is fleet


class TestUpdateUnit:
    def test_update_changes_only_target_and_keeps_order(self):
        fleet = fl.fleet_of(make(1), make(2), make(3))
        updated = fl.update_unit(fleet, 2, bucket_capacity=4.0, name="Big")

        assert [u.id for u in updated] == [1, 2, 3]
        assert updated.get(2).bucket_capacity == 4.0
        assert updated.get(2).name == "Big"
        assert updated.get(1) == fleet.get(1)
        assert updated.get(3) == fleet.get(3)
        assert fleet.get(2).bucket_capacity == 2.5

    def test_update_unknown_id_is_noop(self):
        fleet = fl.fleet_of(make(1))
        assert fl.update_unit(fleet, 5, bucket_capacity=4.0) is fleet

    def test_update_ignores_id_and_unknown_fields(self):
        fleet = fl.fleet_of(make(1))
        updated = fl.update_unit(fleet, 1, id=7, capacity=30.0, cycle_time=1.5)
        unit = updated.get(1)
        assert unit.id == 1
        assert unit.cycle_time == 1.5
        assert not hasattr(unit, "capacity")

    def test_active_count(self):
        fleet = fl.fleet_of(make(1), make(2))
        fleet = fl.update_unit(fleet, 2, is_active=False)
        assert fleet.active_count == 1
