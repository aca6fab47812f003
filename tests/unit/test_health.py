"""HealthStore, damage over time and the Healable capability."""

import logging

import pytest
from hypothesis import given
from hypothesis import strategies as st

from healer.sim.damage import DamageTicker
from healer.sim.health import Healable, HealthStore, apply_heal_to


class TestHealthStore:
    def test_starts_full_by_default(self):
        h = HealthStore(150.0)
        assert h.current_hp == 150.0
        assert h.fraction == pytest.approx(1.0)
        assert not h.is_dead

    def test_initial_hp_is_clamped(self):
        assert HealthStore(100.0, current_hp=250.0).current_hp == 100.0
        assert HealthStore(100.0, current_hp=-5.0).current_hp == 0.0

    def test_damage_clamps_at_zero(self):
        h = HealthStore(100.0)
        h.apply_damage(140.0)
        assert h.current_hp == 0.0
        assert h.is_dead

    def test_damage_on_dead_store_is_noop(self):
        h = HealthStore(100.0, current_hp=0.0)
        h.apply_damage(10.0)
        assert h.current_hp == 0.0

    def test_non_positive_damage_is_noop(self):
        h = HealthStore(100.0, current_hp=50.0)
        h.apply_damage(0.0)
        h.apply_damage(-20.0)
        assert h.current_hp == 50.0

    def test_heal_reports_restored_amount(self):
        h = HealthStore(150.0, current_hp=115.0)
        assert h.apply_heal(15.0) == pytest.approx(15.0)
        assert h.current_hp == pytest.approx(130.0)

    def test_heal_caps_at_max(self):
        h = HealthStore(150.0, current_hp=145.0)
        assert h.apply_heal(15.0) == pytest.approx(5.0)
        assert h.current_hp == 150.0

    def test_full_heal_is_idempotent(self):
        h = HealthStore(150.0)
        assert h.apply_heal(15.0) == 0.0
        assert h.apply_heal(15.0) == 0.0
        assert h.current_hp == 150.0

    def test_reset_to_full(self):
        h = HealthStore(80.0, current_hp=0.0)
        h.reset_to_full()
        assert h.current_hp == 80.0
        assert h.active

    def test_satisfies_healable(self):
        assert isinstance(HealthStore(10.0), Healable)

    @given(
        max_hp=st.floats(min_value=1.0, max_value=1e4),
        ops=st.lists(
            st.tuples(st.sampled_from(["damage", "heal"]), st.floats(min_value=-1e4, max_value=1e4)),
            max_size=30,
        ),
    )
    def test_hp_stays_in_bounds(self, max_hp, ops):
        h = HealthStore(max_hp)
        for kind, amount in ops:
            if kind == "damage":
                h.apply_damage(amount)
            else:
                restored = h.apply_heal(amount)
                assert restored >= 0.0
            assert 0.0 <= h.current_hp <= h.max_hp

    @given(
        max_hp=st.floats(min_value=1.0, max_value=1e6),
        amount=st.floats(min_value=1e-3, max_value=1e6),
    )
    def test_damage_then_equal_heal_restores_exactly_to_max(self, max_hp, amount):
        h = HealthStore(max_hp)
        h.apply_damage(amount)
        h.apply_heal(amount)
        assert h.current_hp == max_hp

    def test_damage_heal_round_trip_rounding_case(self):
        h = HealthStore(3277.185063016211)
        h.apply_damage(1228.9443986310791)
        h.apply_heal(1228.9443986310791)
        assert h.current_hp == h.max_hp


class TestApplyHealTo:
    def test_heals_capable_target(self):
        h = HealthStore(100.0, current_hp=10.0)
        assert apply_heal_to(h, 25.0) == pytest.approx(25.0)

    def test_none_target(self):
        assert apply_heal_to(None, 25.0) == 0.0

    def test_non_positive_amount(self):
        h = HealthStore(100.0, current_hp=10.0)
        assert apply_heal_to(h, 0.0) == 0.0
        assert h.current_hp == 10.0

    def test_incapable_target_warns_and_contributes_nothing(self, caplog):
        with caplog.at_level(logging.WARNING, logger="healer.sim.health"):
            assert apply_heal_to(object(), 25.0) == 0.0
        assert "does not implement apply_heal" in caplog.text

    def test_negative_restore_is_floored(self):
        class Cursed:
            def apply_heal(self, amount: float) -> float:
                return -amount

        assert apply_heal_to(Cursed(), 10.0) == 0.0


class TestDamageTicker:
    def test_fixed_rate(self):
        h = HealthStore(150.0)
        ticker = DamageTicker(h, dps=5.0)
        for _ in range(50):
            ticker.tick(0.02)
        assert h.current_hp == pytest.approx(145.0)

    def test_disabled_and_missing_target(self):
        h = HealthStore(150.0)
        DamageTicker(h, dps=5.0, enabled=False).tick(1.0)
        DamageTicker(None, dps=5.0).tick(1.0)
        assert h.current_hp == 150.0
