"""Observation vector layout, normalization and clamping."""

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from healer.env.observations import (
    OBS_DIM,
    OBS_HIGH,
    OBS_LOW,
    ObservationContext,
    ObservationEncoder,
    ObsIndex,
    hp_fraction,
)
from healer.sim.los import LineOfSight
from healer.sim.world import ArenaWorld


def _ctx(
    self_pos=(0.0, 0.0, 0.0),
    ally_pos=(0.0, 0.0, 0.0),
    self_vel=(0.0, 0.0, 0.0),
    ally_vel=(0.0, 0.0, 0.0),
    self_hp=100.0,
    self_max_hp=100.0,
    ally_hp=150.0,
    ally_max_hp=150.0,
    has_path=False,
    path_length=0.0,
) -> ObservationContext:
    return ObservationContext(
        self_pos=np.asarray(self_pos, dtype=np.float32),
        self_vel=np.asarray(self_vel, dtype=np.float32),
        ally_pos=np.asarray(ally_pos, dtype=np.float32),
        ally_vel=np.asarray(ally_vel, dtype=np.float32),
        self_hp=self_hp,
        self_max_hp=self_max_hp,
        ally_hp=ally_hp,
        ally_max_hp=ally_max_hp,
        has_path=has_path,
        path_length=path_length,
    )


@pytest.fixture
def encoder() -> ObservationEncoder:
    return ObservationEncoder(LineOfSight(None), heal_range=2.5)


class TestLayout:
    def test_shape_and_dtype(self, encoder):
        obs = encoder.encode(_ctx())
        assert obs.shape == (OBS_DIM,)
        assert obs.dtype == np.float32

    def test_displacement_and_distance(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(6.0, 0.0, -3.0)))
        assert obs[ObsIndex.DX] == pytest.approx(0.6)
        assert obs[ObsIndex.DZ] == pytest.approx(-0.3)
        assert obs[ObsIndex.DIST] == pytest.approx(np.hypot(6.0, 3.0) / 10.0)
        assert obs[ObsIndex.IN_HEAL_RANGE] == 0.0

    def test_vertical_offset_is_ignored(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(1.0, 5.0, 0.0)))
        assert obs[ObsIndex.DIST] == pytest.approx(0.1)

    def test_far_ally_is_clamped(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(40.0, 0.0, -40.0)))
        assert obs[ObsIndex.DX] == 1.0
        assert obs[ObsIndex.DZ] == -1.0
        assert obs[ObsIndex.DIST] == 1.0

    def test_heal_range_includes_boundary(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(2.5, 0.0, 0.0)))
        assert obs[ObsIndex.IN_HEAL_RANGE] == 1.0

    def test_closing_speed_along_separation(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(5.0, 0.0, 0.0), ally_vel=(2.0, 0.0, 0.0)))
        assert obs[ObsIndex.CLOSING_SPEED] == pytest.approx(0.4)

        obs = encoder.encode(_ctx(ally_pos=(5.0, 0.0, 0.0), self_vel=(20.0, 0.0, 0.0)))
        assert obs[ObsIndex.CLOSING_SPEED] == -1.0

    def test_closing_speed_zero_when_coincident(self, encoder):
        obs = encoder.encode(_ctx(ally_vel=(3.0, 0.0, 1.0)))
        assert obs[ObsIndex.CLOSING_SPEED] == 0.0
        assert np.all(np.isfinite(obs))

    def test_no_path_reports_maximum_length(self, encoder):
        obs = encoder.encode(_ctx(has_path=False, path_length=3.0))
        assert obs[ObsIndex.HAS_PATH] == 0.0
        assert obs[ObsIndex.PATH_LENGTH] == 1.0

    def test_path_length_normalized(self, encoder):
        obs = encoder.encode(_ctx(has_path=True, path_length=5.0))
        assert obs[ObsIndex.HAS_PATH] == 1.0
        assert obs[ObsIndex.PATH_LENGTH] == pytest.approx(0.25)

    def test_low_hp_flags_are_inclusive(self, encoder):
        obs = encoder.encode(_ctx(ally_hp=105.0, self_hp=40.0))
        assert obs[ObsIndex.ALLY_LOW] == 1.0
        assert obs[ObsIndex.SELF_LOW] == 1.0

        obs = encoder.encode(_ctx(ally_hp=106.0, self_hp=41.0))
        assert obs[ObsIndex.ALLY_LOW] == 0.0
        assert obs[ObsIndex.SELF_LOW] == 0.0

    def test_open_arena_sightline_is_clear(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(9.0, 0.0, 9.0)))
        assert obs[ObsIndex.LOS] == 1.0

    def test_blocked_sightline(self):
        world = ArenaWorld(voxels=np.zeros((4, 10, 10), dtype=np.uint8), voxel_size=1.0)
        world.voxels[:, :, 5] = ArenaWorld.WALL
        encoder = ObservationEncoder(LineOfSight(world, mask=ArenaWorld.default_los_blockers()), heal_range=2.5)
        obs = encoder.encode(_ctx(self_pos=(1.5, 0.0, 1.5), ally_pos=(8.5, 0.0, 1.5)))
        assert obs[ObsIndex.LOS] == 0.0

    def test_nan_input_does_not_leak(self, encoder):
        obs = encoder.encode(_ctx(ally_pos=(np.nan, 0.0, 1.0)))
        assert np.all(np.isfinite(obs))


class TestHpFraction:
    def test_normal(self):
        assert hp_fraction(75.0, 150.0) == pytest.approx(0.5)

    def test_clamped(self):
        assert hp_fraction(-3.0, 100.0) == 0.0
        assert hp_fraction(300.0, 100.0) == 1.0

    def test_degenerate_maximum_uses_unit_normalizer(self):
        assert hp_fraction(5.0, 0.0) == 1.0
        assert hp_fraction(0.5, -10.0) == pytest.approx(0.5)
        assert hp_fraction(0.0, 0.0) == 0.0


coord = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False)
speed = st.floats(min_value=-100.0, max_value=100.0, allow_nan=False)
hp = st.floats(min_value=-1e3, max_value=1e3, allow_nan=False)


@given(
    self_pos=st.tuples(coord, coord, coord),
    ally_pos=st.tuples(coord, coord, coord),
    self_vel=st.tuples(speed, speed, speed),
    ally_vel=st.tuples(speed, speed, speed),
    self_hp=hp,
    self_max=hp,
    ally_hp=hp,
    ally_max=hp,
    has_path=st.booleans(),
    path_length=st.floats(min_value=0.0, max_value=1e4),
)
def test_every_component_within_declared_bounds(
    self_pos, ally_pos, self_vel, ally_vel, self_hp, self_max, ally_hp, ally_max, has_path, path_length
):
    encoder = ObservationEncoder(LineOfSight(None), heal_range=2.5)
    obs = encoder.encode(
        _ctx(self_pos, ally_pos, self_vel, ally_vel, self_hp, self_max, ally_hp, ally_max, has_path, path_length)
    )
    assert np.all(np.isfinite(obs))
    assert np.all(obs >= OBS_LOW)
    assert np.all(obs <= OBS_HIGH)
