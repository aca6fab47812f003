"""Observation computation for the healer.

Design:
- ObservationContext: plain snapshot of everything one observation reads
- ObservationEncoder: stateless, side-effect free 12-float encoder

Every component is clamped into its declared range (clamp, never reject).
Frame stacking for short-horizon context belongs to the policy side.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

from ..constants import (
    ALLY_LOW_HP_FRACTION,
    MIN_HP_NORMALIZER,
    OBS_CLOSING_SPEED_RANGE,
    OBS_DIRECTION_EPS_SQ,
    OBS_DISPLACEMENT_RANGE,
    OBS_DISTANCE_RANGE,
    OBS_PATH_LENGTH_RANGE,
    RANGE_EPSILON,
    SELF_LOW_HP_FRACTION,
)

if TYPE_CHECKING:
    from ..sim.health import HealthStore
    from ..sim.los import LineOfSight
    from .agent import HealerAgent

OBS_DIM = 12


class ObsIndex(IntEnum):
    ALLY_HP = 0
    SELF_HP = 1
    DX = 2
    DZ = 3
    DIST = 4
    CLOSING_SPEED = 5
    LOS = 6
    IN_HEAL_RANGE = 7
    HAS_PATH = 8
    PATH_LENGTH = 9
    ALLY_LOW = 10
    SELF_LOW = 11


# Per-component bounds, in ObsIndex order.
OBS_LOW = np.array([0, 0, -1, -1, 0, -1, 0, 0, 0, 0, 0, 0], dtype=np.float32)
OBS_HIGH = np.ones(OBS_DIM, dtype=np.float32)


def hp_fraction(current: float, maximum: float) -> float:
    return float(np.clip(current / max(MIN_HP_NORMALIZER, maximum), 0.0, 1.0))


def _hp_of(store: HealthStore | None) -> tuple[float, float]:
    # Missing store reads as empty with a unit maximum.
    if store is None:
        return 0.0, 1.0
    return float(store.current_hp), float(store.max_hp)


@dataclass
class ObservationContext:
    self_pos: np.ndarray
    self_vel: np.ndarray
    ally_pos: np.ndarray
    ally_vel: np.ndarray
    self_hp: float
    self_max_hp: float
    ally_hp: float
    ally_max_hp: float
    has_path: bool
    path_length: float

    @classmethod
    def from_agent(cls, agent: HealerAgent) -> ObservationContext:
        zero = np.zeros(3, dtype=np.float32)
        self_pos = agent.body.pos if agent.body is not None else zero
        self_vel = agent.body.vel if agent.body is not None else zero
        ally_pos = agent.ally_body.pos if agent.ally_body is not None else zero
        ally_vel = agent.ally_body.vel if agent.ally_body is not None else zero
        self_hp, self_max = _hp_of(agent.health)
        ally_hp, ally_max = _hp_of(agent.ally_health)

        nav = agent.nav
        has_path = nav is not None and nav.has_path()
        path_len = nav.path_length() if has_path and nav is not None else OBS_PATH_LENGTH_RANGE

        return cls(
            self_pos=self_pos,
            self_vel=self_vel,
            ally_pos=ally_pos,
            ally_vel=ally_vel,
            self_hp=self_hp,
            self_max_hp=self_max,
            ally_hp=ally_hp,
            ally_max_hp=ally_max,
            has_path=has_path,
            path_length=path_len,
        )


class ObservationEncoder:
    def __init__(self, los: LineOfSight, heal_range: float):
        self.los = los
        self.heal_range = float(heal_range)

    def encode(self, ctx: ObservationContext) -> np.ndarray:
        obs = np.zeros(OBS_DIM, dtype=np.float32)

        d = np.asarray(ctx.ally_pos, dtype=np.float32) - np.asarray(ctx.self_pos, dtype=np.float32)
        planar = np.array([d[0], d[2]], dtype=np.float32)
        dist = float(np.hypot(planar[0], planar[1]))

        closing = 0.0
        if float(planar @ planar) > OBS_DIRECTION_EPS_SQ:
            dir_u = planar / dist
            rel_v = np.array(
                [ctx.ally_vel[0] - ctx.self_vel[0], ctx.ally_vel[2] - ctx.self_vel[2]], dtype=np.float32
            )
            closing = float(rel_v @ dir_u)

        ally_frac = hp_fraction(ctx.ally_hp, ctx.ally_max_hp)
        self_frac = hp_fraction(ctx.self_hp, ctx.self_max_hp)

        path_len = ctx.path_length if ctx.has_path else OBS_PATH_LENGTH_RANGE

        obs[ObsIndex.ALLY_HP] = ally_frac
        obs[ObsIndex.SELF_HP] = self_frac
        obs[ObsIndex.DX] = np.clip(d[0], -OBS_DISPLACEMENT_RANGE, OBS_DISPLACEMENT_RANGE) / OBS_DISPLACEMENT_RANGE
        obs[ObsIndex.DZ] = np.clip(d[2], -OBS_DISPLACEMENT_RANGE, OBS_DISPLACEMENT_RANGE) / OBS_DISPLACEMENT_RANGE
        obs[ObsIndex.DIST] = np.clip(dist, 0.0, OBS_DISTANCE_RANGE) / OBS_DISTANCE_RANGE
        obs[ObsIndex.CLOSING_SPEED] = (
            np.clip(closing, -OBS_CLOSING_SPEED_RANGE, OBS_CLOSING_SPEED_RANGE) / OBS_CLOSING_SPEED_RANGE
        )
        obs[ObsIndex.LOS] = 1.0 if self.los.is_clear(ctx.self_pos, ctx.ally_pos) else 0.0
        obs[ObsIndex.IN_HEAL_RANGE] = 1.0 if dist <= self.heal_range + RANGE_EPSILON else 0.0
        obs[ObsIndex.HAS_PATH] = 1.0 if ctx.has_path else 0.0
        obs[ObsIndex.PATH_LENGTH] = np.clip(path_len, 0.0, OBS_PATH_LENGTH_RANGE) / OBS_PATH_LENGTH_RANGE
        obs[ObsIndex.ALLY_LOW] = 1.0 if ally_frac <= ALLY_LOW_HP_FRACTION else 0.0
        obs[ObsIndex.SELF_LOW] = 1.0 if self_frac <= SELF_LOW_HP_FRACTION else 0.0

        # NaN inputs must not leak to the policy.
        return np.nan_to_num(obs, nan=0.0, posinf=1.0, neginf=-1.0)
