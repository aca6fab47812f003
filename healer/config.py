from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ControlMode(str, Enum):
    """Curriculum stage for the healer.

    Replaces independent phase toggles so contradictory combinations
    (scripted follow *and* learned positioning) cannot be expressed.
    """

    SCRIPTED_FOLLOW = "scripted_follow"  # Rule-based pursuit, no learned branches
    LEARNED_POSITIONING = "learned_positioning"  # Branch A drives movement
    LEARNED_POSITIONING_AND_HEALING = "learned_positioning_and_healing"  # Branch A + branch B

    @property
    def scripted_follow(self) -> bool:
        return self is ControlMode.SCRIPTED_FOLLOW

    @property
    def learned_positioning(self) -> bool:
        return self is not ControlMode.SCRIPTED_FOLLOW

    @property
    def learned_healing(self) -> bool:
        return self is ControlMode.LEARNED_POSITIONING_AND_HEALING


# Obstruction mask value meaning "no blockers configured" (open arena).
LOS_MASK_NONE = 0


@dataclass(frozen=True)
class WorldConfig:
    size_x: float = 20.0
    size_y: float = 4.0
    size_z: float = 20.0
    voxel_size: float = 0.5
    obstacle_fill: float = 0.0  # Fraction of floor cells covered by pillars
    pillar_height: float = 3.0
    nav_clearance: float = 2.0  # Headroom required above a walkable cell
    nav_radius_cells: int = 0  # Footprint erosion radius (cells)


@dataclass(frozen=True)
class HealerConfig:
    # Navigation / follow
    repath_interval: float = 0.12
    nav_max_speed: float = 3.5
    nav_stopping_distance: float = 0.05
    nav_snap_radius: float = 2.0
    ideal_min: float = 2.5
    ideal_max: float = 4.0

    # Healing
    heal_range: float = 2.5
    heal_amount: float = 15.0
    heal_cooldown: float = 1.0
    # Retry delay after an out-of-range / blocked attempt. Tuned on its own,
    # unrelated to repath_interval.
    failed_heal_retry: float = 0.15

    # Line of sight
    los_mask: int = LOS_MASK_NONE
    eye_height: float = 1.6

    control_mode: ControlMode = ControlMode.LEARNED_POSITIONING_AND_HEALING

    def __post_init__(self) -> None:
        if self.ideal_min > self.ideal_max:
            raise ValueError(f"ideal_min ({self.ideal_min}) must not exceed ideal_max ({self.ideal_max})")
        if self.heal_cooldown < 0.0 or self.failed_heal_retry < 0.0 or self.repath_interval < 0.0:
            raise ValueError("cooldowns and intervals must be non-negative")
        if self.heal_amount <= 0.0:
            raise ValueError(f"heal_amount must be positive, got {self.heal_amount}")


@dataclass(frozen=True)
class EnvConfig:
    world: WorldConfig = field(default_factory=WorldConfig)
    healer: HealerConfig = field(default_factory=HealerConfig)
    dt_sim: float = 0.02
    # Frames per decision step (observation/action cadence).
    decision_repeat: int = 5
    max_episode_seconds: float = 60.0

    # Health stores
    ally_max_hp: float = 150.0
    self_max_hp: float = 100.0
    ally_dps: float = 5.0  # Fixed-rate damage over time on the ally
    self_dps: float = 0.0

    # Ally movement
    ally_speed: float = 2.0
    ally_wander: bool = True
    ally_dwell_s: float = 1.5

    # Spawn: healer starts this far (horizontally) from the ally
    spawn_separation: float = 3.0
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.decision_repeat < 1:
            raise ValueError(f"decision_repeat must be >= 1, got {self.decision_repeat}")
        if self.dt_sim <= 0.0:
            raise ValueError(f"dt_sim must be positive, got {self.dt_sim}")
