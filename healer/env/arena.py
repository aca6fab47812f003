from __future__ import annotations

import logging

import numpy as np

from ..agents.ally import AllyWanderer
from ..config import EnvConfig
from ..nav.agent import NavAgent
from ..nav.graph import NavGrid
from ..sim.body import BodyState
from ..sim.damage import DamageTicker
from ..sim.health import HealthStore
from ..sim.los import LineOfSight
from ..sim.world import ArenaWorld
from .agent import HealerAgent
from .rewards import RewardWeights

logger = logging.getLogger(__name__)


class Arena:
    """
    Scene assembly and reset coordination.

    Creates the world, navigation, bodies, health stores and damage emitters,
    and wires them into the HealerAgent. reset_arena() restores both health
    stores and respawns the bodies; the agent only observes the result.
    """

    def __init__(self, config: EnvConfig, rng: np.random.Generator, weights: RewardWeights | None = None):
        self.config = config
        self.rng = rng

        self.world = ArenaWorld.generate(config.world, rng)
        self.nav_grid = NavGrid.build(
            self.world,
            clearance=config.world.nav_clearance,
            radius_cells=config.world.nav_radius_cells,
        )
        if not self.nav_grid.nodes:
            raise ValueError("arena has no walkable floor; lower obstacle_fill")

        hc = config.healer
        self.healer_body = BodyState()
        self.ally_body = BodyState()
        self.healer_health = HealthStore(config.self_max_hp)
        self.ally_health = HealthStore(config.ally_max_hp)

        self.healer_nav = NavAgent(
            self.nav_grid,
            self.healer_body,
            speed=hc.nav_max_speed,
            stopping_distance=hc.nav_stopping_distance,
            snap_radius=hc.nav_snap_radius,
        )
        self.ally_nav = NavAgent(self.nav_grid, self.ally_body, speed=config.ally_speed)
        self.ally_driver = AllyWanderer(self.ally_nav, rng, dwell_s=config.ally_dwell_s, enabled=config.ally_wander)

        self.ally_damage = DamageTicker(self.ally_health, dps=config.ally_dps)
        self.healer_damage = DamageTicker(self.healer_health, dps=config.self_dps)

        self.los = LineOfSight(self.world, mask=hc.los_mask, eye_height=hc.eye_height)
        self.agent = HealerAgent(
            hc,
            body=self.healer_body,
            health=self.healer_health,
            ally_body=self.ally_body,
            ally_health=self.ally_health,
            nav=self.healer_nav,
            los=self.los,
            weights=weights,
        )
        self.resets = 0

    def reset_arena(self, rng: np.random.Generator | None = None) -> None:
        if rng is not None:
            self.rng = rng
        self.healer_health.reset_to_full()
        self.ally_health.reset_to_full()

        ally_spawn = self._sample_spawn(None)
        healer_spawn = self._sample_spawn(ally_spawn)
        self.ally_body.teleport(ally_spawn)
        self.healer_body.teleport(healer_spawn)

        self.healer_nav.reset_path()
        self.healer_nav.resume()
        self.ally_driver.reset(self.rng)
        self.resets += 1

    def tick(self, dt: float) -> None:
        """Advance everything the agent does not control by one frame."""
        self.ally_damage.tick(dt)
        self.healer_damage.tick(dt)
        self.ally_driver.tick(dt)
        self.healer_nav.tick(dt)

    def _sample_spawn(self, near: np.ndarray | None) -> np.ndarray:
        if near is None:
            # Ally spawns around the arena centre.
            center = np.array([self.world.extent_x * 0.5, 0.0, self.world.extent_z * 0.5], dtype=np.float32)
            jitter = self.rng.uniform(-2.0, 2.0, size=3).astype(np.float32)
            jitter[1] = 0.0
            spot = self.nav_grid.sample_position(center + jitter, max_distance=max(self.world.extent_x, self.world.extent_z))
            return spot if spot is not None else center

        angle = float(self.rng.uniform(0.0, 2.0 * np.pi))
        offset = np.array([np.cos(angle), 0.0, np.sin(angle)], dtype=np.float32) * self.config.spawn_separation
        spot = self.nav_grid.sample_position(near + offset, max_distance=2.0)
        if spot is None:
            logger.debug("No walkable spawn near the ally; spawning on the ally's cell")
            return near.copy()
        return spot
