from __future__ import annotations

import numpy as np

from ..nav.agent import NavAgent


class AllyWanderer:
    """
    Scripted ally movement: walk to a random walkable waypoint, linger, repeat.

    Gives the healer a moving target so positioning has something to learn.
    """

    def __init__(self, nav: NavAgent, rng: np.random.Generator, dwell_s: float = 1.5, enabled: bool = True):
        self.nav = nav
        self.rng = rng
        self.dwell_s = float(dwell_s)
        self.enabled = enabled
        self._dwell_left = 0.0

    def reset(self, rng: np.random.Generator | None = None) -> None:
        if rng is not None:
            self.rng = rng
        self._dwell_left = self.dwell_s
        self.nav.reset_path()
        self.nav.resume()

    def tick(self, dt: float) -> None:
        if self.enabled and not self.nav.is_moving():
            self._dwell_left -= dt
            if self._dwell_left <= 0.0:
                waypoint = self.nav.grid.random_walkable(self.rng)
                if waypoint is not None:
                    self.nav.set_destination(waypoint)
                self._dwell_left = self.dwell_s
        self.nav.tick(dt)
