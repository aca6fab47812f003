from __future__ import annotations

import logging
import math

import numpy as np

from ..sim.body import BodyState
from .graph import NavGrid
from .planner import Planner

logger = logging.getLogger(__name__)


class NavAgent:
    """Path-following mover for one body over a NavGrid.

    A new accepted destination supersedes the previous path; there is no
    separate cancel.
    """

    def __init__(
        self,
        grid: NavGrid,
        body: BodyState,
        speed: float = 3.5,
        stopping_distance: float = 0.05,
        snap_radius: float = 2.0,
    ):
        self.grid = grid
        self.body = body
        self.speed = float(speed)
        self.stopping_distance = float(stopping_distance)
        self.snap_radius = float(snap_radius)
        self.planner = Planner(grid)

        self.corners: list[np.ndarray] = []
        self.destination: np.ndarray | None = None
        self.is_stopped = False
        # Last plan succeeded; stays set after arrival until reset or a failed plan.
        self.path_valid = False
        self.destinations_issued = 0

    def set_destination(self, point: np.ndarray) -> bool:
        """Plan a path to `point`; returns whether a path exists."""
        self.destinations_issued += 1
        target = np.asarray(point, dtype=np.float32)
        snapped = self.grid.sample_position(target, self.snap_radius)
        goal = snapped if snapped is not None else np.array([target[0], 0.0, target[2]], dtype=np.float32)
        self.destination = goal

        start_id = self.grid.nearest_node(self.body.pos)
        goal_id = self.grid.nearest_node(goal)
        if start_id is None or goal_id is None:
            logger.debug(f"No walkable node near start={self.body.pos} or goal={goal}")
            self.corners = []
            self.path_valid = False
            return False

        result = self.planner.find_path(start_id, goal_id)
        if not result.found:
            logger.debug(f"No path {start_id} -> {goal_id} (expanded={result.expanded})")
            self.corners = []
            self.path_valid = False
            return False

        points = [np.asarray(self.grid.nodes[nid].pos, dtype=np.float32) for nid in result.path[1:]]
        # Land exactly on the requested point when it is walkable.
        if snapped is not None:
            if points:
                points[-1] = goal
            else:
                points = [goal]
        elif not points:
            points = [np.asarray(self.grid.nodes[goal_id].pos, dtype=np.float32)]

        self.corners = self._smooth(points)
        self.path_valid = True
        return True

    def stop(self) -> None:
        self.is_stopped = True

    def resume(self) -> None:
        self.is_stopped = False

    def reset_path(self) -> None:
        self.corners = []
        self.destination = None
        self.path_valid = False

    def has_path(self) -> bool:
        """A path was found to the current destination, including one already walked."""
        return self.path_valid

    def is_moving(self) -> bool:
        return bool(self.corners)

    def path_length(self) -> float:
        """Remaining corner-to-corner length from the current position; 0 once arrived."""
        if not self.corners:
            return 0.0
        total = 0.0
        prev = self.body.pos
        for c in self.corners:
            total += math.hypot(float(c[0] - prev[0]), float(c[2] - prev[2]))
            prev = c
        return total

    def tick(self, dt: float) -> None:
        body = self.body
        if self.is_stopped or not self.corners or dt <= 0.0:
            body.vel[0] = 0.0
            body.vel[2] = 0.0
            return

        start_x, start_z = float(body.pos[0]), float(body.pos[2])
        remaining = self.speed * dt
        while remaining > 0.0 and self.corners:
            target = self.corners[0]
            dx = float(target[0] - body.pos[0])
            dz = float(target[2] - body.pos[2])
            d = math.hypot(dx, dz)
            if len(self.corners) == 1 and d <= self.stopping_distance:
                self.corners.pop(0)
                break
            if d <= remaining:
                body.pos[0] = target[0]
                body.pos[2] = target[2]
                remaining -= d
                self.corners.pop(0)
            else:
                body.pos[0] += dx / d * remaining
                body.pos[2] += dz / d * remaining
                remaining = 0.0

        body.vel[0] = (float(body.pos[0]) - start_x) / dt
        body.vel[2] = (float(body.pos[2]) - start_z) / dt

    def _smooth(self, points: list[np.ndarray]) -> list[np.ndarray]:
        """Drop intermediate corners that are directly reachable over walkable floor."""
        if len(points) <= 1:
            return points
        out: list[np.ndarray] = []
        anchor = self.body.pos
        i = 0
        while i < len(points):
            j = len(points) - 1
            while j > i and not self._walkable_line(anchor, points[j]):
                j -= 1
            out.append(points[j])
            anchor = points[j]
            i = j + 1
        return out

    def _walkable_line(self, a: np.ndarray, b: np.ndarray) -> bool:
        dx = float(b[0] - a[0])
        dz = float(b[2] - a[2])
        dist = math.hypot(dx, dz)
        samples = max(1, int(math.ceil(dist / (self.grid.cell_size * 0.5))))
        for k in range(samples + 1):
            t = k / samples
            p = (float(a[0]) + dx * t, 0.0, float(a[2]) + dz * t)
            if self.grid.cell_of(p) not in self.grid.nodes:
                return False
        return True
