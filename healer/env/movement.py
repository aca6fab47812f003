"""Movement planning: movement intent + relative geometry -> navigation request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from ..actions import MoveIntent
from ..constants import (
    APPROACH_BAND_FRACTION,
    FOLLOW_STOP_FLOOR,
    FOLLOW_STOP_FRACTION,
    HOLD_MARGIN,
    MOVE_DIRECTION_EPS,
    RETREAT_MARGIN,
    RETREAT_MIN_STEP,
)
from ..sim.body import horizontal_direction

if TYPE_CHECKING:
    from ..nav.agent import NavAgent


@dataclass(frozen=True)
class NavRequest:
    """Either "stop" or "go to destination"."""

    stop: bool
    destination: np.ndarray | None = None

    @classmethod
    def halt(cls) -> NavRequest:
        return cls(stop=True)

    @classmethod
    def go(cls, point: np.ndarray) -> NavRequest:
        return cls(stop=False, destination=np.asarray(point, dtype=np.float32))


class RepathThrottle:
    """At most one navigation command per `interval`; early requests are dropped."""

    def __init__(self, interval: float = 0.12):
        self.interval = float(interval)
        self.next_time = 0.0

    def ready(self, now: float) -> bool:
        if now < self.next_time:
            return False
        self.next_time = now + self.interval
        return True

    def reset(self, now: float = 0.0) -> None:
        self.next_time = float(now)


class MovementPlanner:
    def __init__(self, ideal_min: float = 2.5, ideal_max: float = 4.0, repath_interval: float = 0.12):
        self.ideal_min = float(ideal_min)
        self.ideal_max = float(ideal_max)
        self.throttle = RepathThrottle(repath_interval)

    def plan(self, intent: MoveIntent, self_pos: np.ndarray, ally_pos: np.ndarray) -> NavRequest:
        h = np.asarray(self_pos, dtype=np.float32)
        t = np.asarray(ally_pos, dtype=np.float32)
        # Zero direction when the two coincide; offsets then collapse onto the positions.
        direction, dist = horizontal_direction(h, t, MOVE_DIRECTION_EPS)

        if intent == MoveIntent.HOLD:
            if self.ideal_min <= dist <= self.ideal_max:
                return NavRequest.halt()
            if dist < self.ideal_min:
                return NavRequest.go(h - direction * (self.ideal_min - dist + HOLD_MARGIN))
            return NavRequest.go(h + direction * (dist - self.ideal_max + HOLD_MARGIN))

        if intent == MoveIntent.APPROACH:
            offset = self.ideal_min + (self.ideal_max - self.ideal_min) * APPROACH_BAND_FRACTION
            return NavRequest.go(t - direction * offset)

        if intent == MoveIntent.RETREAT:
            step = max(RETREAT_MIN_STEP, (self.ideal_max - dist) + RETREAT_MARGIN)
            return NavRequest.go(h - direction * step)

        raise ValueError(f"unknown movement intent {intent!r}")

    def follow(self, self_pos: np.ndarray, ally_pos: np.ndarray) -> NavRequest:
        """Scripted threshold pursuit: chase the ally until just inside ideal_min."""
        _, dist = horizontal_direction(self_pos, ally_pos, MOVE_DIRECTION_EPS)
        if dist > max(FOLLOW_STOP_FLOOR, self.ideal_min * FOLLOW_STOP_FRACTION):
            return NavRequest.go(ally_pos)
        return NavRequest.halt()

    def apply(self, request: NavRequest, nav: NavAgent, now: float) -> bool:
        """Hand a request to the navigation agent. Returns whether a new destination was issued."""
        if request.stop:
            nav.stop()
            return False
        nav.resume()
        if not self.throttle.ready(now):
            return False
        assert request.destination is not None
        nav.set_destination(request.destination)
        return True

    def execute(self, intent: MoveIntent, self_pos: np.ndarray, ally_pos: np.ndarray, nav: NavAgent, now: float) -> NavRequest:
        request = self.plan(intent, self_pos, ally_pos)
        self.apply(request, nav, now)
        return request

    def execute_follow(self, self_pos: np.ndarray, ally_pos: np.ndarray, nav: NavAgent, now: float) -> NavRequest | None:
        # The throttle gates the whole pursuit decision, stop included.
        if not self.throttle.ready(now):
            return None
        request = self.follow(self_pos, ally_pos)
        if request.stop:
            nav.stop()
        else:
            assert request.destination is not None
            nav.resume()
            nav.set_destination(request.destination)
        return request
