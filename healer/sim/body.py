from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _vec3(values=(0.0, 0.0, 0.0)) -> np.ndarray:
    return np.asarray(values, dtype=np.float32).reshape(3).copy()


@dataclass
class BodyState:
    pos: np.ndarray = field(default_factory=_vec3)  # float32[3], world units, y up
    vel: np.ndarray = field(default_factory=_vec3)  # float32[3], world units / s

    def __post_init__(self) -> None:
        self.pos = _vec3(self.pos)
        self.vel = _vec3(self.vel)

    def teleport(self, pos: np.ndarray) -> None:
        self.pos[:] = pos
        self.vel[:] = 0.0

    def stop(self) -> None:
        self.vel[:] = 0.0


def horizontal_delta(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Vector from a to b projected on the ground plane, float32[3] with y=0."""
    d = np.asarray(b, dtype=np.float32) - np.asarray(a, dtype=np.float32)
    return np.array([d[0], 0.0, d[2]], dtype=np.float32)


def horizontal_distance(a: np.ndarray, b: np.ndarray) -> float:
    d = horizontal_delta(a, b)
    return float(np.hypot(d[0], d[2]))


def horizontal_direction(a: np.ndarray, b: np.ndarray, eps: float) -> tuple[np.ndarray, float]:
    """Unit ground-plane direction from a to b and the distance.

    Returns the zero vector when the points coincide within `eps`.
    """
    d = horizontal_delta(a, b)
    dist = float(np.hypot(d[0], d[2]))
    if dist <= eps:
        return np.zeros(3, dtype=np.float32), dist
    return (d / dist).astype(np.float32), dist
