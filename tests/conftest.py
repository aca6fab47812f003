import numpy as np
import pytest

from healer import EnvConfig, HealerEnv, WorldConfig
from healer.sim.world import ArenaWorld


class RecordingNav:
    """Stand-in for NavAgent that records the commands it receives."""

    def __init__(self):
        self.destinations: list[np.ndarray] = []
        self.stops = 0
        self.resumes = 0
        self.is_stopped = False

    def set_destination(self, point) -> bool:
        self.destinations.append(np.asarray(point, dtype=np.float32).copy())
        return True

    def stop(self) -> None:
        self.stops += 1
        self.is_stopped = True

    def resume(self) -> None:
        self.resumes += 1
        self.is_stopped = False


@pytest.fixture
def recording_nav() -> RecordingNav:
    return RecordingNav()


@pytest.fixture
def open_world() -> ArenaWorld:
    """10x2x10 world units, 0.5 voxels, no obstacles."""
    return ArenaWorld.empty(WorldConfig(size_x=10.0, size_y=2.0, size_z=10.0, voxel_size=0.5))


@pytest.fixture
def make_env():
    def _make(**overrides) -> HealerEnv:
        overrides.setdefault("seed", 0)
        env = HealerEnv(EnvConfig(**overrides))
        env.reset(seed=overrides["seed"])
        return env

    return _make
