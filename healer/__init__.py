from .config import ControlMode, EnvConfig, HealerConfig, WorldConfig
from .env.env import HealerEnv

__version__ = "0.1.0"

__all__ = ["ControlMode", "EnvConfig", "HealerConfig", "HealerEnv", "WorldConfig"]
