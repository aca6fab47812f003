from __future__ import annotations

from typing import TYPE_CHECKING

from ..constants import HUD_SMA_MAX_COUNT

if TYPE_CHECKING:
    from .env import HealerEnv


class DebugReadout:
    """Text debug readout: episode counters, reward delta and HP."""

    def __init__(self, env: HealerEnv, name: str = "healer"):
        self.env = env
        self.name = name
        self._last_cumulative = 0.0
        self.delta_reward = 0.0
        self.delta_sma = 0.0
        self._delta_count = 0
        self._seen_summary = env.last_summary

    def update(self) -> None:
        """Call once per decision step."""
        cum = self.env.agent.rewards.total
        summary = self.env.last_summary
        if summary is not None and summary is not self._seen_summary:
            # An episode ended since the last update and its return was cleared from the accumulator.
            self._seen_summary = summary
            self.delta_reward = (summary.episode_return - self._last_cumulative) + cum
        else:
            self.delta_reward = cum - self._last_cumulative
        self._last_cumulative = cum

        self.delta_sma = (self.delta_sma * self._delta_count + self.delta_reward) / max(1, self._delta_count + 1)
        self._delta_count = min(self._delta_count + 1, HUD_SMA_MAX_COUNT)

    def lines(self) -> list[str]:
        env = self.env
        agent = env.agent
        arena = env.arena
        return [
            f"Behavior: {self.name} ({agent.mode.value})",
            f"Episode #: {agent.completed_episodes}",
            f"Step: {env.step_count}  /  MaxStep: {env.max_steps}",
            f"Cumulative Reward: {agent.rewards.total:0.3f}",
            f"Reward delta: {self.delta_reward:+0.3f}  |  SMA: {self.delta_sma:+0.3f}",
            f"Healer HP: {arena.healer_health.current_hp:.0f}/{arena.healer_health.max_hp:.0f}",
            f"Ally HP:   {arena.ally_health.current_hp:.0f}/{arena.ally_health.max_hp:.0f}",
            f"Phase: {agent.phase.value}",
            f"Obs size: {env.observation_space.shape[0]}",
        ]
