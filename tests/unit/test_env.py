"""HealerEnv step cadence, deferred termination and truncation."""

import numpy as np
import pytest

from healer import ControlMode, EnvConfig, HealerConfig, HealerEnv, WorldConfig
from healer.actions import HealIntent, MoveIntent, encode_action
from healer.agents.heuristic import HeuristicPolicy
from healer.env.lifecycle import EpisodePhase
from healer.env.observations import OBS_DIM, ObsIndex
from healer.sim.body import horizontal_distance

HOLD = encode_action(MoveIntent.HOLD)


class TestSpaces:
    def test_declared_spaces(self, make_env):
        env = make_env()
        assert env.observation_space.shape == (OBS_DIM,)
        assert env.action_space.nvec.tolist() == [3, 2]

    def test_reset_observation_is_in_space(self, make_env):
        env = make_env()
        obs, info = env.reset(seed=1)
        assert env.observation_space.contains(obs)
        assert info["phase"] == EpisodePhase.RUNNING.value
        assert info["ally_hp"] == env.config.ally_max_hp

    def test_step_before_reset_raises(self):
        env = HealerEnv(EnvConfig(seed=0))
        with pytest.raises(RuntimeError):
            env.step(HOLD)

    def test_decision_step_advances_repeat_frames(self, make_env):
        env = make_env(dt_sim=0.02, decision_repeat=5)
        t0 = env.time_s
        env.step(HOLD)
        assert env.time_s == pytest.approx(t0 + 0.1)

    def test_spawn_separation(self, make_env):
        env = make_env(spawn_separation=3.0)
        obs, _ = env.reset(seed=4)
        assert obs[ObsIndex.DIST] == pytest.approx(0.3, abs=1e-4)


class TestDeferredTermination:
    def test_death_ends_episode_on_following_step(self, make_env):
        env = make_env(ally_dps=1e4)

        _obs, reward, terminated, truncated, info = env.step(HOLD)
        assert env.arena.ally_health.is_dead
        assert not terminated and not truncated
        assert reward == 0.0
        assert info["phase"] == EpisodePhase.PENDING_TERMINATION.value

        issued = env.arena.healer_nav.destinations_issued
        pos = env.arena.healer_body.pos.copy()
        t = env.time_s

        _obs, reward, terminated, truncated, info = env.step(encode_action(MoveIntent.APPROACH, HealIntent.HEAL))
        assert terminated and not truncated
        assert reward == pytest.approx(-1.0)
        assert info["episode"]["episode_return"] == pytest.approx(-1.0)
        assert not info["episode"]["truncated"]
        # The action on the terminal step is never applied and no frames run.
        assert env.arena.healer_nav.destinations_issued == issued
        np.testing.assert_array_equal(env.arena.healer_body.pos, pos)
        assert env.time_s == t

        with pytest.raises(RuntimeError):
            env.step(HOLD)

    def test_episode_end_clears_agent_state(self, make_env):
        env = make_env(ally_dps=1e4)
        env.step(HOLD)
        env.step(HOLD)
        agent = env.agent
        assert agent.completed_episodes == 1
        assert agent.rewards.total == 0.0
        assert agent.phase is EpisodePhase.RUNNING
        assert env.last_summary is not None and env.last_summary.decision_steps == 2

    def test_reset_after_termination(self, make_env):
        env = make_env(ally_dps=1e4)
        env.step(HOLD)
        env.step(HOLD)
        obs, info = env.reset(seed=2)
        assert obs[ObsIndex.ALLY_HP] == 1.0
        assert info["step"] == 0

    def test_time_limit_does_not_preempt_pending_termination(self, make_env):
        env = make_env(ally_dps=1e4, max_episode_seconds=0.1)
        assert env.max_steps == 1
        _obs, _r, terminated, truncated, _info = env.step(HOLD)
        assert not terminated and not truncated
        with pytest.raises(RuntimeError):
            env.agent.interrupt_episode()

        _obs, reward, terminated, truncated, _info = env.step(HOLD)
        assert terminated and not truncated
        assert reward == pytest.approx(-1.0)


class TestTruncation:
    def test_truncates_at_time_limit(self, make_env):
        env = make_env(ally_dps=0.0, max_episode_seconds=1.0)
        steps = 0
        while True:
            _obs, _r, terminated, truncated, info = env.step(HOLD)
            steps += 1
            assert not terminated
            if truncated:
                break
        assert steps == env.max_steps
        assert info["episode"]["truncated"]
        assert env.agent.completed_episodes == 1
        with pytest.raises(RuntimeError):
            env.step(HOLD)


class TestHealing:
    def test_heal_reward_reaches_step(self, make_env):
        env = make_env(ally_dps=0.0, ally_wander=False)
        env.arena.ally_health.current_hp = 100.0
        env.arena.healer_body.teleport(env.arena.ally_body.pos + np.array([1.0, 0.0, 0.0], dtype=np.float32))

        _obs, reward, _t, _tr, info = env.step(encode_action(MoveIntent.HOLD, HealIntent.HEAL))
        assert info["heal_outcome"] == "healed"
        assert reward == pytest.approx(0.1)
        assert env.arena.ally_health.current_hp == pytest.approx(115.0)

        _obs, reward, _t, _tr, info = env.step(encode_action(MoveIntent.HOLD, HealIntent.HEAL))
        assert info["heal_outcome"] == "cooldown"
        assert reward == 0.0

    def test_out_of_range_heal_is_penalized(self, make_env):
        env = make_env(ally_dps=0.0, ally_wander=False, spawn_separation=3.0)
        _obs, reward, _t, _tr, info = env.step(encode_action(MoveIntent.HOLD, HealIntent.HEAL))
        assert info["heal_outcome"] == "out_of_reach"
        assert reward == pytest.approx(-0.02)


class TestControlModes:
    def _distance(self, env: HealerEnv) -> float:
        return horizontal_distance(env.arena.healer_body.pos, env.arena.ally_body.pos)

    def test_scripted_follow_closes_in_and_ignores_actions(self, make_env):
        env = make_env(
            healer=HealerConfig(control_mode=ControlMode.SCRIPTED_FOLLOW),
            ally_wander=False,
            ally_dps=0.0,
        )
        for _ in range(10):
            env.step(encode_action(MoveIntent.RETREAT, HealIntent.HEAL))
        assert 1.5 < self._distance(env) < 2.5
        assert not env.agent.heal.counts

    def test_learned_retreat_opens_distance(self, make_env):
        env = make_env(
            healer=HealerConfig(control_mode=ControlMode.LEARNED_POSITIONING),
            ally_wander=False,
            ally_dps=0.0,
        )
        for _ in range(20):
            env.step(encode_action(MoveIntent.RETREAT, HealIntent.HEAL))
        assert self._distance(env) > 4.0
        assert not env.agent.heal.counts

    def test_arrived_healer_reports_finished_path(self, make_env):
        env = make_env(
            healer=HealerConfig(control_mode=ControlMode.LEARNED_POSITIONING),
            ally_wander=False,
            ally_dps=0.0,
        )
        for _ in range(40):
            obs, *_ = env.step(encode_action(MoveIntent.APPROACH))
        assert not env.arena.healer_nav.is_moving()
        assert obs[ObsIndex.HAS_PATH] == 1.0
        assert obs[ObsIndex.PATH_LENGTH] == 0.0

    def test_fresh_episode_reports_no_path(self, make_env):
        obs, _ = make_env().reset(seed=6)
        assert obs[ObsIndex.HAS_PATH] == 0.0
        assert obs[ObsIndex.PATH_LENGTH] == 1.0

    def test_mode_can_change_between_episodes(self, make_env):
        env = make_env()
        env.agent.mode = ControlMode.SCRIPTED_FOLLOW
        assert env.agent.resolver.mode is ControlMode.SCRIPTED_FOLLOW


def test_same_seed_same_trajectory():
    cfg = EnvConfig(world=WorldConfig(obstacle_fill=0.05), seed=3)
    policy = HeuristicPolicy()
    trajectories = []
    for _ in range(2):
        env = HealerEnv(cfg)
        obs, _ = env.reset(seed=3)
        frames = [obs]
        for _ in range(30):
            obs, *_ = env.step(policy.act(env))
            frames.append(obs)
        trajectories.append(np.stack(frames))
    np.testing.assert_array_equal(trajectories[0], trajectories[1])
