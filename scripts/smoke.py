# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np

from healer import ControlMode, EnvConfig, HealerConfig, HealerEnv, WorldConfig
from healer.agents.heuristic import HeuristicPolicy, RandomPolicy
from healer.env.hud import DebugReadout
from healer.sim.world import ArenaWorld


def run_episode(env: HealerEnv, policy, seed: int, hud: DebugReadout | None = None) -> dict:
    _obs, _ = env.reset(seed=seed)

    steps = 0
    while True:
        _obs, _reward, terminated, truncated, info = env.step(policy.act(env))
        steps += 1
        if hud is not None:
            hud.update()
            if steps % 50 == 0:
                print("\n".join(hud.lines()))
        if terminated or truncated:
            break

    episode = info["episode"] or {}
    return {
        "seed": seed,
        "steps": steps,
        "ally_died": terminated,
        "return": round(float(episode.get("episode_return", 0.0)), 3),
        "heals": episode.get("heals", 0),
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--episodes", type=int, default=3)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--policy", type=str, default="heuristic", choices=["heuristic", "random"])
    parser.add_argument("--mode", type=str, default=ControlMode.LEARNED_POSITIONING_AND_HEALING.value,
                        choices=[m.value for m in ControlMode])
    parser.add_argument("--size", type=float, default=20.0, help="Arena size (x=z)")
    parser.add_argument("--obstacles", type=float, default=0.0, help="Pillar fill fraction")
    parser.add_argument("--los", action="store_true", help="Walls and foliage block sightlines")
    parser.add_argument("--ally-dps", type=float, default=5.0)
    parser.add_argument("--seconds", type=float, default=30.0, help="Episode time limit")
    parser.add_argument("--hud", action="store_true", help="Print the debug readout every 50 steps")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    cfg = EnvConfig(
        world=WorldConfig(size_x=args.size, size_z=args.size, obstacle_fill=args.obstacles),
        healer=HealerConfig(
            control_mode=ControlMode(args.mode),
            los_mask=ArenaWorld.default_los_blockers() if args.los else 0,
        ),
        ally_dps=args.ally_dps,
        max_episode_seconds=args.seconds,
        seed=args.seed,
    )
    env = HealerEnv(cfg)
    policy = HeuristicPolicy() if args.policy == "heuristic" else RandomPolicy(np.random.default_rng(args.seed))
    hud = DebugReadout(env) if args.hud else None

    results = []
    for ep in range(args.episodes):
        result = run_episode(env, policy, seed=args.seed + ep, hud=hud)
        results.append(result)
        print(f"episode {ep}: {result}")

    # Tiny summary
    deaths = sum(1 for r in results if r["ally_died"])
    mean_return = float(np.mean([r["return"] for r in results])) if results else 0.0
    print(f"summary: ally_deaths={deaths}/{len(results)} mean_return={mean_return:.3f}")


if __name__ == "__main__":
    main()
