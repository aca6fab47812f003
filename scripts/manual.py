# ruff: noqa: E402
"""Drive the healer by hand: type keys per decision step (w/s/h, e.g. "wh"), empty line = hold."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from healer import EnvConfig, HealerEnv
from healer.env.hud import DebugReadout


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--repeat", type=int, default=10, help="Decision steps per typed line")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")

    env = HealerEnv(EnvConfig(seed=args.seed))
    hud = DebugReadout(env, name="manual")
    env.reset(seed=args.seed)

    print(__doc__)
    for line in sys.stdin:
        action = env.agent.heuristic(list(line.strip()))
        for _ in range(args.repeat):
            _obs, _reward, terminated, truncated, _info = env.step(action)
            hud.update()
            if terminated or truncated:
                print("episode over, resetting")
                env.reset()
                break
        print("\n".join(hud.lines()))


if __name__ == "__main__":
    main()
