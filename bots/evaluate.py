"""
Evaluation script for scripted policies
Runs episodes through DualcadeEnv and optionally logs one CSV row per episode.

    python -m bots.evaluate --mode maze_chase --policy heuristic --episodes 5 --csv logs/maze.csv
"""

import argparse
import csv
import os
from typing import Optional

import numpy as np

from dualcade.configs.game_config import ENV_CONFIG
from dualcade.entities import GameMode
from dualcade.env import DualcadeEnv

from bots.policies import make_policy

CSV_HEADER = ["episode", "seed", "score", "secondary", "duration_seconds", "ticks", "end_reason"]


def evaluate_policy(
    mode: str = "maze_chase",
    policy: str = "heuristic",
    n_episodes: int = 10,
    seed: Optional[int] = None,
    csv_path: Optional[str] = None,
    render: bool = False,
    **env_kwargs,
):
    """
    Evaluate a scripted policy

    Args:
        mode: Game mode ('side_scroller' or 'maze_chase')
        policy: Policy name ('random' or 'heuristic')
        n_episodes: Number of episodes to evaluate
        seed: Base seed; episode i uses seed + i
        csv_path: Where to write per-episode rows (skipped if None)
        render: Whether to render the environment
    """
    config = {**ENV_CONFIG, **env_kwargs}
    env = DualcadeEnv(mode, render_mode="human" if render else None, **config)
    act = make_policy(policy, env.mode)

    writer = None
    csv_file = None
    if csv_path:
        os.makedirs(os.path.dirname(csv_path) or ".", exist_ok=True)
        csv_file = open(csv_path, "w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(CSV_HEADER)

    scores, secondaries, durations = [], [], []
    try:
        for episode in range(n_episodes):
            episode_seed = seed + episode if seed is not None else None
            env.action_space.seed(episode_seed)
            obs, info = env.reset(seed=episode_seed)

            terminated = truncated = False
            while not (terminated or truncated):
                obs, reward, terminated, truncated, info = env.step(act(env))

            scores.append(info["score"])
            secondaries.append(info["secondary"])
            durations.append(info["duration_seconds"])

            if writer is not None:
                writer.writerow([
                    episode, episode_seed, info["score"], info["secondary"],
                    info["duration_seconds"], info["tick"], info["end_reason"] or "truncated",
                ])
                csv_file.flush()

            print(f"Episode {episode + 1}/{n_episodes}: "
                  f"Score = {info['score']}, Secondary = {info['secondary']}, "
                  f"Duration = {info['duration_seconds']}s")
    finally:
        env.close()
        if csv_file is not None:
            csv_file.close()

    results = {
        "mean_score": float(np.mean(scores)),
        "std_score": float(np.std(scores)),
        "mean_secondary": float(np.mean(secondaries)),
        "mean_duration": float(np.mean(durations)),
        "scores": scores,
    }

    print("\n" + "=" * 50)
    print(f"Evaluation Results ({n_episodes} episodes, {mode}, {policy}):")
    print(f"Mean Score: {results['mean_score']:.2f} ± {results['std_score']:.2f}")
    print(f"Mean Secondary: {results['mean_secondary']:.1f}")
    print(f"Mean Duration: {results['mean_duration']:.1f}s")
    print("=" * 50)

    return results


def main(argv=None):
    parser = argparse.ArgumentParser(description="Evaluate a scripted dualcade policy")
    parser.add_argument(
        "--mode",
        type=str,
        default="maze_chase",
        choices=[m.value for m in GameMode],
        help="Game mode (default: maze_chase)",
    )
    parser.add_argument(
        "--policy",
        type=str,
        default="heuristic",
        choices=["heuristic", "random"],
        help="Policy to evaluate (default: heuristic)",
    )
    parser.add_argument(
        "--episodes",
        type=int,
        default=10,
        help="Number of evaluation episodes (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Base random seed (default: 42)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=ENV_CONFIG["max_steps"],
        help="Ticks before an episode is truncated",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Write per-episode results to this CSV file",
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Render episodes in an arcade window",
    )

    args = parser.parse_args(argv)

    return evaluate_policy(
        mode=args.mode,
        policy=args.policy,
        n_episodes=args.episodes,
        seed=args.seed,
        csv_path=args.csv,
        render=args.render,
        max_steps=args.max_steps,
    )


if __name__ == "__main__":
    main()
