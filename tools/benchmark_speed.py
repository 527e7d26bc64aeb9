"""
Performance Benchmark
=====================

Measures headless tick throughput for performance tuning.

Usage:
    python -m tools.benchmark_speed [--steps S] [--image-obs]
"""

from __future__ import annotations

import argparse
import sys
import time
import numpy as np

from math_snake.snake_core.config_loader import load_config
from math_snake.snake_core.entities import ACTION_DIRECTIONS
from math_snake.snake_core.env_gym import MathSnakeEnv
from math_snake.snake_core.game import CoreGame


def benchmark_core_game(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw CoreGame without Gym overhead.

    Args:
        num_steps: Number of ticks.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    game = CoreGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)

    game.start_session(seed=seed)
    sessions = 1
    start = time.perf_counter()

    for _ in range(num_steps):
        game.set_intent(ACTION_DIRECTIONS[int(rng.integers(len(ACTION_DIRECTIONS)))])
        result = game.tick()
        if result.terminated:
            game.start_session()
            sessions += 1

    elapsed = time.perf_counter() - start

    return {
        "mode": "core_game",
        "num_steps": num_steps,
        "sessions": sessions,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_env(
    num_steps: int = 1000,
    seed: int = 42,
    image_obs: bool = False
) -> dict:
    """
    Benchmark MathSnakeEnv, optionally with image observations.

    Args:
        num_steps: Number of steps.
        seed: Random seed.
        image_obs: Include rendered board in every observation.

    Returns:
        Dict with timing results.
    """
    env = MathSnakeEnv(image_obs=image_obs)
    rng = np.random.default_rng(seed)

    env.reset(seed=seed)
    sessions = 1
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(int(rng.integers(env.action_space.n)))
        if terminated or truncated:
            env.reset()
            sessions += 1

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env_image" if image_obs else "env",
        "num_steps": num_steps,
        "sessions": sessions,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(steps: int = 2000, image_obs: bool = False) -> list:
    """Run every benchmark and print a summary table."""
    print("=" * 60)
    print("MATH SNAKE PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    results = [
        benchmark_core_game(num_steps=steps),
        benchmark_env(num_steps=steps),
    ]
    if image_obs:
        results.append(benchmark_env(num_steps=steps, image_obs=True))

    print(f"{'Mode':<14} {'Steps':>8} {'Sessions':>9} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 57)
    for r in results:
        print(f"{r['mode']:<14} {r['num_steps']:>8} {r['sessions']:>9} "
              f"{r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Math Snake tick throughput")
    parser.add_argument("--steps", type=int, default=2000, help="Steps per benchmark")
    parser.add_argument("--image-obs", action="store_true", help="Also time image observations")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()
    steps = 200 if args.quick else args.steps

    run_all_benchmarks(steps=steps, image_obs=args.image_obs)
    return 0


if __name__ == "__main__":
    sys.exit(main())
