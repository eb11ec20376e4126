"""Benchmark puzzle creation time and given counts per difficulty."""

from __future__ import annotations

import argparse
import random
import sys
import time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sudoku_elite.generator.carver import create_puzzle
from sudoku_elite.generator.difficulty import Difficulty


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark Sudoku puzzle generation")
    parser.add_argument(
        "--difficulties",
        nargs="+",
        choices=[d.value for d in Difficulty],
        default=[d.value for d in Difficulty],
        help="Difficulty tiers to benchmark",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=5,
        help="Puzzles generated per difficulty",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible runs",
    )
    args = parser.parse_args(argv)
    if args.rounds < 1:
        parser.error("--rounds must be at least 1")
    return args


def run_benchmark(difficulty: Difficulty, rounds: int, rng: random.Random):
    givens: list[int] = []
    start = time.perf_counter()

    for _ in range(rounds):
        puzzle = create_puzzle(difficulty, rng)
        givens.append(puzzle.given_count)

    elapsed = time.perf_counter() - start
    return elapsed, givens


def main() -> int:
    args = parse_args()
    rng = random.Random(args.seed)

    print("Generator benchmark results")
    print(f"rounds={args.rounds} seed={args.seed}")

    for name in args.difficulties:
        difficulty = Difficulty(name)
        elapsed, givens = run_benchmark(difficulty, args.rounds, rng)
        low, high = difficulty.given_range
        on_target = sum(1 for g in givens if g <= high)
        print(
            f"{name}: total={elapsed:.3f}s avg={elapsed / args.rounds:.3f}s "
            f"givens_min={min(givens)} givens_max={max(givens)} "
            f"target={low}-{high} within_range={on_target}/{args.rounds}"
        )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
