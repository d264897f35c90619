#!/usr/bin/env python3
"""Benchmark full terrain generation passes."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from strata import config
from strata.factory import create_terrain
from strata.util.performance import (
    enable_performance_tracking,
    get_performance_report,
    perf_tracker,
    reset_performance_data,
)

GRID_SIZES: tuple[tuple[int, int], ...] = (
    (32, 32),
    (64, 64),
    (128, 96),
    (200, 200),
)


class GenerationBenchmark:
    """Benchmark runner for the "islands" preset terrain."""

    def __init__(self, iterations: int) -> None:
        self.iterations = iterations
        self.results: dict[str, dict[str, float]] = {}

    def _run_case(self, width: int, height: int) -> float:
        """Run one benchmark case and return average pass time in milliseconds."""
        reset_performance_data()
        for i in range(self.iterations):
            terrain, noise = create_terrain(
                "islands", (width, height), seed=(width * 1_000) + height + i
            )
            terrain.regenerate_layers(noise)

        stats = perf_tracker.get_stats("terrain.regenerate")
        return stats.avg_time * 1000.0 if stats is not None else 0.0

    def run(self) -> None:
        """Run all configured grid-size benchmarks."""
        enable_performance_tracking()
        print("Terrain Generation Benchmark")
        print("=" * 42)
        print(f"Iterations per size: {self.iterations}")
        print()
        print(f"{'Size':>12} {'Pass (ms)':>14}")
        print("-" * 42)

        for width, height in GRID_SIZES:
            pass_ms = self._run_case(width, height)
            size_key = f"{width}x{height}"
            self.results[size_key] = {"pass_ms": pass_ms}
            print(f"{size_key:>12} {pass_ms:14.2f}")

        print()
        print(get_performance_report(prefix="layer."))

    def save_results(self, filename: str) -> None:
        """Save benchmark output to a JSON file."""
        with Path(filename).open("w") as f:
            json.dump(self.results, f, indent=2)
        print(f"\nSaved benchmark results to {filename}")

    def compare_with_baseline(self, baseline_file: str) -> None:
        """Compare current run with a saved baseline JSON file."""
        try:
            with Path(baseline_file).open() as f:
                baseline: dict[str, dict[str, float]] = json.load(f)
        except FileNotFoundError:
            print(f"\nBaseline file not found: {baseline_file}")
            return

        print(f"\nComparison vs baseline: {baseline_file}")
        print("=" * 64)

        for size_key, current in self.results.items():
            if size_key not in baseline:
                continue

            old_ms = baseline[size_key].get("pass_ms", 0.0)
            new_ms = current["pass_ms"]
            if old_ms <= 0:
                continue

            delta_pct = ((new_ms - old_ms) / old_ms) * 100.0
            speed_ratio = old_ms / new_ms if new_ms > 0 else 0.0
            trend = "faster" if speed_ratio > 1.0 else "slower"

            print(
                f"{size_key:>12}: {new_ms:8.2f}ms "
                f"vs {old_ms:8.2f}ms | {speed_ratio:5.2f}x {trend} "
                f"({delta_pct:+6.1f}%)"
            )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Benchmark terrain generation")
    parser.add_argument(
        "--iterations",
        type=int,
        default=3,
        help="Number of runs per grid size (default: 3)",
    )
    parser.add_argument("--save", type=str, help="Save current results to JSON")
    parser.add_argument(
        "--compare",
        type=str,
        help="Compare current results against baseline JSON",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    benchmark = GenerationBenchmark(iterations=args.iterations)
    benchmark.run()

    if args.save:
        benchmark.save_results(args.save)
    if args.compare:
        benchmark.compare_with_baseline(args.compare)


if __name__ == "__main__":
    main()
