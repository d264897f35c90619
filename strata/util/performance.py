"""
Timing instrumentation for generation passes.

Named operations are timed either with the ``measure`` decorator or the
``measure_block`` context manager. Timing is off until
enable_performance_tracking() is called; while off, both helpers only check a
flag.

Usage Examples:
    enable_performance_tracking()

    @measure("layer.generate")
    def generate(self, noise): ...

    with measure_block("terrain.zoom"):
        terrain.zoom(center, 2.0, 1)
        terrain.regenerate_layers(noise)

    print(get_performance_report(prefix="layer."))
"""

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass


@dataclass
class TimingStats:
    """Accumulated wall-clock time for one named operation, in seconds."""

    name: str
    call_count: int = 0
    total_time: float = 0.0
    max_time: float = 0.0

    @property
    def avg_time(self) -> float:
        if self.call_count == 0:
            return 0.0
        return self.total_time / self.call_count


class PerformanceTracker:
    """Collects TimingStats keyed by operation name."""

    def __init__(self) -> None:
        self.stats: dict[str, TimingStats] = {}
        self.enabled = False

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def reset(self) -> None:
        self.stats.clear()

    def record(self, name: str, duration: float) -> None:
        """Add one timed call of ``name`` lasting ``duration`` seconds."""
        stats = self.stats.setdefault(name, TimingStats(name))
        stats.call_count += 1
        stats.total_time += duration
        stats.max_time = max(stats.max_time, duration)

    @contextmanager
    def measure_block(self, name: str) -> Iterator[None]:
        """Time the enclosed block under ``name``, including failed runs."""
        if not self.enabled:
            yield
            return
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, time.perf_counter() - started)

    def measure(self, name: str) -> Callable[[Callable], Callable]:
        """Decorator timing every call of the wrapped function under ``name``."""

        def decorator(func: Callable) -> Callable:
            @functools.wraps(func)
            def timed(*args, **kwargs):
                with self.measure_block(name):
                    return func(*args, **kwargs)

            return timed

        return decorator

    def get_stats(self, name: str) -> TimingStats | None:
        return self.stats.get(name)

    def stats_with_prefix(self, prefix: str) -> list[TimingStats]:
        """Stats whose names start with ``prefix``, slowest total first."""
        matching = [s for name, s in self.stats.items() if name.startswith(prefix)]
        return sorted(matching, key=lambda s: s.total_time, reverse=True)

    def report(self, prefix: str = "") -> str:
        """Plain-text table of the stats matching ``prefix``."""
        rows = self.stats_with_prefix(prefix)
        if not rows:
            return "No timings recorded."

        lines = [f"{'Operation':<28} {'Calls':>6} {'Total ms':>10} {'Avg ms':>9}"]
        lines.extend(
            f"{s.name:<28} {s.call_count:>6} "
            f"{s.total_time * 1000:>10.2f} {s.avg_time * 1000:>9.3f}"
            for s in rows
        )
        return "\n".join(lines)


perf_tracker = PerformanceTracker()


def enable_performance_tracking() -> None:
    perf_tracker.enable()


def reset_performance_data() -> None:
    perf_tracker.reset()


def measure(name: str) -> Callable[[Callable], Callable]:
    """Time a function with the global tracker. See PerformanceTracker.measure."""
    return perf_tracker.measure(name)


def measure_block(name: str):
    """Time a block with the global tracker."""
    return perf_tracker.measure_block(name)


def get_performance_report(prefix: str = "") -> str:
    return perf_tracker.report(prefix)
