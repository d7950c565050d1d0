# MIT License (see LICENSE)
"""
Section timing for the simulation loop.

Simulation.advance() times its "integrate" and "contacts" phases when a
Profiler is attached; benchmarks read the totals afterwards.

Example:
    profiler = Profiler()
    sim = Simulation(system, 640, 480, profiler=profiler)
    for _ in range(1000):
        sim.advance()
    for name, row in profiler.summary().items():
        print(name, row["mean_ms"])
"""
from __future__ import annotations
import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager


class Profiler:
    """
    Accumulates wall-clock samples per named section.

    Attributes:
        samples: Section name -> list of durations in seconds.
    """

    def __init__(self) -> None:
        self.samples: dict[str, list[float]] = defaultdict(list)

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block under ``name``."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.samples[name].append(time.perf_counter() - t0)

    def total(self, name: str) -> float:
        """Total seconds spent in a section (0 if never entered)."""
        return sum(self.samples.get(name, ()))

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Per-section statistics.

        Returns:
            Dict mapping section name to {'n', 'total_ms', 'mean_ms', 'max_ms'}.
        """
        out = {}
        for name, times in self.samples.items():
            n = len(times)
            out[name] = {
                "n": n,
                "total_ms": 1e3 * sum(times),
                "mean_ms": 1e3 * sum(times) / n,
                "max_ms": 1e3 * max(times),
            }
        return out

    def clear(self) -> None:
        self.samples.clear()
