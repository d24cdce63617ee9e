"""
Profiling helpers for tranco-cache.

A rebuild streams about a million rows into SQLite; `profile_block` records how
long that took and how much memory the process peaked at while doing it, so
the figures can be logged and reported by the CLI.

Usage:
    from tranco_cache.utils.profiler import profile_block

    with profile_block("rebuild") as stats:
        load_rows()

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Measurements for one profiled block.
    """

    label: str
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None
    extra: dict[str, Any] = field(default_factory=dict)


@contextlib.contextmanager
def profile_block(label: str, sample_interval_ms: int = 100) -> Generator[ProfileStats, None, None]:
    """
    Measure wall-clock time, peak RSS and CPU usage of the enclosed block.

    Peak RSS is sampled by a daemon thread every `sample_interval_ms`, so short
    spikes between samples can be missed.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop = threading.Event()

    def _sample() -> None:
        nonlocal peak_rss
        while not stop.wait(sample_interval_ms / 1000.0):
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return

    process.cpu_percent(interval=None)
    sampler = threading.Thread(target=_sample, name=f"profile-{label}", daemon=True)
    sampler.start()

    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - start
        stop.set()
        sampler.join(timeout=1.0)
        stats.peak_rss_bytes = max(peak_rss, process.memory_info().rss)
        stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["ProfileStats", "profile_block"]
