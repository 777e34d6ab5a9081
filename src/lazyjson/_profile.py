"""
Timing for the parse and access paths.

Set LAZYJSON_PROFILE in the environment to collect per-path counters; with
it unset, or under ``python -O``, ProfileContext does nothing.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

from ._config import PROFILE_HOT_PATHS

logger = logging.getLogger(__name__)


@dataclass
class HotPathStats:
    """Counters for one profiled path."""

    path: str
    calls: int = 0
    total_ns: int = 0
    max_ns: int = 0
    nbytes: int = 0

    def record(self, elapsed_ns: int, nbytes: int = 0) -> None:
        self.calls += 1
        self.total_ns += elapsed_ns
        self.max_ns = max(self.max_ns, elapsed_ns)
        self.nbytes += nbytes

    @property
    def mean_ns(self) -> float:
        return self.total_ns / self.calls if self.calls else 0.0


def log_hot_path_stats(level: int = logging.INFO) -> None:
    """Logs one line per profiled path, slowest total first."""
    stats = sorted(
        get_hot_path_stats().values(), key=lambda s: s.total_ns, reverse=True
    )
    for entry in stats:
        logger.log(
            level,
            "%s: %d calls, %.1f us mean, %.1f us max, %d bytes",
            entry.path,
            entry.calls,
            entry.mean_ns / 1000,
            entry.max_ns / 1000,
            entry.nbytes,
        )


if PROFILE_HOT_PATHS:
    _stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Times the enclosed block under ``path``."""

        __slots__ = ("path", "nbytes", "_started")

        def __init__(self, path: str, nbytes: int = 0) -> None:
            self.path = path
            self.nbytes = nbytes
            self._started = 0

        def __enter__(self) -> "ProfileContext":
            self._started = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            elapsed = time.perf_counter_ns() - self._started
            entry = _stats.get(self.path)
            if entry is None:
                entry = _stats[self.path] = HotPathStats(self.path)
            entry.record(elapsed, self.nbytes)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return dict(_stats)

    def clear_hot_path_stats() -> None:
        _stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        __slots__ = ()

        def __init__(self, path: str, nbytes: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass
