from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Hashable
import threading

from .models import DispatchReport


@dataclass
class DispatchStats:
    """Aggregated dispatch counters for one registry."""
    publish_count: int = 0
    unmatched_count: int = 0        # publishes that found no handler
    delivered_count: int = 0
    failure_count: int = 0
    per_key: Counter = field(default_factory=Counter)

    def record(self, key: Hashable, matched: int, delivered: int, failed: int) -> None:
        self.publish_count += 1
        self.per_key[key] += 1
        if matched == 0:
            self.unmatched_count += 1
        self.delivered_count += delivered
        self.failure_count += failed


class DispatchMonitor:
    """
    Tracks what a registry has dispatched.

    Every publish() hands its DispatchReport here, including the ones that
    matched nothing and the ones cut short by a propagating exception.
    """

    def __init__(self) -> None:
        self.stats = DispatchStats()
        self._lock = threading.Lock()

    def observe(self, report: DispatchReport) -> None:
        with self._lock:
            self.stats.record(
                report.key,
                report.matched,
                report.delivered,
                len(report.failures),
            )

    def reset(self) -> None:
        with self._lock:
            self.stats = DispatchStats()

    def summary(self) -> DispatchStats:
        """Return aggregated dispatch statistics."""
        return self.stats
