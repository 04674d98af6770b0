"""
Thread-safe storage for the performance metrics of one test run.
"""
import threading
from dataclasses import dataclass, field
from typing import Sequence

from perfmetrics.core.utils.logger import get_performance_logger
from perfmetrics.models import MetricRecord, scenario_key


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of both store views, taken in one critical section."""
    all: tuple[MetricRecord, ...]
    byScenario: dict[str, tuple[MetricRecord, ...]]


@dataclass
class _Generation:
    all: list[MetricRecord] = field(default_factory=list)
    by_scenario: dict[str, list[MetricRecord]] = field(default_factory=dict)


class MetricStore:
    """
    Accumulates MetricRecords, globally and per scenario.

    Any number of threads may call record() concurrently. Writers serialize
    on a lock held only for the two appends, so every record lands in both
    views or in neither. all_records() and scenario_records() copy without
    taking the lock (list copies are atomic), so a reader never makes a
    writer wait. clear() swaps in an empty generation under the writer lock:
    a racing record() lands wholly before or wholly after the clear.

    One store is created per run and passed to every collaborator.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = _Generation()

    def record(self, metrics: MetricRecord) -> None:
        """
        Append a record to the global sequence and to its scenario bucket.

        Args:
            metrics: The record to store. Its values are not validated.
        """
        key = scenario_key(metrics.scenarioName)
        with self._lock:
            generation = self._generation
            generation.all.append(metrics)
            generation.by_scenario.setdefault(key, []).append(metrics)

    def scenario_records(self, name: str) -> tuple[MetricRecord, ...]:
        """
        Get the records of a scenario, in the order they were recorded.

        Args:
            name: Scenario name. An empty name refers to the reserved
                "unknown" bucket.

        Returns:
            A snapshot of the scenario's records; empty for unknown names.
        """
        bucket = self._generation.by_scenario.get(scenario_key(name))
        if bucket is None:
            return ()
        return tuple(bucket)

    def all_records(self) -> tuple[MetricRecord, ...]:
        return tuple(self._generation.all)

    def scenario_names(self) -> list[str]:
        """Scenario keys in order of first appearance."""
        return list(self._generation.by_scenario.keys())

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            generation = self._generation
            return StoreSnapshot(
                all=tuple(generation.all),
                byScenario={name: tuple(bucket) for name, bucket in generation.by_scenario.items()},
            )

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._generation.all)
            self._generation = _Generation()
        get_performance_logger().debug(f"Cleared {dropped} stored metrics")

    def statistics(self) -> dict[str, int]:
        snap = self.snapshot()
        return {
            "totalSteps": len(snap.all),
            "totalScenarios": len(snap.byScenario),
        }

    def extend(self, records: Sequence[MetricRecord]) -> None:
        for metrics in records:
            self.record(metrics)

    def __len__(self) -> int:
        return len(self._generation.all)
