"""
Cache metrics calculator - counts steps served from the browser cache
"""
from typing import Sequence

from perfmetrics.models import MetricRecord
from .base import MetricCalculator, MetricResult


class CacheMetric(MetricCalculator):
    """Counts total steps and cached steps"""

    @property
    def name(self) -> str:
        return "cache"

    @property
    def description(self) -> str:
        return "Counts steps and how many of them were served from cache"

    def calculate(self, records: Sequence[MetricRecord]) -> MetricResult:
        total_steps = len(records)
        cached_steps = sum(1 for record in records if record.fromCache)

        return MetricResult(
            name=self.name,
            value=(total_steps, cached_steps),
            metadata={
                "cache_hit_rate": (cached_steps / total_steps * 100) if total_steps > 0 else 0,
            }
        )
