"""
Timing metrics calculator - per-field statistics over step timings
"""
from math import fsum
from typing import Sequence

from perfmetrics.models import FIELD_LABELS, FieldStats, MetricRecord
from .base import MetricCalculator, MetricResult


class TimingMetric(MetricCalculator):
    """Calculates mean, count, min and max of one timing field"""

    def __init__(self, field: str):
        self.field = field

    @property
    def name(self) -> str:
        return self.field

    @property
    def description(self) -> str:
        return f"Mean, min and max of {FIELD_LABELS.get(self.field, self.field)} in milliseconds"

    def calculate(self, records: Sequence[MetricRecord]) -> MetricResult:
        values = [getattr(record, self.field) for record in records]
        count = len(values)

        # fsum is exactly rounded, so the mean does not depend on record order
        field_stats = FieldStats(
            mean=fsum(values) / count,
            count=count,
            min=min(values),
            max=max(values),
        )

        return MetricResult(
            name=self.name,
            value=field_stats,
            metadata={"label": FIELD_LABELS.get(self.field, self.field)},
        )
