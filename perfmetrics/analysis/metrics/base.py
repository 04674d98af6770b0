"""
Calculator interface shared by the timing and cache metrics
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence

from perfmetrics.models import MetricRecord


@dataclass
class MetricResult:
    """Value produced by one calculator over one set of step records"""
    name: str
    value: Any
    metadata: Dict[str, Any] = field(default_factory=dict)


class MetricCalculator(ABC):
    """
    A named computation over a sequence of MetricRecords.

    Subclasses provide `name`, `description` and `calculate()`, then get
    added to a MetricRegistry. The records passed in are shared with the
    store snapshot they came from: read them, never mutate them. Results
    must be the same for any ordering of the same records.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Key of the result in MetricRegistry.calculate_all()"""

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @abstractmethod
    def calculate(self, records: Sequence[MetricRecord]) -> MetricResult:
        """
        Args:
            records: Step records of one scenario, or of the whole suite

        Returns:
            MetricResult keyed by this calculator's name
        """

    def validate_records(self, records: Sequence[MetricRecord]) -> bool:
        """Calculators are skipped for an empty record set unless overridden"""
        return bool(records)
