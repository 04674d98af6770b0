"""
Ordered collection of metric calculators run together by aggregate()
"""
from typing import Dict, Sequence

from perfmetrics.core.utils.logger import get_performance_logger
from perfmetrics.models import MetricRecord
from .base import MetricCalculator, MetricResult


class MetricRegistry:
    """Calculators keyed by name, run in the order they were added"""

    def __init__(self):
        self._calculators: Dict[str, MetricCalculator] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._calculators

    def __len__(self) -> int:
        return len(self._calculators)

    def register(self, calculator: MetricCalculator):
        """
        Raises:
            ValueError: If a calculator with the same name is present
        """
        if calculator.name in self._calculators:
            raise ValueError(f"Metric '{calculator.name}' is already registered")
        self._calculators[calculator.name] = calculator

    def unregister(self, name: str):
        """Remove a calculator; unknown names are ignored"""
        self._calculators.pop(name, None)

    def get(self, name: str) -> MetricCalculator:
        try:
            return self._calculators[name]
        except KeyError:
            raise KeyError(f"Metric '{name}' not found in registry") from None

    def calculate_all(self, records: Sequence[MetricRecord]) -> Dict[str, MetricResult]:
        """
        Run every calculator that accepts `records`.

        A calculator that raises is logged with its traceback and has no
        entry in the result. The others still run.

        Returns:
            Mapping of calculator name to its MetricResult
        """
        logger = get_performance_logger()
        results: Dict[str, MetricResult] = {}

        for name, calculator in self._calculators.items():
            if not calculator.validate_records(records):
                logger.debug(f"Metric '{name}' skipped for {len(records)} records")
                continue
            try:
                results[name] = calculator.calculate(records)
            except Exception:
                logger.exception(f"Error calculating metric '{name}'")

        return results
