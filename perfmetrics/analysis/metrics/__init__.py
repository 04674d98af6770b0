"""
Metric calculators for step timings and the registry that runs them
"""
from perfmetrics.models import TIMING_FIELDS
from .base import MetricCalculator, MetricResult
from .registry import MetricRegistry
from .timing_metric import TimingMetric
from .cache_metric import CacheMetric


def create_default_registry() -> MetricRegistry:
    """One TimingMetric per timing field, then the CacheMetric"""
    registry = MetricRegistry()
    for name in TIMING_FIELDS:
        registry.register(TimingMetric(name))
    registry.register(CacheMetric())
    return registry


_registry = create_default_registry()


def get_registry() -> MetricRegistry:
    """Registry used by aggregate() when none is passed"""
    return _registry


__all__ = [
    'MetricCalculator',
    'MetricResult',
    'MetricRegistry',
    'TimingMetric',
    'CacheMetric',
    'create_default_registry',
    'get_registry',
]
