"""
Step-level performance metrics for test runs: collection, aggregation,
threshold classification and reporting.
"""
from perfmetrics.analysis.aggregation import aggregate, group_by_feature
from perfmetrics.analysis.classification import (
    DEFAULT_THRESHOLDS,
    Thresholds,
    classify,
    overall_verdict,
)
from perfmetrics.analysis.report import build_report
from perfmetrics.core.config import PerformanceConfig
from perfmetrics.core.models import ReportModel
from perfmetrics.core.session import PerformanceSession
from perfmetrics.core.store import MetricStore
from perfmetrics.models import (
    NO_DATA,
    TIMING_FIELDS,
    AggregateStats,
    FieldStats,
    MetricRecord,
    NoData,
)

__all__ = [
    'DEFAULT_THRESHOLDS',
    'NO_DATA',
    'TIMING_FIELDS',
    'AggregateStats',
    'FieldStats',
    'MetricRecord',
    'MetricStore',
    'NoData',
    'PerformanceConfig',
    'PerformanceSession',
    'ReportModel',
    'Thresholds',
    'aggregate',
    'build_report',
    'classify',
    'group_by_feature',
    'overall_verdict',
]
