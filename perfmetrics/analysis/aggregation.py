from typing import Mapping, Sequence

from perfmetrics.analysis.metrics import MetricRegistry, get_registry
from perfmetrics.models import (
    NO_DATA,
    TIMING_FIELDS,
    AggregateStats,
    MetricRecord,
    NoData,
    feature_key,
)


def aggregate(records: Sequence[MetricRecord], registry: MetricRegistry | None = None) -> AggregateStats | NoData:
    """
    Computes per-field statistics and step counts over a set of records.

    The result depends only on the multiset of records, never on their order,
    and the input is left untouched. Values are averaged as they are, without
    any outlier handling.

    Args:
        records (Sequence[MetricRecord]): The records to aggregate, usually
            a snapshot taken from a MetricStore.
        registry (MetricRegistry | None): The calculators to run. Defaults to
            the package registry (one calculator per timing field plus the
            cache counter).

    Returns:
        The aggregated statistics, or NO_DATA when there are no records.
    """

    if len(records) == 0:
        return NO_DATA

    registry = registry if registry is not None else get_registry()
    results = registry.calculate_all(records)

    fields = {name: results[name].value for name in TIMING_FIELDS if name in results}

    if "cache" in results:
        total_steps, cached_steps = results["cache"].value
    else:
        total_steps = len(records)
        cached_steps = sum(1 for record in records if record.fromCache)

    return AggregateStats(
        fields=fields,
        totalSteps=total_steps,
        cachedSteps=cached_steps,
    )


def group_by_feature(by_scenario: Mapping[str, Sequence[MetricRecord]]) -> dict[str, list[str]]:
    """
    Groups scenario names by the feature they belong to.

    A scenario belongs to the feature of its first record. Features keep the
    order in which they first appear, and scenarios keep their order within
    each feature. Scenarios whose feature is unset fall under the
    "Unknown Suite" bucket.

    Args:
        by_scenario (Mapping[str, Sequence[MetricRecord]]): Records keyed by
            scenario name, in first-appearance order.

    Returns:
        A mapping of feature name to the names of its scenarios.
    """

    result: dict[str, list[str]] = {}

    for name, records in by_scenario.items():
        feature = feature_key(records[0].featureName) if records else feature_key(None)
        result.setdefault(feature, []).append(name)

    return result
