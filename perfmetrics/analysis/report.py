from typing import Mapping, Sequence

from perfmetrics.analysis.aggregation import aggregate, group_by_feature
from perfmetrics.analysis.classification import (
    REQUIRED_PASSES,
    STANDARD_FIELD_COUNT,
    Thresholds,
    classify,
    classify_fields,
    overall_verdict,
    passed_count,
    with_defaults,
)
from perfmetrics.core.models import (
    FeatureReport,
    FieldSummary,
    ReportModel,
    ScenarioReport,
    StepReport,
    SuiteSummary,
)
from perfmetrics.core.store import MetricStore
from perfmetrics.models import (
    FIELD_LABELS,
    NO_DATA,
    AggregateStats,
    MetricRecord,
    NoData,
)


def _field_summaries(stats: AggregateStats, thresholds: Mapping[str, Thresholds]) -> list[FieldSummary]:
    verdicts = classify_fields(stats, thresholds)
    summaries = []

    for name, verdict in verdicts.items():
        field_stats = stats.fields[name]
        summaries.append(FieldSummary(
            field=name,
            label=FIELD_LABELS[name],
            mean=field_stats.mean,
            min=field_stats.min,
            max=field_stats.max,
            count=field_stats.count,
            verdict=verdict,
            good=thresholds[name].good,
            poor=thresholds[name].poor,
        ))

    return summaries


def _step_report(record: MetricRecord, thresholds: Mapping[str, Thresholds]) -> StepReport:
    values = record.timings()
    return StepReport(
        stepLabel=record.stepLabel,
        values=values,
        verdicts={name: classify(value, *thresholds[name]) for name, value in values.items()},
        fromCache=record.fromCache,
        capturedAt=record.capturedAt,
    )


def _scenario_report(name: str,
                     feature: str,
                     records: Sequence[MetricRecord],
                     thresholds: Mapping[str, Thresholds],
                     required_passes: int) -> ScenarioReport:
    stats = aggregate(records)
    fields = _field_summaries(stats, thresholds)
    verdicts = [summary.verdict for summary in fields]

    return ScenarioReport(
        name=name,
        featureName=feature,
        totalSteps=stats.totalSteps,
        cachedSteps=stats.cachedSteps,
        cacheHitRate=stats.cacheHitRate,
        fields=fields,
        passedCount=passed_count(verdicts),
        overallVerdict=overall_verdict(verdicts, required_passes),
        steps=[_step_report(record, thresholds) for record in records],
    )


def build_report(store: MetricStore,
                 thresholds: Mapping[str, Thresholds] | None = None,
                 required_passes: int = REQUIRED_PASSES) -> ReportModel | NoData:
    """
    Builds the run report from the records currently held by a store.

    The store is only read, through a single consistent snapshot, so the
    function can be called any number of times; each call reflects the
    store's contents at that moment.

    Args:
        store (MetricStore): The store holding the run's records.
        thresholds (Mapping[str, Thresholds] | None): Per-field thresholds.
            Missing fields fall back to DEFAULT_THRESHOLDS.
        required_passes (int): PASS verdicts needed, out of the six fields,
            for an overall PASS.

    Returns:
        The report, or NO_DATA when the store holds no records.
    """

    thresholds = with_defaults(thresholds)
    snapshot = store.snapshot()

    suite_stats = aggregate(snapshot.all)
    if isinstance(suite_stats, NoData):
        return NO_DATA

    features = []
    for feature, scenario_names in group_by_feature(snapshot.byScenario).items():
        scenarios = [
            _scenario_report(name, feature, snapshot.byScenario[name], thresholds, required_passes)
            for name in scenario_names
        ]
        features.append(FeatureReport(
            name=feature,
            totalSteps=sum(scenario.totalSteps for scenario in scenarios),
            scenarios=scenarios,
        ))

    suite_fields = _field_summaries(suite_stats, thresholds)
    suite_verdicts = [summary.verdict for summary in suite_fields]

    suite = SuiteSummary(
        totalFeatures=len(features),
        totalScenarios=len(snapshot.byScenario),
        totalSteps=suite_stats.totalSteps,
        cachedSteps=suite_stats.cachedSteps,
        cacheHitRate=suite_stats.cacheHitRate,
        fields=suite_fields,
        passedCount=passed_count(suite_verdicts),
        totalMetrics=STANDARD_FIELD_COUNT,
        overallVerdict=overall_verdict(suite_verdicts, required_passes),
    )

    return ReportModel(suite=suite, features=features)
