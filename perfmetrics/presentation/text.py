"""
Plain-text renderings of a run report and of single steps.
"""
from typing import Mapping

from perfmetrics.analysis.classification import Thresholds, classify, with_defaults
from perfmetrics.core.models import ReportModel
from perfmetrics.models import FIELD_LABELS, MetricRecord, NoData

WIDTH = 66


def _rule(left: str, fill: str, right: str) -> str:
    return left + fill * WIDTH + right


def _line(text: str = "") -> str:
    return "║  " + truncate(text, WIDTH - 4).ljust(WIDTH - 4) + "  ║"


def truncate(text: str | None, max_length: int) -> str:
    if text is None:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def render_text_summary(report: ReportModel | NoData) -> str:
    """Boxed suite summary: totals, cache efficiency, averages and verdicts."""
    if isinstance(report, NoData):
        return "\n".join([
            _rule("╔", "═", "╗"),
            _line("TEST SUITE PERFORMANCE SUMMARY"),
            _rule("╠", "═", "╣"),
            _line(report.message),
            _rule("╚", "═", "╝"),
        ])

    suite = report.suite
    lines = [
        _rule("╔", "═", "╗"),
        _line("TEST SUITE PERFORMANCE SUMMARY"),
        _rule("╠", "═", "╣"),
        _line(f"Total Features:        {suite.totalFeatures}"),
        _line(f"Total Scenarios:       {suite.totalScenarios}"),
        _line(f"Total Steps:           {suite.totalSteps}"),
        _line(f"Cached Steps:          {suite.cachedSteps}"),
        _line(f"Cache Hit Rate:        {suite.cacheHitRate:.1f}%"),
        _rule("╠", "═", "╣"),
        _line("SUITE-WIDE AVERAGE METRICS"),
        _rule("╠", "═", "╣"),
    ]
    for summary in suite.fields:
        lines.append(_line(
            f"Avg {summary.label + ':':<22}{summary.mean:>8.0f} ms  {summary.verdict}"
        ))
    lines += [
        _rule("╠", "═", "╣"),
        _line(f"Performance Test {'PASSED' if suite.overallVerdict == 'PASS' else 'FAILED'}"),
        _line(f"{suite.passedCount} of {suite.totalMetrics} metrics passed threshold requirements"),
        _rule("╚", "═", "╝"),
    ]
    return "\n".join(lines)


def render_step_summary(record: MetricRecord, thresholds: Mapping[str, Thresholds] | None = None) -> str:
    """Boxed metrics of a single step, with a verdict per timing."""
    thresholds = with_defaults(thresholds)

    lines = [
        _rule("╔", "═", "╗"),
        _line(f"{record.stepLabel} PERFORMANCE METRICS"),
        _rule("╠", "═", "╣"),
    ]
    for name, value in record.timings().items():
        verdict = classify(value, *thresholds[name])
        lines.append(_line(f"{FIELD_LABELS[name] + ':':<24}{value:>8} ms  {verdict}"))
    lines += [
        _line(f"{'From Cache:':<24}{'Yes' if record.fromCache else 'No':>8}"),
        _rule("╠", "═", "╣"),
        _line(f"Scenario: {record.scenarioName}"),
        _line(f"Feature:  {record.featureName}"),
        _rule("╚", "═", "╝"),
    ]
    return "\n".join(lines)
