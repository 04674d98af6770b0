"""
Self-contained HTML rendering of a run report.

Hierarchy follows the report model: suite header and metric cards, then one
collapsible section per feature holding its scenario table, each scenario
row followed by its step-wise details. A single step gets a small card
dashboard of its own, and the suite a compact widget fragment.
"""
from html import escape
from typing import Mapping

from perfmetrics.analysis.classification import Thresholds, classify, with_defaults
from perfmetrics.core.models import FeatureReport, FieldSummary, ReportModel, ScenarioReport
from perfmetrics.models import FIELD_LABELS, TIMING_FIELDS, MetricRecord, NoData

_CSS_CLASS = {"PASS": "passed", "WARN": "warning", "FAIL": "failed"}
_BADGE = {"PASS": "PASSED", "WARN": "WARNING", "FAIL": "FAILED"}

_PAGE_STYLE = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background: #f5f7fa; padding: 20px; }
.container { max-width: 1400px; margin: 0 auto; background: white; border-radius: 12px; box-shadow: 0 4px 20px rgba(0,0,0,0.1); overflow: hidden; }
.header { padding: 40px; text-align: center; color: white; }
.header.passed { background: linear-gradient(135deg, #28a745 0%, #20c997 100%); }
.header.failed { background: linear-gradient(135deg, #dc3545 0%, #c82333 100%); }
.header.empty { background: linear-gradient(135deg, #6c757d 0%, #495057 100%); }
.section { padding: 30px 40px; border-bottom: 1px solid #e9ecef; }
.section-title { font-size: 24px; margin-bottom: 20px; color: #2c3e50; }
"""

_CARD_STYLE = """
.summary-boxes, .metrics-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 20px; }
.summary-box, .metric-card { border-radius: 10px; padding: 20px; box-shadow: 0 2px 10px rgba(0,0,0,0.08); }
.metric-card.passed { background: #d4edda; border: 2px solid #28a745; }
.metric-card.warning { background: #fff3cd; border: 2px solid #ffc107; }
.metric-card.failed { background: #f8d7da; border: 2px solid #dc3545; }
.metric-value { font-size: 36px; font-weight: bold; margin: 10px 0; }
.status-badge { display: inline-block; padding: 4px 12px; border-radius: 20px; font-size: 13px; font-weight: bold; }
.status-badge.passed { background: #28a745; color: white; }
.status-badge.warning { background: #ffc107; color: #000; }
.status-badge.failed { background: #dc3545; color: white; }
.threshold-row { display: flex; justify-content: space-between; font-size: 13px; margin-top: 6px; }
"""

_TABLE_STYLE = """
details { margin: 10px 0; }
summary { cursor: pointer; font-size: 18px; font-weight: 600; padding: 12px; background: #007bff; color: white; border-radius: 8px; }
table { width: 100%; border-collapse: collapse; margin: 10px 0; font-size: 14px; }
th, td { padding: 8px; border-bottom: 1px solid #dee2e6; text-align: center; }
td.name { text-align: left; }
td.passed { background: #d4edda; }
td.warning { background: #fff3cd; }
td.failed { background: #f8d7da; }
"""


def _ms(value: float) -> str:
    return f"{value:.0f} ms"


def _limit(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else str(value)


def _metric_card(summary: FieldSummary) -> str:
    css = _CSS_CLASS[summary.verdict]
    return (
        f"<div class='metric-card {css}'>"
        f"<div class='metric-name'>{escape(summary.label)}</div>"
        f"<div class='metric-value'>{_ms(summary.mean)}</div>"
        f"<div class='status-badge {css}'>{_BADGE[summary.verdict]}</div>"
        f"<div class='threshold-row'><span>Good (Passed):</span><span>&le; {_limit(summary.good)} ms</span></div>"
        f"<div class='threshold-row'><span>Acceptable (Warning):</span>"
        f"<span>&gt; {_limit(summary.good)} - {_limit(summary.poor)} ms</span></div>"
        f"<div class='threshold-row'><span>Poor (Failed):</span><span>&gt; {_limit(summary.poor)} ms</span></div>"
        "</div>"
    )


def _field_header() -> str:
    return "".join(f"<th>{escape(FIELD_LABELS[name])}</th>" for name in TIMING_FIELDS)


def _step_table(scenario: ScenarioReport) -> str:
    rows = []
    for step in scenario.steps:
        cells = "".join(
            f"<td class='{_CSS_CLASS[step.verdicts[name]]}'>{step.values[name]} ms</td>"
            for name in TIMING_FIELDS
        )
        rows.append(
            f"<tr><td class='name'>{escape(step.stepLabel)}</td>{cells}"
            f"<td>{'Yes' if step.fromCache else 'No'}</td></tr>"
        )
    return (
        f"<details><summary>Step-wise details: {escape(scenario.name)} ({scenario.totalSteps} steps)</summary>"
        f"<table><thead><tr><th>Step</th>{_field_header()}<th>Cache</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table></details>"
    )


def _scenario_row(scenario: ScenarioReport) -> str:
    by_field = {summary.field: summary for summary in scenario.fields}
    cells = "".join(
        f"<td class='{_CSS_CLASS[by_field[name].verdict]}'>{_ms(by_field[name].mean)}</td>"
        if name in by_field else "<td>-</td>"
        for name in TIMING_FIELDS
    )
    status_css = _CSS_CLASS[scenario.overallVerdict]
    return (
        f"<tr><td class='name'>{escape(scenario.name)}</td><td>{scenario.totalSteps}</td>{cells}"
        f"<td class='{status_css}'>{_BADGE[scenario.overallVerdict]}</td></tr>"
        f"<tr><td colspan='{len(TIMING_FIELDS) + 3}'>{_step_table(scenario)}</td></tr>"
    )


def _feature_section(feature: FeatureReport) -> str:
    rows = "".join(_scenario_row(scenario) for scenario in feature.scenarios)
    return (
        f"<details><summary>{escape(feature.name)} "
        f"({feature.totalScenarios} scenarios, {feature.totalSteps} steps)</summary>"
        f"<table><thead><tr><th>Scenario</th><th>Steps</th>{_field_header()}<th>Status</th></tr></thead>"
        f"<tbody>{rows}</tbody></table></details>"
    )


def _document(body: str, style: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset='UTF-8'>"
        "<title>Performance Test Report</title>"
        f"<style>{style}</style></head><body><div class='container'>{body}</div></body></html>"
    )


def render_html_report(report: ReportModel | NoData) -> str:
    if isinstance(report, NoData):
        return _document(
            "<div class='header empty'><h1>Performance Test Report</h1>"
            f"<div class='message'>{escape(report.message)}</div></div>",
            _PAGE_STYLE,
        )

    suite = report.suite
    passed = suite.overallVerdict == "PASS"

    header = (
        f"<div class='header {'passed' if passed else 'failed'}'>"
        "<h1>Performance Test Report</h1>"
        f"<div class='message'>Performance Test {'PASSED' if passed else 'FAILED'}</div>"
        f"<div class='score'>{suite.passedCount} of {suite.totalMetrics} metrics passed threshold requirements</div>"
        "</div>"
    )

    summary_boxes = "".join(
        f"<div class='summary-box'><div class='label'>{label}</div><div class='value'>{value}</div></div>"
        for label, value in (
            ("Total Features", suite.totalFeatures),
            ("Total Scenarios", suite.totalScenarios),
            ("Total Steps", suite.totalSteps),
            ("Cache Hit Rate", f"{suite.cacheHitRate:.1f}%"),
            ("Metrics Passed", f"{suite.passedCount}/{suite.totalMetrics}"),
        )
    )

    cards = "".join(_metric_card(summary) for summary in suite.fields)
    features = "".join(_feature_section(feature) for feature in report.features)

    return _document(
        header
        + f"<div class='section'><h2 class='section-title'>Test Summary</h2><div class='summary-boxes'>{summary_boxes}</div></div>"
        + f"<div class='section'><h2 class='section-title'>Performance Metrics Details</h2><div class='metrics-grid'>{cards}</div></div>"
        + f"<div class='section'><h2 class='section-title'>Suite-wise Performance Summary "
          f"({suite.totalFeatures} suites, {suite.totalScenarios} scenarios)</h2>{features}</div>",
        _PAGE_STYLE + _CARD_STYLE + _TABLE_STYLE,
    )


def render_step_dashboard(record: MetricRecord, thresholds: Mapping[str, Thresholds] | None = None) -> str:
    """One card per timing of a single step, colored by its verdict."""
    thresholds = with_defaults(thresholds)

    cards = []
    for name, value in record.timings().items():
        verdict = classify(value, *thresholds[name])
        css = _CSS_CLASS[verdict]
        cards.append(
            f"<div class='metric-card {css}'>"
            f"<div class='metric-name'>{escape(FIELD_LABELS[name])}</div>"
            f"<div class='metric-value'>{value} ms</div>"
            f"<div class='status-badge {css}'>{_BADGE[verdict]}</div>"
            "</div>"
        )

    return _document(
        f"<div class='section'><h2 class='section-title'>{escape(record.stepLabel)} Performance Dashboard</h2>"
        f"<div class='scenario'>Scenario: {escape(record.scenarioName)} | Feature: {escape(record.featureName)}"
        f" | From Cache: {'Yes' if record.fromCache else 'No'}</div></div>"
        f"<div class='section'><div class='metrics-grid'>{''.join(cards)}</div></div>",
        _PAGE_STYLE + _CARD_STYLE,
    )


def render_widget_html(report: ReportModel | NoData) -> str:
    """Compact fragment for an overview page: average page load and TTFB, total steps."""
    if isinstance(report, NoData):
        body = f"<div class='widget-message'>{escape(report.message)}</div>"
    else:
        means = {summary.field: summary.mean for summary in report.suite.fields}
        tiles = (
            (_ms(means["pageLoad"]), "AVG PAGE LOAD"),
            (_ms(means["timeToFirstByte"]), "AVG TTFB"),
            (str(report.suite.totalSteps), "TOTAL STEPS"),
        )
        body = (
            "<div style='display:grid; grid-template-columns:repeat(3,1fr); gap:10px;'>"
            + "".join(
                f"<div style='text-align:center;'><div style='font-size:24px; font-weight:bold;'>{value}</div>"
                f"<div style='font-size:11px; opacity:0.9;'>{label}</div></div>"
                for value, label in tiles
            )
            + "</div>"
        )

    return (
        "<div class='widget' style='padding:20px; background:linear-gradient(135deg, #667eea 0%, #764ba2 100%); "
        "border-radius:8px; color:white;'>"
        f"<h3 style='margin-top:0;'>Performance Summary</h3>{body}</div>\n"
    )
