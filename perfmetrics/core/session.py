"""
Test-run side of metric collection: decides per step whether to record,
labels the steps, and finalizes the run exactly once.
"""
import threading
import time
from typing import Iterable, Mapping

from perfmetrics.analysis.report import build_report
from perfmetrics.core.config import PerformanceConfig
from perfmetrics.core.models import ReportModel
from perfmetrics.core.store import MetricStore
from perfmetrics.core.utils.logger import get_performance_logger, setup_performance_logger
from perfmetrics.data.persistence import ReportPersistence
from perfmetrics.models import TIMING_FIELDS, MetricRecord, NoData, scenario_key
from perfmetrics.presentation.html import render_html_report, render_step_dashboard, render_widget_html
from perfmetrics.presentation.text import render_step_summary, render_text_summary

TEXT_SUMMARY_FILENAME = "suite-performance-summary.txt"
HTML_REPORT_FILENAME = "suite-performance-summary.html"
WIDGET_HTML_FILENAME = "widgets/performance-widget.html"


class PerformanceSession:
    """
    Owns the MetricStore of one test run.

    Step hooks call record_step() (from any thread); the suite-end hook calls
    finalize(). finalize() runs once: later calls return the first result
    without writing anything again.
    """

    def __init__(self, store: MetricStore = None, config: PerformanceConfig = None, run_name: str = None):
        self.store = store if store is not None else MetricStore()
        self.config = config if config is not None else PerformanceConfig()
        self.run_name = run_name

        if self.config.logs_dir is not None:
            setup_performance_logger(run_name, self.config.logs_dir)

        self._skip_tags = {tag.lower() for tag in self.config.skip_tags}
        self._counter_lock = threading.Lock()
        self._step_counters: dict[str, int] = {}

        self._finalize_lock = threading.Lock()
        self._result: ReportModel | NoData | None = None

    @property
    def finalized(self) -> bool:
        return self._result is not None

    def should_skip(self, tags: Iterable[str]) -> bool:
        """True when any tag is one of the configured opt-out tags (case-insensitive)."""
        return any(tag.lower() in self._skip_tags for tag in tags)

    def settle(self):
        """Wait for the page to settle before the timing source is sampled."""
        if self.config.settle_delay_ms > 0:
            time.sleep(self.config.settle_delay_ms / 1000)

    def _next_step_number(self, scenario: str) -> int:
        key = scenario_key(scenario)
        with self._counter_lock:
            number = self._step_counters.get(key, 0) + 1
            self._step_counters[key] = number
        return number

    def record_step(self,
                    scenario: str,
                    feature: str,
                    timings: Mapping[str, int],
                    from_cache: bool = False,
                    tags: Iterable[str] = (),
                    step_label: str = None) -> MetricRecord | None:
        """
        Record the timings observed for one step. With an output directory
        and step artifacts enabled, the step's text summary and HTML
        dashboard are written under steps/<scenario>/.

        Args:
            scenario: Scenario name
            feature: Feature (suite) name
            timings: Milliseconds per timing field; missing fields count as 0
            from_cache: Whether the page was served from cache
            tags: Tags of the scenario, checked against the opt-out tags
            step_label: Label of the step. Defaults to "Step #<n>", n counting
                the recorded steps of the scenario from 1.

        Returns:
            The stored record, or None when the scenario opted out
        """
        if self.should_skip(tags):
            return None

        if step_label is None:
            step_label = f"Step #{self._next_step_number(scenario)}"

        metrics = MetricRecord(
            stepLabel=step_label,
            **{name: timings.get(name, 0) for name in TIMING_FIELDS},
            fromCache=from_cache,
            scenarioName=scenario,
            featureName=feature,
        )
        self.store.record(metrics)

        step_summary = render_step_summary(metrics, self.config.thresholds)
        get_performance_logger().debug(f"\n{step_summary}")
        if self.config.output_dir is not None and self.config.step_artifacts:
            ReportPersistence(self.config.output_dir).write_step_documents(
                metrics, step_summary, render_step_dashboard(metrics, self.config.thresholds)
            )

        return metrics

    def finalize(self) -> ReportModel | NoData:
        """
        Build the run report and, if an output directory is configured,
        write the export, the report model, the step CSV, the widget data
        and the rendered summaries.

        Returns:
            The report, or NO_DATA when nothing was recorded
        """
        with self._finalize_lock:
            if self._result is not None:
                return self._result

            logger = get_performance_logger()
            logger.info("Generating suite performance summary...")

            report = build_report(self.store, self.config.thresholds, self.config.required_passes)

            if self.config.output_dir is not None:
                persistence = ReportPersistence(self.config.output_dir)
                persistence.write_export(self.store)
                persistence.write_report(report)
                persistence.write_steps_csv(self.store)
                persistence.write_document(TEXT_SUMMARY_FILENAME, render_text_summary(report))
                persistence.write_document(HTML_REPORT_FILENAME, render_html_report(report))
                persistence.write_widget(self.store)
                persistence.write_document(WIDGET_HTML_FILENAME, render_widget_html(report))

            if isinstance(report, NoData):
                logger.warning(report.message)
            else:
                logger.info(f"   Total Steps: {report.suite.totalSteps}")
                logger.info(f"   Total Scenarios: {report.suite.totalScenarios}")
                logger.info(f"   Overall Status: {'PASSED' if report.suite.overallVerdict == 'PASS' else 'FAILED'}")
                logger.info(f"   Metrics Passed: {report.suite.passedCount}/{report.suite.totalMetrics}")

            self._result = report
            return report
