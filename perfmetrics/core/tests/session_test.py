from perfmetrics.analysis.classification import Thresholds
from perfmetrics.core.config import PerformanceConfig
from perfmetrics.core.models import ReportModel
from perfmetrics.core.session import HTML_REPORT_FILENAME, TEXT_SUMMARY_FILENAME, WIDGET_HTML_FILENAME, PerformanceSession
from perfmetrics.core.store import MetricStore
from perfmetrics.core.utils.logger import get_performance_logger
from perfmetrics.data.persistence import EXPORT_FILENAME, REPORT_FILENAME, STEPS_CSV_FILENAME, WIDGET_FILENAME
from perfmetrics.models import NO_DATA

import threading
import time

import pytest

FAST = {"pageLoad": 1200, "domReady": 900, "response": 300, "timeToFirstByte": 150, "connect": 40, "dnsLookup": 5}


@pytest.fixture
def session() -> PerformanceSession:
    return PerformanceSession(config=PerformanceConfig(output_dir=None))

# =======================
# || skip tag tests ||
# =======================
@pytest.mark.parametrize('tags, expected', [
    ([], False),
    (["@smoke"], False),
    (["@skip-performance"], True),
    (["@smoke", "@SKIP-PERFORMANCE"], True),
    (["@skipperformance"], True),
    (["@No-Performance"], True),
])
def test_should_skip(session: PerformanceSession, tags, expected):
    assert session.should_skip(tags) == expected

def test_skipped_step_is_not_recorded(session: PerformanceSession):
    assert session.record_step("Login", "auth", FAST, tags=["@skip-performance"]) is None
    assert len(session.store) == 0

def test_custom_skip_tags():
    session = PerformanceSession(config=PerformanceConfig(output_dir=None, skip_tags=("@fast",)))

    assert session.should_skip(["@FAST"])
    assert not session.should_skip(["@skip-performance"])

# ==========================
# || record_step tests ||
# ==========================
def test_record_step_labels_steps_per_scenario(session: PerformanceSession):
    session.record_step("Login", "auth", FAST)
    session.record_step("Search", "catalog", FAST)
    session.record_step("Login", "auth", FAST)

    assert [r.stepLabel for r in session.store.scenario_records("Login")] == ["Step #1", "Step #2"]
    assert [r.stepLabel for r in session.store.scenario_records("Search")] == ["Step #1"]

def test_record_step_fills_missing_timings(session: PerformanceSession):
    record = session.record_step("Login", "auth", {"pageLoad": 700}, from_cache=True, step_label="open")

    assert record.stepLabel == "open"
    assert record.pageLoad == 700
    assert record.dnsLookup == 0
    assert record.fromCache is True
    assert session.store.all_records() == (record,)

def test_record_step_from_many_threads(session: PerformanceSession):
    def worker():
        for _ in range(50):
            session.record_step("Login", "auth", FAST)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    labels = [r.stepLabel for r in session.store.scenario_records("Login")]
    assert len(labels) == 400
    assert sorted(labels, key=lambda label: int(label.split("#")[1])) == [f"Step #{i}" for i in range(1, 401)]

def test_record_step_writes_step_documents(tmp_path):
    session = PerformanceSession(config=PerformanceConfig(output_dir=tmp_path))

    session.record_step("Login", "auth", {**FAST, "pageLoad": 2500})
    session.record_step("Login", "auth", FAST, tags=["@skip-performance"])

    step_dir = tmp_path / "steps" / "Login"
    assert sorted(path.name for path in step_dir.iterdir()) == ["Step_1.html", "Step_1.txt"]
    assert "Step #1 PERFORMANCE METRICS" in (step_dir / "Step_1.txt").read_text(encoding="utf-8")
    assert "2500 ms  WARN" in (step_dir / "Step_1.txt").read_text(encoding="utf-8")
    assert "Step #1 Performance Dashboard" in (step_dir / "Step_1.html").read_text(encoding="utf-8")

def test_record_step_uses_configured_thresholds(tmp_path):
    config = PerformanceConfig(output_dir=tmp_path, thresholds={"pageLoad": Thresholds(3000, 4000)})
    session = PerformanceSession(config=config)

    session.record_step("Login", "auth", {**FAST, "pageLoad": 2500})

    assert "2500 ms  PASS" in (tmp_path / "steps" / "Login" / "Step_1.txt").read_text(encoding="utf-8")

def test_step_documents_can_be_disabled(tmp_path):
    session = PerformanceSession(config=PerformanceConfig(output_dir=tmp_path, step_artifacts=False))

    session.record_step("Login", "auth", FAST)

    assert not (tmp_path / "steps").exists()
    assert len(session.store) == 1

def test_settle_waits_configured_delay():
    session = PerformanceSession(config=PerformanceConfig(output_dir=None, settle_delay_ms=50))

    start = time.monotonic()
    session.settle()

    assert time.monotonic() - start >= 0.045

def test_session_uses_given_store():
    store = MetricStore()
    session = PerformanceSession(store=store, config=PerformanceConfig(output_dir=None))

    session.record_step("Login", "auth", FAST)

    assert len(store) == 1

# =======================
# || finalize tests ||
# =======================
def test_finalize_without_data(session: PerformanceSession):
    assert session.finalize() is NO_DATA
    assert session.finalized

def test_finalize_runs_once(session: PerformanceSession):
    session.record_step("Login", "auth", FAST)

    first = session.finalize()
    session.record_step("Login", "auth", FAST)
    second = session.finalize()

    assert isinstance(first, ReportModel)
    assert second is first
    assert second.suite.totalSteps == 1

def test_finalize_concurrent_calls_build_once(session: PerformanceSession):
    session.record_step("Login", "auth", FAST)
    results = []

    threads = [threading.Thread(target=lambda: results.append(session.finalize())) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert all(result is results[0] for result in results)

def test_finalize_writes_outputs(tmp_path):
    session = PerformanceSession(config=PerformanceConfig(output_dir=tmp_path))
    session.record_step("Login", "auth", FAST)

    report = session.finalize()

    assert report.suite.overallVerdict == "PASS"
    for filename in (EXPORT_FILENAME, REPORT_FILENAME, STEPS_CSV_FILENAME, TEXT_SUMMARY_FILENAME,
                     HTML_REPORT_FILENAME, WIDGET_FILENAME, WIDGET_HTML_FILENAME):
        assert (tmp_path / filename).exists()
    assert "Performance Test PASSED" in (tmp_path / HTML_REPORT_FILENAME).read_text(encoding="utf-8")

def test_finalize_writes_no_data_report(tmp_path):
    session = PerformanceSession(config=PerformanceConfig(output_dir=tmp_path))

    session.finalize()

    assert "No performance metrics collected" in (tmp_path / TEXT_SUMMARY_FILENAME).read_text(encoding="utf-8")

def test_session_sets_up_log_file(tmp_path):
    PerformanceSession(config=PerformanceConfig(output_dir=None, logs_dir=tmp_path / "logs"), run_name="nightly suite")

    logger = get_performance_logger()
    try:
        assert list((tmp_path / "logs").glob("performance_nightly_suite_*.log"))
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
