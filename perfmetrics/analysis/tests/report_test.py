from perfmetrics.analysis.classification import Thresholds
from perfmetrics.analysis.report import build_report
from perfmetrics.core.models import ReportModel
from perfmetrics.core.store import MetricStore
from perfmetrics.models import NO_DATA, TIMING_FIELDS, MetricRecord, UNKNOWN_FEATURE, UNKNOWN_SCENARIO

import json

import pytest


def _fast(label: str, scenario: str, feature: str, page_load: int = 1000, from_cache: bool = False) -> MetricRecord:
    return MetricRecord(label, page_load, 500, 200, 100, 50, 10, from_cache, scenario, feature)

def _slow(label: str, scenario: str, feature: str) -> MetricRecord:
    return MetricRecord(label, 5000, 4000, 2000, 900, 600, 300, False, scenario, feature)

@pytest.fixture
def store() -> MetricStore:
    store = MetricStore()
    store.extend([
        _fast("Step #1", "Login", "auth", page_load=1000, from_cache=True),
        _fast("Step #1", "Search", "catalog"),
        _fast("Step #2", "Login", "auth", page_load=1500),
        _slow("Step #1", "Checkout", "catalog"),
        _fast("Step #3", "Login", "auth", page_load=2000),
    ])
    return store

# ========================
# || build_report tests ||
# ========================
def test_empty_store_returns_no_data():
    assert build_report(MetricStore()) is NO_DATA

def test_cleared_store_returns_no_data(store: MetricStore):
    store.clear()

    assert build_report(store) is NO_DATA

def test_suite_summary(store: MetricStore):
    report = build_report(store)

    assert isinstance(report, ReportModel)
    assert report.suite.totalSteps == 5
    assert report.suite.cachedSteps == 1
    assert report.suite.cacheHitRate == 20.0
    assert report.suite.totalScenarios == 3
    assert report.suite.totalFeatures == 2
    assert report.suite.totalMetrics == 6
    assert [summary.field for summary in report.suite.fields] == list(TIMING_FIELDS)

def test_login_scenario_passes(store: MetricStore):
    login = build_report(store).scenario("Login")

    page_load = login.fields[0]
    assert page_load.field == "pageLoad"
    assert page_load.mean == 1500.0
    assert page_load.verdict == "PASS"
    assert (page_load.good, page_load.poor) == (2000, 3000)
    assert login.passedCount == 6
    assert login.overallVerdict == "PASS"
    assert login.featureName == "auth"

def test_slow_scenario_fails(store: MetricStore):
    checkout = build_report(store).scenario("Checkout")

    assert [summary.verdict for summary in checkout.fields] == ["FAIL"] * 6
    assert checkout.passedCount == 0
    assert checkout.overallVerdict == "FAIL"

def test_feature_hierarchy(store: MetricStore):
    report = build_report(store)

    assert [feature.name for feature in report.features] == ["auth", "catalog"]
    assert [s.name for s in report.features[0].scenarios] == ["Login"]
    assert [s.name for s in report.features[1].scenarios] == ["Search", "Checkout"]
    assert report.features[1].totalSteps == 2
    assert report.features[1].totalScenarios == 2

def test_steps_keep_insertion_order(store: MetricStore):
    login = build_report(store).scenario("Login")

    assert [step.stepLabel for step in login.steps] == ["Step #1", "Step #2", "Step #3"]
    assert [step.values["pageLoad"] for step in login.steps] == [1000, 1500, 2000]
    assert login.steps[0].fromCache is True
    assert login.steps[2].verdicts["pageLoad"] == "PASS"

def test_step_verdicts(store: MetricStore):
    checkout = build_report(store).scenario("Checkout")

    assert checkout.steps[0].verdicts == {name: "FAIL" for name in TIMING_FIELDS}

def test_unnamed_records_use_reserved_buckets():
    store = MetricStore()
    store.record(MetricRecord("Step #1", pageLoad=100))

    report = build_report(store)

    assert report.features[0].name == UNKNOWN_FEATURE
    assert report.features[0].scenarios[0].name == UNKNOWN_SCENARIO

def test_custom_thresholds_and_majority(store: MetricStore):
    strict = {"pageLoad": Thresholds(500, 900)}

    report = build_report(store, thresholds=strict, required_passes=6)

    login = report.scenario("Login")
    assert login.fields[0].verdict == "FAIL"
    assert login.fields[1].verdict == "PASS"
    assert login.overallVerdict == "FAIL"

def test_suite_majority_rule():
    store = MetricStore()
    # pageLoad, domReady, response, TTFB pass; connect and DNS fail
    store.record(MetricRecord("Step #1", 100, 100, 100, 100, 1000, 1000, False, "Login", "auth"))

    report = build_report(store)

    assert report.suite.passedCount == 4
    assert report.suite.overallVerdict == "PASS"

# ======================
# || idempotence tests ||
# ======================
def test_build_report_is_idempotent(store: MetricStore):
    first = build_report(store)
    second = build_report(store)

    assert first == second
    assert first.to_dict() | {"generatedAt": None} == second.to_dict() | {"generatedAt": None}

def test_build_report_does_not_modify_store(store: MetricStore):
    before = store.all_records()

    build_report(store)

    assert store.all_records() == before

def test_report_reflects_new_records(store: MetricStore):
    build_report(store)
    store.record(_fast("Step #4", "Login", "auth"))

    assert build_report(store).scenario("Login").totalSteps == 4

# ==================
# || to_dict tests ||
# ==================
def test_to_dict_is_json_serializable(store: MetricStore):
    data = build_report(store).to_dict()

    decoded = json.loads(json.dumps(data))
    assert decoded["suite"]["totalSteps"] == 5
    assert decoded["features"][0]["name"] == "auth"
    assert decoded["features"][0]["totalScenarios"] == 1
    assert decoded["features"][0]["scenarios"][0]["steps"][0]["values"]["pageLoad"] == 1000
    assert isinstance(decoded["generatedAt"], str)
