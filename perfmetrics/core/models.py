from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator

from perfmetrics.models import OverallVerdict, Verdict


@dataclass
class FieldSummary:
    field: str
    label: str
    mean: float
    min: float
    max: float
    count: int
    verdict: Verdict
    good: float
    poor: float


@dataclass
class StepReport:
    stepLabel: str
    values: dict[str, int]
    verdicts: dict[str, Verdict]
    fromCache: bool
    capturedAt: datetime


@dataclass
class ScenarioReport:
    name: str
    featureName: str
    totalSteps: int
    cachedSteps: int
    cacheHitRate: float
    fields: list[FieldSummary]
    passedCount: int
    overallVerdict: OverallVerdict
    steps: list[StepReport]


@dataclass
class FeatureReport:
    name: str
    totalSteps: int
    scenarios: list[ScenarioReport]

    @property
    def totalScenarios(self) -> int:
        return len(self.scenarios)


@dataclass
class SuiteSummary:
    totalFeatures: int
    totalScenarios: int
    totalSteps: int
    cachedSteps: int
    cacheHitRate: float
    fields: list[FieldSummary]
    passedCount: int
    totalMetrics: int
    overallVerdict: OverallVerdict


@dataclass
class ReportModel:
    """
    Presenter-agnostic summary of one test run.

    Hierarchy is feature -> scenario -> step. generatedAt is left out of
    equality, so two reports built from the same records compare equal.
    """
    suite: SuiteSummary
    features: list[FeatureReport]
    generatedAt: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    def scenarios(self) -> Iterator[ScenarioReport]:
        for feature in self.features:
            yield from feature.scenarios

    def scenario(self, name: str) -> ScenarioReport | None:
        return next((scenario for scenario in self.scenarios() if scenario.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        """Plain nested primitives, for JSON or any other serializer."""
        data = _to_primitive(asdict(self))
        for feature_data, feature in zip(data["features"], self.features):
            feature_data["totalScenarios"] = feature.totalScenarios
        return data


def _to_primitive(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, dict):
        return {key: _to_primitive(item) for key, item in value.items()}
    elif isinstance(value, (list, tuple)):
        return [_to_primitive(item) for item in value]
    else:
        return value
