from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Self, TypeAlias


TIMING_FIELDS: tuple[str, ...] = (
    "pageLoad",
    "domReady",
    "response",
    "timeToFirstByte",
    "connect",
    "dnsLookup",
)

FIELD_LABELS: dict[str, str] = {
    "pageLoad": "Page Load Time",
    "domReady": "DOM Ready Time",
    "response": "Response Time",
    "timeToFirstByte": "Time To First Byte",
    "connect": "Connection Time",
    "dnsLookup": "DNS Lookup Time",
}

UNKNOWN_SCENARIO = "unknown"
UNKNOWN_FEATURE = "Unknown Suite"

Verdict: TypeAlias = Literal["PASS", "WARN", "FAIL"]
OverallVerdict: TypeAlias = Literal["PASS", "FAIL"]

VERDICT_RANK: dict[str, int] = {"PASS": 0, "WARN": 1, "FAIL": 2}


def scenario_key(name: str | None) -> str:
    """Bucket name under which a scenario's records are stored."""
    return name if name else UNKNOWN_SCENARIO


def feature_key(name: str | None) -> str:
    return name if name else UNKNOWN_FEATURE


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MetricRecord:
    """
    Timings observed for a single test step.

    The six timing fields are milliseconds. No range checks are made: a
    record with negative or all-zero timings is stored and aggregated as-is.
    """
    stepLabel: str
    pageLoad: int = 0
    domReady: int = 0
    response: int = 0
    timeToFirstByte: int = 0
    connect: int = 0
    dnsLookup: int = 0
    fromCache: bool = False
    scenarioName: str = ""
    featureName: str = ""
    capturedAt: datetime = field(default_factory=_now, compare=False)

    def timings(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in TIMING_FIELDS}

    def to_dict(self) -> dict[str, Any]:
        return {
            "stepLabel": self.stepLabel,
            **self.timings(),
            "fromCache": self.fromCache,
            "scenarioName": self.scenarioName,
            "featureName": self.featureName,
            "capturedAt": self.capturedAt.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Rebuild a record from its exported form.

        Args:
            data (dict[str, Any]): A mapping as produced by `to_dict()`.
                `capturedAt` may be an ISO-8601 string or epoch milliseconds.
                Missing timing fields default to 0.

        Returns:
            The rebuilt record.
        """
        captured = data.get("capturedAt")
        if isinstance(captured, (int, float)):
            captured_at = datetime.fromtimestamp(captured / 1000, tz=timezone.utc)
        elif captured:
            captured_at = datetime.fromisoformat(str(captured))
        else:
            captured_at = _now()

        return cls(
            stepLabel=str(data.get("stepLabel", "")),
            **{name: int(data.get(name, 0)) for name in TIMING_FIELDS},
            fromCache=bool(data.get("fromCache", False)),
            scenarioName=str(data.get("scenarioName") or ""),
            featureName=str(data.get("featureName") or ""),
            capturedAt=captured_at,
        )


@dataclass(frozen=True)
class FieldStats:
    mean: float
    count: int
    min: float
    max: float


@dataclass(frozen=True)
class AggregateStats:
    fields: dict[str, FieldStats]
    totalSteps: int
    cachedSteps: int

    @property
    def cacheHitRate(self) -> float:
        return self.cachedSteps / self.totalSteps * 100 if self.totalSteps > 0 else 0.0

    def mean(self, name: str) -> float:
        return self.fields[name].mean

    def averages(self) -> dict[str, float | int]:
        """Field means plus step counts, keyed the way the export expects."""
        result: dict[str, float | int] = {name: stats.mean for name, stats in self.fields.items()}
        result["totalSteps"] = self.totalSteps
        result["cachedSteps"] = self.cachedSteps
        return result


@dataclass(frozen=True)
class NoData:
    """Result of aggregating nothing. Deliberately carries no numbers."""
    message: str = "No performance metrics collected"

    def __bool__(self) -> bool:
        return False


NO_DATA = NoData()
