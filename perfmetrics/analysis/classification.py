from typing import Iterable, Mapping, NamedTuple

from perfmetrics.models import TIMING_FIELDS, AggregateStats, OverallVerdict, Verdict

REQUIRED_PASSES = 4
STANDARD_FIELD_COUNT = len(TIMING_FIELDS)


class Thresholds(NamedTuple):
    good: float
    poor: float


DEFAULT_THRESHOLDS: dict[str, Thresholds] = {
    "pageLoad": Thresholds(2000, 3000),
    "domReady": Thresholds(1500, 2500),
    "response": Thresholds(800, 1200),
    "timeToFirstByte": Thresholds(400, 600),
    "connect": Thresholds(200, 400),
    "dnsLookup": Thresholds(100, 200),
}


def with_defaults(thresholds: Mapping[str, Thresholds] | None) -> dict[str, Thresholds]:
    """Per-field thresholds, with DEFAULT_THRESHOLDS filling the fields not given."""
    return {**DEFAULT_THRESHOLDS, **(thresholds or {})}


def classify(value: float, good_threshold: float, poor_threshold: float) -> Verdict:
    """
    Classifies a measured value against a pair of thresholds.

    Boundary values belong to the better bucket: a value equal to the good
    threshold passes, a value equal to the poor threshold warns. The caller
    guarantees good_threshold <= poor_threshold.

    Args:
        value (float): The measured value, in milliseconds.
        good_threshold (float): Highest value that still passes.
        poor_threshold (float): Highest value that only warns.

    Returns:
        "PASS", "WARN" or "FAIL".
    """

    if value <= good_threshold:
        return "PASS"
    elif value <= poor_threshold:
        return "WARN"
    else:
        return "FAIL"


def classify_fields(stats: AggregateStats, thresholds: Mapping[str, Thresholds] | None = None) -> dict[str, Verdict]:
    """
    Classifies the mean of every timing field present in the statistics.

    Args:
        stats (AggregateStats): The aggregated statistics.
        thresholds (Mapping[str, Thresholds] | None): Per-field thresholds.
            Missing fields fall back to DEFAULT_THRESHOLDS.

    Returns:
        A verdict per field, in canonical field order.
    """

    thresholds = with_defaults(thresholds)

    return {
        name: classify(stats.fields[name].mean, *thresholds[name])
        for name in TIMING_FIELDS
        if name in stats.fields
    }


def passed_count(verdicts: Iterable[Verdict]) -> int:
    return sum(1 for verdict in verdicts if verdict == "PASS")


def overall_verdict(verdicts: Iterable[Verdict], required_passes: int = REQUIRED_PASSES) -> OverallVerdict:
    """
    Reduces per-field verdicts to a two-valued overall verdict.

    Only PASS entries count. The bar is a fixed number of passes out of the
    six standard fields, whatever the number of verdicts supplied, so a WARN
    counts the same as a FAIL here.

    Args:
        verdicts (Iterable[Verdict]): Per-field verdicts.
        required_passes (int): Number of PASS entries needed. Defaults to 4.

    Returns:
        "PASS" or "FAIL".
    """

    return "PASS" if passed_count(verdicts) >= required_passes else "FAIL"
