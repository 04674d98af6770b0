"""
Run configuration, read from the environment (and a .env file when present).
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from dotenv import find_dotenv, load_dotenv

from perfmetrics.analysis.classification import DEFAULT_THRESHOLDS, REQUIRED_PASSES, Thresholds
from perfmetrics.models import TIMING_FIELDS

DEFAULT_OUTPUT_DIR = "target/performance-results"
DEFAULT_SETTLE_DELAY_MS = 200
DEFAULT_SKIP_TAGS = ("@skip-performance", "@skipperformance", "@no-performance")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")


def _thresholds_env(name: str, default: Thresholds) -> Thresholds:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    parts = [part.strip() for part in raw.split(",")]
    if len(parts) != 2:
        raise ValueError(f"{name} must be 'good,poor', got {raw!r}")
    try:
        good, poor = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValueError(f"{name} must be 'good,poor' numbers, got {raw!r}") from None
    if good > poor:
        raise ValueError(f"{name}: good threshold {good} is above poor threshold {poor}")

    return Thresholds(good, poor)


@dataclass
class PerformanceConfig:
    output_dir: Path | None = Path(DEFAULT_OUTPUT_DIR)
    logs_dir: Path | None = None
    required_passes: int = REQUIRED_PASSES
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS
    step_artifacts: bool = True
    skip_tags: tuple[str, ...] = DEFAULT_SKIP_TAGS
    thresholds: dict[str, Thresholds] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))

    @classmethod
    def from_env(cls) -> Self:
        """
        Builds the configuration from PERF_* environment variables.

        An empty PERF_OUTPUT_DIR disables writing report files.
        PERF_STEP_ARTIFACTS=false keeps the suite outputs but skips the
        per-step text and HTML files. Per-field thresholds are given as
        PERF_THRESHOLD_<FIELD>=good,poor, where
        <FIELD> is the upper-cased field name (e.g. PERF_THRESHOLD_PAGELOAD).

        Raises:
            ValueError: If a variable holds a malformed value.
        """
        load_dotenv(find_dotenv(usecwd=True))

        output_dir = os.getenv("PERF_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
        logs_dir = os.getenv("PERF_LOGS_DIR")

        skip_tags = DEFAULT_SKIP_TAGS
        raw_tags = os.getenv("PERF_SKIP_TAGS")
        if raw_tags is not None:
            skip_tags = tuple(tag.strip() for tag in raw_tags.split(",") if tag.strip())

        required_passes = _int_env("PERF_REQUIRED_PASSES", REQUIRED_PASSES)
        if not 0 <= required_passes <= len(TIMING_FIELDS):
            raise ValueError(
                f"PERF_REQUIRED_PASSES must be between 0 and {len(TIMING_FIELDS)}, got {required_passes}"
            )

        settle_delay_ms = _int_env("PERF_SETTLE_DELAY_MS", DEFAULT_SETTLE_DELAY_MS)
        if settle_delay_ms < 0:
            raise ValueError(f"PERF_SETTLE_DELAY_MS must not be negative, got {settle_delay_ms}")

        return cls(
            output_dir=Path(output_dir) if output_dir else None,
            logs_dir=Path(logs_dir) if logs_dir else None,
            required_passes=required_passes,
            settle_delay_ms=settle_delay_ms,
            step_artifacts=_bool_env("PERF_STEP_ARTIFACTS", True),
            skip_tags=skip_tags,
            thresholds={
                name: _thresholds_env(f"PERF_THRESHOLD_{name.upper()}", DEFAULT_THRESHOLDS[name])
                for name in TIMING_FIELDS
            },
        )
