"""
Data persistence module for exporting and re-loading the metrics of a run.
Uses JSON for the full export, the report model and the widget data, CSV for
the step table.
"""
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from perfmetrics.analysis.aggregation import aggregate
from perfmetrics.core.models import ReportModel
from perfmetrics.core.store import MetricStore
from perfmetrics.core.utils.logger import get_performance_logger
from perfmetrics.models import TIMING_FIELDS, MetricRecord, NoData, scenario_key

EXPORT_FILENAME = "performance-metrics.json"
REPORT_FILENAME = "performance-report.json"
STEPS_CSV_FILENAME = "performance-steps.csv"
WIDGET_FILENAME = "widgets/performance-widget.json"
STEPS_DIR = "steps"

CSV_COLUMNS = ["featureName", "scenarioName", "stepLabel", *TIMING_FIELDS, "fromCache", "capturedAt"]


def build_export(store: MetricStore) -> Dict[str, Any]:
    """
    Full-fidelity export of a store: every record plus the suite averages.

    Args:
        store: Store to export

    Returns:
        Mapping with keys totalMetrics, suiteAverages, allMetrics and
        scenarioMetrics. suiteAverages is empty when nothing was collected.
    """
    snapshot = store.snapshot()
    stats = aggregate(snapshot.all)

    return {
        "totalMetrics": len(snapshot.all),
        "suiteAverages": {} if isinstance(stats, NoData) else stats.averages(),
        "allMetrics": [record.to_dict() for record in snapshot.all],
        "scenarioMetrics": {
            name: [record.to_dict() for record in records]
            for name, records in snapshot.byScenario.items()
        },
    }


def build_widget(store: MetricStore) -> Dict[str, Any]:
    """
    Compact summary read by report dashboards.

    Returns:
        Mapping with keys name ("performance"), averages, stats
        (totalSteps, totalScenarios, averages) and cacheHitRate (percent,
        0.0 when nothing was collected).
    """
    snapshot = store.snapshot()
    stats = aggregate(snapshot.all)
    averages = {} if isinstance(stats, NoData) else stats.averages()

    return {
        "name": "performance",
        "averages": averages,
        "stats": {
            "totalSteps": len(snapshot.all),
            "totalScenarios": len(snapshot.byScenario),
            "averages": averages,
        },
        "cacheHitRate": 0.0 if isinstance(stats, NoData) else stats.cacheHitRate,
    }


def records_to_data_frame(records: Sequence[MetricRecord]) -> pd.DataFrame:
    """One row per record, in record order."""
    return pd.DataFrame([record.to_dict() for record in records], columns=CSV_COLUMNS)


def _text(value: Any) -> str:
    return "" if pd.isna(value) else str(value)


def records_from_data_frame(df: pd.DataFrame) -> List[MetricRecord]:
    """
    Rebuild records from a step table. Cells may be typed (a frame from
    records_to_data_frame) or all strings (a CSV read with dtype=str).
    """
    return [
        MetricRecord(
            stepLabel=_text(row["stepLabel"]),
            **{name: int(row[name]) for name in TIMING_FIELDS},
            fromCache=_text(row["fromCache"]).lower() == "true",
            scenarioName=_text(row["scenarioName"]),
            featureName=_text(row["featureName"]),
            capturedAt=datetime.fromisoformat(_text(row["capturedAt"])),
        )
        for _, row in df.iterrows()
    ]


def _safe_name(name: str, fallback: str) -> str:
    # file name safe, never hidden or relative
    return re.sub(r"[^\w.-]+", "_", name).strip("._") or fallback


class ReportPersistence:
    """
    Writes the outputs of a run into one directory and reads exports back.
    """

    def __init__(self, output_dir: str | Path):
        """
        Args:
            output_dir: Directory to write into. Created if missing.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _write_text(self, filename: str | Path, content: str) -> Path:
        """Write a file atomically (temp file, then replace)."""
        target = self.output_dir / filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            temp_file = target.with_suffix(target.suffix + '.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(content)
            temp_file.replace(target)
        except OSError as e:
            get_performance_logger().error(f"Error writing {target}: {e}")
            raise
        get_performance_logger().info(f"Performance output written: {target}")
        return target

    def _write_json(self, filename: str, data: Dict[str, Any]) -> Path:
        return self._write_text(filename, json.dumps(data, indent=2, ensure_ascii=False))

    def write_export(self, store: MetricStore) -> Path:
        return self._write_json(EXPORT_FILENAME, build_export(store))

    def write_report(self, report: ReportModel | NoData) -> Path:
        if isinstance(report, NoData):
            data = {"hasData": False, "message": report.message}
        else:
            data = {"hasData": True, **report.to_dict()}
        return self._write_json(REPORT_FILENAME, data)

    def write_widget(self, store: MetricStore) -> Path:
        return self._write_json(WIDGET_FILENAME, build_widget(store))

    def write_steps_csv(self, store: MetricStore) -> Path:
        df = records_to_data_frame(store.all_records())
        return self._write_text(STEPS_CSV_FILENAME, df.to_csv(index=False))

    def write_document(self, filename: str, content: str) -> Path:
        """Write a rendered report (text or HTML) next to the data files."""
        return self._write_text(filename, content)

    def write_step_documents(self, record: MetricRecord, text: str, html: str) -> tuple[Path, Path]:
        """
        Write the rendered text and HTML of one step under
        steps/<scenario>/<step label>.txt|.html.

        Returns:
            Paths of the text and the HTML file
        """
        folder = Path(STEPS_DIR) / _safe_name(scenario_key(record.scenarioName), "unknown")
        stem = _safe_name(record.stepLabel, "step")
        return (
            self._write_text(folder / f"{stem}.txt", text),
            self._write_text(folder / f"{stem}.html", html),
        )

    def load_records(self, path: str | Path = None) -> List[MetricRecord]:
        """
        Load records from a JSON export or a step CSV.

        Args:
            path: File to read. Defaults to the JSON export in the output
                directory. Relative paths resolve against the output directory.

        Returns:
            The records, in their exported order
        """
        source = Path(path) if path is not None else Path(EXPORT_FILENAME)
        if not source.is_absolute():
            source = self.output_dir / source

        if source.suffix == ".csv":
            # strings as written: no NaN for empty cells, no numeric coercion of names
            return records_from_data_frame(pd.read_csv(source, dtype=str, keep_default_na=False))

        with open(source, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return [MetricRecord.from_dict(item) for item in data.get("allMetrics", [])]

    def load_store(self, path: str | Path = None) -> MetricStore:
        store = MetricStore()
        store.extend(self.load_records(path))
        return store
