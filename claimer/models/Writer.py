import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from claimer.models.Report import BatchAttemptReport

FAILURE_FIELDS = ["index", "key", "account", "amount", "outcome", "reason"]


@dataclass
class Writer:
    """Writes run reports to `{root}/{name}`, as JSON for machines and CSV for operators"""

    root: str
    name: str

    @property
    def path(self) -> str:
        return f"{self.root}/{self.name}"

    @property
    def csv_path(self) -> str:
        return f"{self.path}/csv"

    @property
    def json_path(self) -> str:
        return f"{self.path}/json"

    @staticmethod
    def write_csv(data: list[dict[str, Any]], path: str, fieldnames: list[str]) -> None:
        with open(path, "w+", newline="") as f:
            writer = csv.DictWriter(
                f, delimiter=",", fieldnames=fieldnames, extrasaction="ignore"
            )
            writer.writeheader()
            writer.writerows(data)

    # create the directory in the reports folder for csv and json if it doesn't exist
    def _create_dir(self) -> None:
        Path(self.path).mkdir(parents=True, exist_ok=True)
        Path(self.csv_path).mkdir(parents=True, exist_ok=True)
        Path(self.json_path).mkdir(parents=True, exist_ok=True)

    def to_csv(self, data: list[dict[str, Any]], name: str, fieldnames: list[str]) -> None:
        self._create_dir()
        self.write_csv(data, f"{self.csv_path}/{name}.csv", fieldnames)

    def to_json(self, data: Any, name: str) -> None:
        self._create_dir()
        with open(f"{self.json_path}/{name}.json", "w") as f:
            json.dump(data, f, indent=4)

    def write_report(self, report: BatchAttemptReport) -> None:
        """Totals and every record as JSON, failures alone as CSV"""
        records = [r.model_dump(mode="json") for r in report.ordered()]
        failures = [r.model_dump(mode="json") for r in report.failures()]
        self.to_json({**report.totals(), "records": records}, "report")
        self.to_csv(failures, "failures", FAILURE_FIELDS)

    def write_rerun(self, report: BatchAttemptReport) -> str:
        """
        Writes the entries worth re-running in the proof file format.
        Returns the path so the operator can point `PROOFS_FILE` at it
        """
        self._create_dir()
        path = f"{self.path}/rerun-proofs.json"
        with open(path, "w") as f:
            json.dump(report.rerun_entries(), f, indent=4)
        return path
