"""Build report generation service."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class ReportService:
    """Collects per-step outcomes and writes the build report JSON."""

    def __init__(self, report_file: Optional[str], logger, create_dirs: bool = True):
        self.report_file = report_file
        self.logger = logger
        self.create_dirs = create_dirs
        self.report: Dict[str, Any] = {
            "run_id": None,
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "metadata": {},
            "steps": [],
            "artifacts": [],
            "error": None,
        }

    def start_run(self, run_id: str, metadata: Dict[str, Any]):
        self.report["run_id"] = run_id
        self.report["status"] = "running"
        self.report["started_at"] = self._now()
        self.report["metadata"] = metadata

    def step_started(self, step_name: str):
        self.report["steps"].append(
            {
                "name": step_name,
                "status": "running",
                "started_at": self._now(),
                "finished_at": None,
                "duration_seconds": None,
                "reason": None,
            }
        )

    def step_finished(self, step_name: str, status: str, reason: Optional[str] = None):
        for step in reversed(self.report["steps"]):
            if step["name"] == step_name and step["status"] == "running":
                step["status"] = status
                step["finished_at"] = self._now()
                step["reason"] = reason
                started_at = datetime.fromisoformat(step["started_at"])
                finished_at = datetime.fromisoformat(step["finished_at"])
                step["duration_seconds"] = (finished_at - started_at).total_seconds()
                break

    def add_artifacts(self, paths):
        self.report["artifacts"].extend(paths)

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        self.write()

    def write(self):
        if not self.report_file:
            return

        directory = os.path.dirname(self.report_file) or "."
        if not self.create_dirs and not os.path.isdir(directory):
            self.logger.debug("Skipping build report, %s does not exist", directory)
            return

        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix="build-report-", suffix=".json", dir=directory)
        except OSError as exc:
            self.logger.warning("Could not write build report '%s': %s", self.report_file, exc)
            return

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write build report '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
