import json

from dfbuildpack.services.report import ReportService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def test_report_service_writes_step_outcomes(tmp_path):
    report_file = tmp_path / "cache" / "build-report.json"
    service = ReportService(str(report_file), logger=DummyLogger())

    service.start_run("run-123", {"build_dir": "/tmp/build"})
    service.step_started("check_php_runtime")
    service.step_finished("check_php_runtime", "success")
    service.step_started("install_dependencies")
    service.step_finished("install_dependencies", "skipped", reason="composer not found")
    service.add_artifacts(["/tmp/build/nginx/nginx.conf"])
    service.finalize("success")

    data = json.loads(report_file.read_text(encoding="utf-8"))

    assert data["run_id"] == "run-123"
    assert data["status"] == "success"
    assert [step["status"] for step in data["steps"]] == ["success", "skipped"]
    assert data["steps"][1]["reason"] == "composer not found"
    assert data["artifacts"] == ["/tmp/build/nginx/nginx.conf"]
    assert data["duration_seconds"] is not None


def test_report_service_without_file_is_silent():
    service = ReportService(None, logger=DummyLogger())

    service.start_run("run-123", {})
    service.finalize("failed", error="PHP not found.")

    assert service.report["error"] == "PHP not found."


def test_report_service_skips_missing_directory_when_not_creating(tmp_path):
    report_file = tmp_path / "layers" / "dreamfactory" / "build-report.json"
    service = ReportService(str(report_file), logger=DummyLogger(), create_dirs=False)

    service.start_run("run-123", {})
    service.finalize("failed", error="PHP not found.")

    assert not (tmp_path / "layers").exists()
