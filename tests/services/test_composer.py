import json
import subprocess

from dfbuildpack.errors import BuildpackError
from dfbuildpack.models import StepStatus
from dfbuildpack.services.composer import INSTALL_CMD, ComposerService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


class FakeRunner:
    def __init__(self, available=("composer",), fail=False):
        self.available = set(available)
        self.fail = fail
        self.calls = []

    def which(self, command):
        return f"/usr/bin/{command}" if command in self.available else None

    def run(self, cmd, check=True, capture_output=False, cwd=None):
        self.calls.append((cmd, cwd))
        if self.fail:
            raise BuildpackError("Command failed (1): composer install")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


def test_patch_manifest_creates_default_composer_json(tmp_path):
    service = ComposerService(command_runner=FakeRunner(), logger=DummyLogger())

    result = service.patch_manifest(str(tmp_path))

    assert result.status is StepStatus.SUCCESS
    manifest = json.loads((tmp_path / "composer.json").read_text(encoding="utf-8"))
    assert manifest == {
        "require": {"php": "^8.0", "ext-mbstring": "*", "ext-pdo_sqlite": "*"}
    }


def test_patch_manifest_merges_existing_requirements(tmp_path):
    composer_json = tmp_path / "composer.json"
    composer_json.write_text(
        json.dumps(
            {
                "name": "dreamfactory/dreamfactory",
                "require": {"php": "^8.1", "ext-mbstring": "^1.0", "laravel/framework": "^10.0"},
                "autoload": {"psr-4": {"App\\": "app/"}},
            }
        ),
        encoding="utf-8",
    )
    service = ComposerService(command_runner=FakeRunner(), logger=DummyLogger())

    service.patch_manifest(str(tmp_path))

    manifest = json.loads(composer_json.read_text(encoding="utf-8"))
    assert manifest["name"] == "dreamfactory/dreamfactory"
    assert manifest["autoload"] == {"psr-4": {"App\\": "app/"}}
    assert manifest["require"] == {
        "php": "^8.1",
        "ext-mbstring": "*",
        "laravel/framework": "^10.0",
        "ext-pdo_sqlite": "*",
    }


def test_patch_manifest_skips_unreadable_manifest(tmp_path):
    composer_json = tmp_path / "composer.json"
    composer_json.write_text("{not json", encoding="utf-8")
    service = ComposerService(command_runner=FakeRunner(), logger=DummyLogger())

    result = service.patch_manifest(str(tmp_path))

    assert result.status is StepStatus.SKIPPED
    assert "skipping update" in result.reason
    assert composer_json.read_text(encoding="utf-8") == "{not json"


def test_install_runs_composer_in_build_dir(tmp_path):
    runner = FakeRunner()
    service = ComposerService(command_runner=runner, logger=DummyLogger())

    result = service.install(str(tmp_path))

    assert result.status is StepStatus.SUCCESS
    assert runner.calls == [(INSTALL_CMD, str(tmp_path))]


def test_install_is_skipped_without_composer(tmp_path):
    runner = FakeRunner(available=())
    service = ComposerService(command_runner=runner, logger=DummyLogger())

    result = service.install(str(tmp_path))

    assert result.status is StepStatus.SKIPPED
    assert "composer not found" in result.reason
    assert runner.calls == []


def test_install_failure_degrades_to_skip(tmp_path):
    service = ComposerService(command_runner=FakeRunner(fail=True), logger=DummyLogger())

    result = service.install(str(tmp_path))

    assert result.status is StepStatus.SKIPPED
    assert "composer install failed" in result.reason
