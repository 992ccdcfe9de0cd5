from pathlib import Path

from click.testing import CliRunner

import dfbuildpack.cli as cli_module


def _fake_buildpack(captured, exit_code=0):
    class FakeBuildpack:
        def __init__(self, **kwargs):
            captured.update(kwargs)

        def run(self):
            return exit_code

    return FakeBuildpack


def test_compile_uses_config_and_allows_cli_override(tmp_path, monkeypatch):
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    (build_dir / ".dfbuildpack.yml").write_text(
        "repository: https://example.com/config.git\nbranch: '4.x'\nclone_depth: 1\n",
        encoding="utf-8",
    )

    captured = {}
    monkeypatch.setattr(cli_module, "Buildpack", _fake_buildpack(captured))

    result = CliRunner().invoke(
        cli_module.main,
        [
            "compile",
            str(build_dir),
            str(tmp_path / "cache"),
            str(tmp_path / "env"),
            "--branch",
            "5.x",
        ],
    )

    assert result.exit_code == 0, result.output
    assert captured["build_dir"] == str(build_dir)
    assert captured["cache_dir"] == str(tmp_path / "cache")
    assert captured["env_dir"] == str(tmp_path / "env")
    assert captured["repository"] == "https://example.com/config.git"
    assert captured["branch"] == "5.x"
    assert captured["clone_depth"] == 1
    assert captured["app_root"] == "/app"


def test_build_uses_working_directory_and_platform_env(tmp_path, monkeypatch):
    captured = {}
    monkeypatch.setattr(cli_module, "Buildpack", _fake_buildpack(captured))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(
        cli_module.main,
        ["build", str(tmp_path / "layers"), str(tmp_path / "platform"), str(tmp_path / "plan.toml")],
    )

    assert result.exit_code == 0, result.output
    assert Path(captured["build_dir"]).resolve() == tmp_path.resolve()
    assert captured["layers_dir"] == str(tmp_path / "layers")
    assert captured["env_dir"] == str(tmp_path / "platform" / "env")


def test_fatal_run_exits_non_zero(tmp_path, monkeypatch):
    captured = {}
    monkeypatch.setattr(cli_module, "Buildpack", _fake_buildpack(captured, exit_code=1))

    result = CliRunner().invoke(
        cli_module.main,
        ["compile", str(tmp_path), str(tmp_path / "cache"), str(tmp_path / "env")],
    )

    assert result.exit_code == 1


def test_explicit_missing_config_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "Buildpack", _fake_buildpack({}))

    result = CliRunner().invoke(
        cli_module.main,
        [
            "compile",
            str(tmp_path),
            str(tmp_path / "cache"),
            str(tmp_path / "env"),
            "--config",
            str(tmp_path / "missing.yml"),
        ],
    )

    assert result.exit_code == 1
    assert "Config file not found" in result.output
