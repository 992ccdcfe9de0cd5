import os

from dfbuildpack.services.env_dir import EnvDirService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


def test_env_dir_imports_one_variable_per_file(tmp_path):
    (tmp_path / "FOO").write_text("bar", encoding="utf-8")
    (tmp_path / "EMPTY").write_text("", encoding="utf-8")
    (tmp_path / "MULTILINE").write_text("line one\nline two\n", encoding="utf-8")

    loaded = EnvDirService(logger=DummyLogger()).load(str(tmp_path))

    assert loaded == {"EMPTY": "", "FOO": "bar", "MULTILINE": "line one\nline two\n"}


def test_env_dir_skips_denied_names(tmp_path):
    for name in ("PATH", "GIT_DIR", "CPATH", "CPPATH", "LD_PRELOAD", "LIBRARY_PATH", "LANG"):
        (tmp_path / name).write_text("denied", encoding="utf-8")
    (tmp_path / "APP_ENV").write_text("production", encoding="utf-8")

    loaded = EnvDirService(logger=DummyLogger()).load(str(tmp_path))

    assert loaded == {"APP_ENV": "production"}


def test_env_dir_ignores_directories_and_invalid_names(tmp_path):
    (tmp_path / "nested").mkdir()
    (tmp_path / "not-a-name").write_text("x", encoding="utf-8")

    assert EnvDirService(logger=DummyLogger()).load(str(tmp_path)) == {}


def test_missing_env_dir_is_a_noop(tmp_path):
    service = EnvDirService(logger=DummyLogger())

    assert service.load(str(tmp_path / "missing")) == {}
    assert service.load(None) == {}


def test_merge_does_not_touch_process_environment(tmp_path, monkeypatch):
    monkeypatch.delenv("DFBUILDPACK_TEST_VAR", raising=False)
    (tmp_path / "DFBUILDPACK_TEST_VAR").write_text("imported", encoding="utf-8")

    service = EnvDirService(logger=DummyLogger())
    base = {"DFBUILDPACK_TEST_VAR": "base", "HOME": "/root"}
    merged = service.merge(base, service.load(str(tmp_path)))

    assert merged["DFBUILDPACK_TEST_VAR"] == "imported"
    assert merged["HOME"] == "/root"
    assert base["DFBUILDPACK_TEST_VAR"] == "base"
    assert "DFBUILDPACK_TEST_VAR" not in os.environ


def test_env_dir_keeps_undecodable_bytes(tmp_path):
    (tmp_path / "SECRET").write_bytes(b"\xff\xfebinary")

    loaded = EnvDirService(logger=DummyLogger()).load(str(tmp_path))

    assert loaded["SECRET"].encode("utf-8", "surrogateescape") == b"\xff\xfebinary"
