"""Tests for configuration loading and the command-line launcher."""

import json

import pytest

from worktime_tracker import launcher
from worktime_tracker.config import ConfigManager, WorkTimeConfig


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setenv("WORKTIME_CONFIG_FILE", str(path))
    for name in (
        "WORKTIME_DATABASE_URL",
        "WORKTIME_LOG_LEVEL",
        "WORKTIME_PORT",
        "WORKTIME_DEBUG",
        "WORKTIME_CORS_ORIGINS",
        "WORKTIME_DEFAULT_WORK_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
    return path


@pytest.mark.unit
class TestConfigManager:
    def test_defaults_without_file(self, config_file):
        config = ConfigManager().load_config()

        assert config.server.port == 3210
        assert config.app.default_work_days == "1,2,3,4,5"
        assert config.database.url == "sqlite:///./worktime_tracker.db"

    def test_environment_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("WORKTIME_DATABASE_URL", "sqlite:///:memory:")
        monkeypatch.setenv("WORKTIME_PORT", "8080")
        monkeypatch.setenv("WORKTIME_CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("WORKTIME_DEFAULT_WORK_DAYS", "0,6")

        config = ConfigManager().load_config()

        assert config.database.url == "sqlite:///:memory:"
        assert config.server.port == 8080
        assert config.server.cors_origins == ["http://a.test", "http://b.test"]
        assert config.app.default_work_days == "0,6"

    def test_invalid_port_is_ignored(self, config_file, monkeypatch):
        monkeypatch.setenv("WORKTIME_PORT", "not-a-port")

        assert ConfigManager().load_config().server.port == 3210

    def test_debug_flag_raises_log_level(self, config_file, monkeypatch):
        monkeypatch.setenv("WORKTIME_DEBUG", "true")

        config = ConfigManager().load_config()

        assert config.server.debug is True
        assert config.app.log_level == "DEBUG"

    def test_save_and_load_round_trip(self, config_file):
        manager = ConfigManager()
        config = manager.load_config()
        config.server.port = 4000
        config.app.default_work_days = "1,2,3"

        assert manager.save_config() is True

        saved = json.loads(config_file.read_text(encoding="utf-8"))
        assert saved["server"]["port"] == 4000
        reloaded = ConfigManager().load_config()
        assert reloaded.server.port == 4000
        assert reloaded.app.default_work_days == "1,2,3"

    def test_corrupt_file_falls_back_to_defaults(self, config_file):
        config_file.write_text("{not json", encoding="utf-8")

        assert ConfigManager().load_config().server.port == 3210

    def test_from_dict_keeps_missing_sections_default(self):
        config = WorkTimeConfig.from_dict({"server": {"port": 9000}})

        assert config.server.port == 9000
        assert config.app.app_name == "Work-Time Tracker"

    def test_validate_config_reports_issues(self, config_file, monkeypatch):
        monkeypatch.setenv("WORKTIME_LOG_LEVEL", "chatty")
        monkeypatch.setenv("WORKTIME_DEFAULT_WORK_DAYS", "1,9")
        monkeypatch.setenv("WORKTIME_PORT", "70000")

        issues = ConfigManager().validate_config()

        assert len(issues) == 3
        assert any("log level" in issue for issue in issues)
        assert any("work days" in issue for issue in issues)
        assert any("port" in issue for issue in issues)

    def test_validate_config_clean(self, config_file):
        assert ConfigManager().validate_config() == []


@pytest.mark.unit
class TestLauncher:
    def test_check_config_ok(self, config_file, monkeypatch, capsys):
        monkeypatch.setattr(launcher, "config_manager", ConfigManager())

        assert launcher.main(["--check-config"]) == 0
        assert "[OK]" in capsys.readouterr().out

    def test_check_config_failure(self, config_file, monkeypatch, capsys):
        monkeypatch.setenv("WORKTIME_PORT", "0")
        monkeypatch.setattr(launcher, "config_manager", ConfigManager())

        assert launcher.main(["--check-config"]) == 1
        assert "port" in capsys.readouterr().out

    def test_runs_uvicorn_with_overrides(self, config_file, monkeypatch):
        calls = []
        monkeypatch.setattr(launcher, "config_manager", ConfigManager())
        monkeypatch.setattr(launcher.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        assert launcher.main(["--host", "0.0.0.0", "--port", "9999"]) == 0

        app, kwargs = calls[0]
        assert app == "worktime_tracker.main:app"
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9999
        assert kwargs["reload"] is False
