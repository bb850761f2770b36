import logging

import pytest

from core.config import AppConfig, load_config
from core.logger import get_logger, setup_logging
from domain.errors import ConfigError


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.delenv("FOCUSLOG_CONFIG", raising=False)
    monkeypatch.setenv("FOCUSLOG_DATA_DIR", str(tmp_path))
    cfg = load_config()
    assert cfg.focus_minutes == 25
    assert cfg.break_minutes == 5
    assert cfg.pairing_window_sec == 300
    assert cfg.pairing_anchor == "break_start"
    assert (cfg.daily_goal_minutes, cfg.weekly_goal_minutes) == (120, 600)
    assert cfg.db_path == str(tmp_path / "focuslog.db")


def test_yaml_overrides_and_unknown_keys(monkeypatch, tmp_path):
    monkeypatch.setenv("FOCUSLOG_DATA_DIR", str(tmp_path))
    path = tmp_path / "cfg.yaml"
    path.write_text("focus_minutes: 50\npairing_anchor: timestamp\nbogus: 1\n", encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg.focus_minutes == 50
    assert cfg.pairing_anchor == "timestamp"
    assert not hasattr(cfg, "bogus")


def test_env_config_path(monkeypatch, tmp_path):
    path = tmp_path / "env.yaml"
    path.write_text("break_minutes: 10\n", encoding="utf-8")
    monkeypatch.setenv("FOCUSLOG_CONFIG", str(path))
    assert load_config().break_minutes == 10


def test_explicit_broken_config_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.yaml"))


def test_implicit_broken_config_falls_back(monkeypatch, tmp_path):
    monkeypatch.delenv("FOCUSLOG_CONFIG", raising=False)
    monkeypatch.setenv("FOCUSLOG_DATA_DIR", str(tmp_path))
    (tmp_path / "config.yaml").write_text("focus_minutes: [unclosed\n", encoding="utf-8")
    assert load_config().focus_minutes == AppConfig().focus_minutes


def test_setup_logging_writes_files(tmp_path):
    logger = setup_logging(str(tmp_path / "logs"))
    try:
        get_logger("test").error("boom")
        for h in logger.handlers:
            h.flush()
        assert "boom" in (tmp_path / "logs" / "error.log").read_text(encoding="utf-8")
        assert "boom" in (tmp_path / "logs" / "system.log").read_text(encoding="utf-8")
    finally:
        for h in list(logger.handlers):
            h.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)


def test_app_reports_unreadable_config(tmp_path, capsys):
    import app

    missing = str(tmp_path / "missing.yaml")
    assert app.main(["--config", missing]) == 2
    err = capsys.readouterr().err
    assert err.startswith("focuslog: ")
    assert missing in err
