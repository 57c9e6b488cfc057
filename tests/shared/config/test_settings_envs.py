# -*- coding: utf-8 -*-
from tradevault.shared.config.settings_dev import DevSettings
from tradevault.shared.config.settings_prod import ProdSettings
from tradevault.shared.config.settings_testing import EnvTestingSettings


def test_dev_overrides_defaults():
    s = DevSettings(_env_file=None)
    assert s.is_dev
    assert s.log_level.upper() == "DEBUG"
    assert s.log_format == "plain"
    assert s.db_create_schema is True


def test_test_overrides_defaults(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "test")
    s = EnvTestingSettings(_env_file=None)
    assert s.is_test
    assert s.database_url.startswith("sqlite+aiosqlite://")
    assert s.scheduler_enabled is False


def test_test_overrides_accept_env_names():
    s = EnvTestingSettings(_env_file=None, DB_URL="sqlite+aiosqlite:///./other.db", SCHEDULER_ENABLED=True)
    assert s.database_url == "sqlite+aiosqlite:///./other.db"
    assert s.scheduler_enabled is True


def test_prod_overrides_defaults(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    s = ProdSettings()
    assert s.is_prod
    assert s.log_level == "INFO"
    assert s.log_format == "json"
    assert s.db_create_schema is False
# Fin del archivo tests/shared/config/test_settings_envs.py
