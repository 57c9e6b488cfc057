# -*- coding: utf-8 -*-
import pytest

from tradevault.shared.config.config_loader import get_settings


def test_loader_returns_dev_by_default(monkeypatch):
    monkeypatch.delenv("PYTHON_ENV", raising=False)
    s = get_settings()
    assert s.is_dev is True
    assert s.python_env == "development"


def test_loader_selects_test(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "test")
    s = get_settings()
    assert s.is_test is True
    assert s.scheduler_enabled is False


def test_loader_selects_prod(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("DB_URL", "postgresql://u:p@db:5432/tradevault")
    s = get_settings()
    assert s.is_prod is True
    assert s.log_format == "json"


def test_loader_caches_singleton():
    assert get_settings() is get_settings()


def test_loader_rejects_incoherent_sweep_lease(monkeypatch):
    monkeypatch.setenv("ESCROW_SWEEP_INTERVAL_SECONDS", "30")
    monkeypatch.setenv("ESCROW_SWEEP_LOCK_TTL_SECONDS", "45")
    with pytest.raises(ValueError) as ei:
        get_settings()
    assert "ESCROW_SWEEP_LOCK_TTL_SECONDS" in str(ei.value)


def test_prod_refuses_sqlite(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("DB_URL", "sqlite+aiosqlite:///./prod.db")
    with pytest.raises(ValueError) as ei:
        get_settings()
    assert "SQLite" in str(ei.value)
# Fin del archivo tests/shared/config/test_config_loader.py
