# -*- coding: utf-8 -*-
"""
tests/shared/config/conftest.py

Aísla variables de entorno, caché de get_settings() y configuración de
logging en cada test de config.
"""

import logging
import os

import pytest

from tradevault.shared.config import config_loader

_PREFIXES = ("DB_", "ESCROW_", "CORS_", "APP_", "LOG_", "METRICS_", "SCHEDULER_")


@pytest.fixture(autouse=True)
def _isolate_env_and_cache(monkeypatch):
    """No heredar configuración del shell ni del conftest raíz."""
    for k in list(os.environ.keys()):
        if k.startswith(_PREFIXES):
            monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("PYTHON_ENV", "development")

    config_loader.get_settings.cache_clear()
    yield
    config_loader.get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    app_level = logging.getLogger("tradevault").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("tradevault").setLevel(app_level)


# Fin del archivo tests/shared/config/conftest.py
