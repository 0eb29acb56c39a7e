"""Root conftest - isolate process-wide configuration between tests."""

import pytest

from phabstractic.system import config as system_config


@pytest.fixture(autouse=True)
def default_system_config(monkeypatch):
    """Every test starts from built-in defaults, whatever the environment holds."""
    monkeypatch.delenv(system_config.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(system_config, "_system_config", system_config.SystemConfig())
