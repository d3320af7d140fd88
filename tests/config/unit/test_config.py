"""
Unit Tests: config.py

Misconfiguration exits at import with a readable error instead of failing
later inside the checkout flow.
"""

import importlib

import pytest

import config
from enums.runtime_environment import RuntimeEnvironment


@pytest.fixture
def reload_config(monkeypatch):
    yield monkeypatch
    monkeypatch.undo()
    importlib.reload(config)


class TestConfig:

    def test_test_environment_defaults(self):
        assert config.RUNTIME_ENVIRONMENT == RuntimeEnvironment.TEST
        assert config.CHECKOUT_PHONE_MIN_DIGITS == 10
        assert config.SHIPPING_FLAT_FEE == 168.0
        assert config.WEBHOOK_SOURCE == "checkout_form"

    @pytest.mark.parametrize("name,value", [
        ("RUNTIME_ENVIRONMENT", "STAGING"),
        ("CHECKOUT_PHONE_MIN_DIGITS", "ten"),
        ("CHECKOUT_PHONE_MIN_DIGITS", "0"),
        ("CHECKOUT_QUIESCENT_DELAY_SECONDS", "-5"),
        ("WEBHOOK_TIMEOUT_SECONDS", "0"),
    ])
    def test_invalid_values_exit(self, reload_config, capsys, name, value):
        reload_config.setenv(name, value)

        with pytest.raises(SystemExit) as exc_info:
            importlib.reload(config)

        assert exc_info.value.code == 1
        assert name in capsys.readouterr().err
