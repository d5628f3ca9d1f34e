"""Tests for PollerSettings and environment loading."""

import tempfile

import pytest
from pydantic import ValidationError

from fleetpoll.config import DEFAULT_TIMEOUT, DEFAULT_WORKERS, PollerSettings


ENV_VARS = ["SNMP_FORKS", "SNMP_TIMEOUT", "SNMP_RETRIES", "DEBUG", "POLLER_EXCHANGE_DIR", "POLLER_START_METHOD"]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values load_dotenv adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Keep load_dotenv from picking up a developer's .env
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestPollerSettings:

    def test_defaults(self, clean_env, tmp_path):
        settings = PollerSettings.from_env(env_file=tmp_path / "missing.env")
        assert settings.workers == DEFAULT_WORKERS
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.retries == 0
        assert settings.debug is False

    def test_reads_environment(self, clean_env, tmp_path):
        clean_env.setenv("SNMP_FORKS", "8")
        clean_env.setenv("SNMP_TIMEOUT", "3")
        clean_env.setenv("SNMP_RETRIES", "2")
        clean_env.setenv("DEBUG", "true")

        settings = PollerSettings.from_env(env_file=tmp_path / "missing.env")

        assert settings.workers == 8
        assert settings.timeout == 3.0
        assert settings.retries == 2
        assert settings.debug is True

    @pytest.mark.parametrize("forks,timeout", [("0", "0"), ("-3", "-1"), ("lots", "slow")])
    def test_non_positive_values_fall_back(self, clean_env, tmp_path, forks, timeout):
        clean_env.setenv("SNMP_FORKS", forks)
        clean_env.setenv("SNMP_TIMEOUT", timeout)

        settings = PollerSettings.from_env(env_file=tmp_path / "missing.env")

        assert settings.workers == DEFAULT_WORKERS
        assert settings.timeout == DEFAULT_TIMEOUT

    @pytest.mark.parametrize("value", ["1", "yes", "TRUE-ish", ""])
    def test_debug_only_for_true(self, clean_env, tmp_path, value):
        clean_env.setenv("DEBUG", value)
        assert PollerSettings.from_env(env_file=tmp_path / "missing.env").debug is False

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "poller.env"
        env_file.write_text("SNMP_FORKS=6\nSNMP_RETRIES=1\n")

        settings = PollerSettings.from_env(env_file=env_file)

        assert settings.workers == 6
        assert settings.retries == 1

    def test_overrides_win_and_none_is_ignored(self, clean_env, tmp_path):
        clean_env.setenv("SNMP_FORKS", "8")

        settings = PollerSettings.from_env(env_file=tmp_path / "missing.env", workers=2, timeout=None)

        assert settings.workers == 2
        assert settings.timeout == DEFAULT_TIMEOUT

    def test_exchange_path_defaults_to_temp(self):
        assert str(PollerSettings().exchange_path) == tempfile.gettempdir()

    def test_rejects_invalid_values(self):
        with pytest.raises(ValidationError):
            PollerSettings(workers=0)
        with pytest.raises(ValidationError):
            PollerSettings(timeout=0)

    def test_is_immutable(self):
        settings = PollerSettings()
        with pytest.raises(ValidationError):
            settings.workers = 3
