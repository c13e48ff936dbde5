"""Tests for environment-driven settings."""

import pytest

from app.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FRAUD_THRESHOLD", "LARGE_AMOUNT_THRESHOLD", "SUSPICIOUS_DOMAINS"):
            monkeypatch.delenv(name, raising=False)
        config = Settings(_env_file=None).fraud_config()
        assert config.threshold == 0.5
        assert config.large_amount_threshold == 5000
        assert config.suspicious_domains == [".ru", "test.com", "example.com"]
        assert not config.rapid_fire_enabled

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FRAUD_THRESHOLD", "0.7")
        monkeypatch.setenv("LARGE_AMOUNT_THRESHOLD", "2500")
        monkeypatch.setenv("SUSPICIOUS_DOMAINS", " .xyz , bad.com ,, ")
        config = Settings(_env_file=None).fraud_config()
        assert config.threshold == 0.7
        assert config.large_amount_threshold == 2500
        assert config.suspicious_domains == [".xyz", "bad.com"]

    def test_invalid_threshold_rejected(self, monkeypatch):
        monkeypatch.setenv("FRAUD_THRESHOLD", "1.5")
        with pytest.raises(ValueError):
            Settings(_env_file=None).fraud_config()
