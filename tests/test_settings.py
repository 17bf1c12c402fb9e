"""Tests for vdss.settings."""

from __future__ import annotations

import logging

import pytest

from vdss.settings import Settings, configure_logging, get_settings
from vdss.tire_forces import TireModelParameters


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("VDSS_TIRE_B", "VDSS_WHEELBASE_M", "VDSS_TARGET_SPEED_FRACTION"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.tire_b == 10.0
        assert settings.tire_e == 0.97
        assert settings.wheelbase_m == 3.5
        assert settings.target_speed_fraction == 0.75
        assert settings.lookahead_margin_s == 3.0

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VDSS_TIRE_D", "0.8")
        monkeypatch.setenv("vdss_decel_magnitude", "3.5")
        settings = Settings(_env_file=None)
        assert settings.tire_d == 0.8
        assert settings.decel_magnitude == 3.5

    def test_get_settings_is_cached(self, fresh_settings: None) -> None:
        assert get_settings() is get_settings()

    def test_tire_params_follow_env(
        self, monkeypatch: pytest.MonkeyPatch, fresh_settings: None
    ) -> None:
        monkeypatch.setenv("VDSS_TIRE_B", "7.5")
        assert TireModelParameters.from_settings().b == 7.5

    def test_configure_logging_applies_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        configure_logging(Settings(_env_file=None, log_level="debug"))
        assert calls == [{"level": "DEBUG"}]
