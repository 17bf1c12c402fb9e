"""Core defaults via pydantic-settings."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from vdss.constants import DEFAULT_WHEELBASE_M


class Settings(BaseSettings):
    """VDSS configuration.

    Values are loaded from ``VDSS_``-prefixed environment variables, falling
    back to a ``.env`` file in the working directory.  They only provide
    defaults: every public operation also accepts explicit arguments.
    """

    model_config = SettingsConfigDict(
        env_prefix="VDSS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Vehicle-wide magic-formula coefficients
    tire_b: float = 10.0
    tire_c: float = 1.9
    tire_d: float = 1.0
    tire_e: float = 0.97

    # Axle layout used when tire offsets are not supplied
    wheelbase_m: float = DEFAULT_WHEELBASE_M

    # Curve-speed controller policy
    target_speed_fraction: float = 0.75
    decel_magnitude: float = 2.0
    hold_threshold_pct: float = 12.0
    lookahead_margin_s: float = 3.0

    # Severity reports
    report_dir: str = "data/reports"

    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process settings, read once from the environment."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())
