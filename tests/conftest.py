"""Shared test fixtures for VDSS tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from vdss.collision_severity import BoundType, CollisionScenario, CollisionType
from vdss.curve_speed import CurveSpeedController
from vdss.settings import get_settings


@pytest.fixture
def controller() -> CurveSpeedController:
    """Controller with the reference policy (75 %, 2 m/s^2, 12 %, 3 s)."""
    return CurveSpeedController(0.75, 2.0, 12.0, 3.0)


@pytest.fixture
def reference_scenario() -> CollisionScenario:
    """Reconstructed head-on case: mid-size vehicle struck by a loaded tractor."""
    return CollisionScenario(
        collision_type_target=CollisionType.HEAD_ON,
        collision_type_bullet=CollisionType.HEAD_ON,
        initial_speed_target_kph=23.60,
        initial_speed_bullet_kph=35.98,
        mass_target_kg=4500.0,
        mass_bullet_kg=36500.0,
        bound_type=BoundType.AVERAGE,
    )


@pytest.fixture
def fresh_settings() -> Iterator[None]:
    """Re-read settings from the (monkeypatched) environment for one test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
