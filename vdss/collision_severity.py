"""Two-vehicle collision severity (delta-V) evaluation.

Crash-reconstruction convention: the *target* is the struck vehicle, the
*bullet* is the striking one.  Each vehicle's delta-V is its share of the
closing speed, inversely proportional to its mass and scaled by a per-role
delta-V factor for the selected bound assumption:

    dV_target = m_bullet / (m_target + m_bullet) * closing * k_target(bound)
    dV_bullet = m_target / (m_target + m_bullet) * closing * k_bullet(bound)

Delta-V maps to an ordinal severity class S0..S4 through a monotonic threshold
table chosen by the vehicle's collision type.

Only head-on closing speeds are checked against a reconstructed case.  The
rear-end and side formulas and thresholds are provisional.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import numpy as np

from vdss.errors import InvalidScenario

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


def _normalise_label(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


class _ParsableEnum(StrEnum):
    @classmethod
    def parse(cls, text: str) -> _ParsableEnum:
        """Look up a member by value or name, ignoring case and separators."""
        key = _normalise_label(text)
        for member in cls:
            if key in (_normalise_label(member.value), _normalise_label(member.name)):
                return member
        msg = f"Unknown {cls.__name__} {text!r}"
        raise InvalidScenario(msg)


class CollisionType(_ParsableEnum):
    """Impact configuration from one vehicle's point of view."""

    HEAD_ON = "Head-On"
    REAR_END = "Rear-End"
    SIDE = "Side"


class BoundType(_ParsableEnum):
    """Which delta-V assumption governs the allocation."""

    AVERAGE = "Average"
    LOWER = "Lower"
    UPPER = "Upper"


class SeverityClass(_ParsableEnum):
    """Ordinal injury-risk class, S0 (negligible) to S4 (most severe)."""

    S0 = "S0"
    S1 = "S1"
    S2 = "S2"
    S3 = "S3"
    S4 = "S4"

    @property
    def rank(self) -> int:
        return int(self.value[1:])


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollisionScenario:
    """Impact conditions for a single evaluation.  Speeds in kph, masses in kg."""

    collision_type_target: CollisionType
    collision_type_bullet: CollisionType
    initial_speed_target_kph: float
    initial_speed_bullet_kph: float
    mass_target_kg: float
    mass_bullet_kg: float
    bound_type: BoundType = BoundType.AVERAGE


@dataclass(frozen=True)
class SeverityResult:
    """Delta-V (kph) and severity class for each vehicle."""

    delta_v_target_kph: float
    delta_v_bullet_kph: float
    severity_target: SeverityClass
    severity_bullet: SeverityClass


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# (target, bullet) delta-V factors.  Average is calibrated to a reconstructed
# head-on case (truck vs. mid-size vehicle); Lower/Upper bracket it.
BOUND_FACTORS: dict[BoundType, tuple[float, float]] = {
    BoundType.LOWER: (1.1022, 1.2406),
    BoundType.AVERAGE: (1.2822, 1.4206),
    BoundType.UPPER: (1.4622, 1.6006),
}

# Lower delta-V bounds (kph) of S1, S2, S3, S4.  Must be strictly increasing.
SEVERITY_THRESHOLDS_KPH: dict[CollisionType, tuple[float, float, float, float]] = {
    CollisionType.HEAD_ON: (4.0, 20.0, 40.0, 75.0),
    CollisionType.REAR_END: (4.0, 15.0, 30.0, 60.0),
    CollisionType.SIDE: (3.0, 10.0, 20.0, 35.0),
}

_SEVERITY_BY_RANK: tuple[SeverityClass, ...] = tuple(SeverityClass)

_CLOSING_SPEED: dict[CollisionType, Callable[[float, float], float]] = {
    CollisionType.HEAD_ON: lambda v_target, v_bullet: v_target + v_bullet,
    CollisionType.REAR_END: lambda v_target, v_bullet: abs(v_bullet - v_target),
    CollisionType.SIDE: math.hypot,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_scenario(scenario: CollisionScenario) -> CollisionScenario:
    """Validate *scenario*, converting string enum fields to members."""
    type_target = scenario.collision_type_target
    type_bullet = scenario.collision_type_bullet
    bound = scenario.bound_type
    if not isinstance(type_target, CollisionType):
        type_target = CollisionType.parse(str(type_target))
    if not isinstance(type_bullet, CollisionType):
        type_bullet = CollisionType.parse(str(type_bullet))
    if not isinstance(bound, BoundType):
        bound = BoundType.parse(str(bound))

    raw = {
        "initial_speed_target_kph": scenario.initial_speed_target_kph,
        "initial_speed_bullet_kph": scenario.initial_speed_bullet_kph,
        "mass_target_kg": scenario.mass_target_kg,
        "mass_bullet_kg": scenario.mass_bullet_kg,
    }
    values: dict[str, float] = {}
    for name, value in raw.items():
        msg = f"{name} must be a finite number, got {value!r}"
        try:
            values[name] = float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidScenario(msg) from exc
        if not math.isfinite(values[name]):
            raise InvalidScenario(msg)
    if values["mass_target_kg"] <= 0.0 or values["mass_bullet_kg"] <= 0.0:
        msg = (
            f"Masses must be positive, got target={values['mass_target_kg']} "
            f"bullet={values['mass_bullet_kg']}"
        )
        raise InvalidScenario(msg)
    if values["initial_speed_target_kph"] < 0.0 or values["initial_speed_bullet_kph"] < 0.0:
        msg = (
            f"Speeds must be non-negative, got target={values['initial_speed_target_kph']} "
            f"bullet={values['initial_speed_bullet_kph']}"
        )
        raise InvalidScenario(msg)

    return CollisionScenario(
        collision_type_target=type_target,
        collision_type_bullet=type_bullet,
        bound_type=bound,
        **values,
    )


def _closing_speed(scenario: CollisionScenario) -> float:
    combine = _CLOSING_SPEED[scenario.collision_type_target]
    return float(combine(scenario.initial_speed_target_kph, scenario.initial_speed_bullet_kph))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def closing_speed_kph(scenario: CollisionScenario) -> float:
    """Relative impact speed, dispatched on the target's collision type."""
    return _closing_speed(normalize_scenario(scenario))


def classify_severity(delta_v_kph: float, collision_type: CollisionType) -> SeverityClass:
    """Map a delta-V magnitude to its severity class for *collision_type*."""
    thresholds = SEVERITY_THRESHOLDS_KPH[collision_type]
    rank = int(np.searchsorted(thresholds, abs(delta_v_kph), side="right"))
    return _SEVERITY_BY_RANK[rank]


def evaluate(scenario: CollisionScenario) -> SeverityResult:
    """Compute delta-V and severity class for both vehicles of *scenario*.

    Raises
    ------
    InvalidScenario
        Non-positive mass, negative speed, non-finite value or unknown
        collision / bound type.
    """
    scenario = normalize_scenario(scenario)
    closing = _closing_speed(scenario)

    total_mass = scenario.mass_target_kg + scenario.mass_bullet_kg
    k_target, k_bullet = BOUND_FACTORS[scenario.bound_type]
    dv_target = scenario.mass_bullet_kg / total_mass * closing * k_target
    dv_bullet = scenario.mass_target_kg / total_mass * closing * k_bullet

    result = SeverityResult(
        delta_v_target_kph=dv_target,
        delta_v_bullet_kph=dv_bullet,
        severity_target=classify_severity(dv_target, scenario.collision_type_target),
        severity_bullet=classify_severity(dv_bullet, scenario.collision_type_bullet),
    )
    logger.debug(
        "Collision %s/%s closing=%.2f kph -> target %.2f kph %s, bullet %.2f kph %s",
        scenario.collision_type_target,
        scenario.collision_type_bullet,
        closing,
        dv_target,
        result.severity_target,
        dv_bullet,
        result.severity_bullet,
    )
    return result
