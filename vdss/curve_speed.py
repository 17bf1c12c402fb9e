"""Curve-speed advisory controller.

Overrides the baseline (cruise / PID) acceleration command ahead of a curve:

1. While cruising, a finite-radius curve inside the lookahead time horizon
   triggers full deceleration and records the current speed.
2. Deceleration continues until speed falls to ``target_speed_fraction`` of
   the recorded speed, after which the controller holds speed (zero accel).
3. Once the road is straight again, or the curve falls back outside the
   horizon, the baseline command is passed through on the same step.  While
   slowing and holding, the horizon is the one taken at the recorded speed,
   and a curve no farther away than where braking began stays inside it.

The lookahead horizon is the time needed to shed speed down to the curve
target at ``decel_magnitude`` plus a fixed margin:

    horizon(s) = (1 - fraction) * s / decel_magnitude + lookahead_margin_s

Each vehicle owns its own controller; instances carry mutable state and must
not be shared between simulation loops without external locking.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum
from typing import NamedTuple

from vdss.errors import (
    InvalidControllerConfig,
    InvalidDistance,
    InvalidRadius,
    InvalidSpeed,
    InvalidTimestep,
)
from vdss.settings import get_settings

logger = logging.getLogger(__name__)

SPEED_TOLERANCE_MPS = 1e-9
MIN_TURN_SPEED_MPS = 0.1  # floor so a stopped vehicle still gets a turn demand

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


class ControllerMode(StrEnum):
    """Operating mode of a curve-speed controller."""

    CRUISING = "cruising"
    DECELERATING = "decelerating"
    CURVE_HOLD = "curve_hold"
    RESUMING = "resuming"


@dataclass(frozen=True)
class ControllerConfig:
    """Fixed controller policy.

    target_speed_fraction: curve speed as a fraction of the speed recorded
        when deceleration began, in (0, 1].
    decel_magnitude: deceleration command while slowing down (m/s^2, >= 0).
    hold_threshold_pct: how far (percent of the target) speed may creep above
        the target during a hold before deceleration resumes.
    lookahead_margin_s: time added to the braking time to form the horizon.
    """

    target_speed_fraction: float
    decel_magnitude: float
    hold_threshold_pct: float
    lookahead_margin_s: float

    def __post_init__(self) -> None:
        values = (
            self.target_speed_fraction,
            self.decel_magnitude,
            self.hold_threshold_pct,
            self.lookahead_margin_s,
        )
        if not all(math.isfinite(x) for x in values):
            msg = f"Controller config values must be finite, got {values}"
            raise InvalidControllerConfig(msg)
        if not 0.0 < self.target_speed_fraction <= 1.0:
            msg = f"target_speed_fraction must be in (0, 1], got {self.target_speed_fraction}"
            raise InvalidControllerConfig(msg)
        if self.decel_magnitude < 0.0:
            msg = f"decel_magnitude must be >= 0, got {self.decel_magnitude}"
            raise InvalidControllerConfig(msg)
        if self.hold_threshold_pct < 0.0:
            msg = f"hold_threshold_pct must be >= 0, got {self.hold_threshold_pct}"
            raise InvalidControllerConfig(msg)
        if self.lookahead_margin_s < 0.0:
            msg = f"lookahead_margin_s must be >= 0, got {self.lookahead_margin_s}"
            raise InvalidControllerConfig(msg)

    @classmethod
    def from_settings(cls) -> ControllerConfig:
        settings = get_settings()
        return cls(
            target_speed_fraction=settings.target_speed_fraction,
            decel_magnitude=settings.decel_magnitude,
            hold_threshold_pct=settings.hold_threshold_pct,
            lookahead_margin_s=settings.lookahead_margin_s,
        )

    def lookahead_horizon(self, speed: float) -> float:
        """Time-to-curve (s) below which deceleration starts at *speed*."""
        if self.decel_magnitude == 0.0:
            return math.inf
        braking_time = (1.0 - self.target_speed_fraction) * speed / self.decel_magnitude
        return braking_time + self.lookahead_margin_s


@dataclass
class ControllerRuntimeState:
    """Mutable state owned by exactly one controller."""

    mode: ControllerMode = ControllerMode.CRUISING
    recorded_speed: float = 0.0
    trigger_distance: float = 0.0


class ControlOutput(NamedTuple):
    """Adjusted acceleration command (m/s^2) and turn-rate demand (rad/s)."""

    accel: float
    turn_rate: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _time_to_curve(distance: float, speed: float) -> float:
    if speed > 0.0:
        return distance / speed
    return 0.0 if distance == 0.0 else math.inf


def _validate_step(
    current_speed: float,
    distance_to_curve: float,
    curve_radius: float,
    dt: float,
) -> None:
    if math.isnan(curve_radius) or curve_radius <= 0.0:
        msg = f"Curve radius must be positive or inf, got {curve_radius}"
        raise InvalidRadius(msg)
    if math.isnan(distance_to_curve) or distance_to_curve < 0.0:
        msg = f"Distance to curve must be >= 0, got {distance_to_curve}"
        raise InvalidDistance(msg)
    if not math.isfinite(dt) or dt <= 0.0:
        msg = f"Time step must be a positive finite value, got {dt}"
        raise InvalidTimestep(msg)
    if not math.isfinite(current_speed) or current_speed < 0.0:
        msg = f"Current speed must be a non-negative finite value, got {current_speed}"
        raise InvalidSpeed(msg)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class CurveSpeedController:
    """Stateful curve-speed advisory controller for one vehicle.

    Parameters
    ----------
    target_speed_fraction:
        Curve speed as a fraction of the speed at deceleration start.
    decel_magnitude:
        Deceleration command magnitude (m/s^2).
    hold_threshold_pct:
        Allowed creep above the curve target, in percent, before a hold
        reverts to deceleration.
    lookahead_margin_s:
        Margin added to the braking time to form the lookahead horizon.
    """

    def __init__(
        self,
        target_speed_fraction: float,
        decel_magnitude: float,
        hold_threshold_pct: float,
        lookahead_margin_s: float,
    ) -> None:
        self._config = ControllerConfig(
            target_speed_fraction=target_speed_fraction,
            decel_magnitude=decel_magnitude,
            hold_threshold_pct=hold_threshold_pct,
            lookahead_margin_s=lookahead_margin_s,
        )
        self._state = ControllerRuntimeState()

    @classmethod
    def from_config(cls, config: ControllerConfig) -> CurveSpeedController:
        return cls(
            config.target_speed_fraction,
            config.decel_magnitude,
            config.hold_threshold_pct,
            config.lookahead_margin_s,
        )

    # -- read-only views ----------------------------------------------------

    @property
    def config(self) -> ControllerConfig:
        return self._config

    @property
    def mode(self) -> ControllerMode:
        return self._state.mode

    @property
    def recorded_speed(self) -> float:
        return self._state.recorded_speed

    @property
    def target_speed(self) -> float:
        """Curve target speed for the current deceleration episode."""
        return self._config.target_speed_fraction * self._state.recorded_speed

    def lookahead_horizon(self, speed: float) -> float:
        return self._config.lookahead_horizon(speed)

    # -- state machine ------------------------------------------------------

    def reset(self) -> None:
        """Return to ``CRUISING`` and forget the recorded speed."""
        self._state = ControllerRuntimeState()

    def _transition(self, mode: ControllerMode, current_speed: float) -> None:
        logger.debug(
            "Curve-speed controller %s -> %s at %.2f m/s",
            self._state.mode,
            mode,
            current_speed,
        )
        self._state.mode = mode

    def adjust(
        self,
        current_speed: float,
        baseline_acceleration: float,
        distance_to_curve: float,
        curve_radius: float,
        dt: float,
    ) -> ControlOutput:
        """Advance one control step and return the adjusted command.

        Parameters
        ----------
        current_speed:
            Vehicle speed (m/s).
        baseline_acceleration:
            Command from the upstream speed controller (m/s^2).
        distance_to_curve:
            Distance to the next curve entry (m); 0 when inside the curve.
        curve_radius:
            Radius of the upcoming / current curve (m), ``inf`` on a straight.
        dt:
            Control step (s).

        Returns
        -------
        ControlOutput with the acceleration command and the turn-rate demand
        ``current_speed / curve_radius`` (0 on a straight), with the speed
        floored at ``MIN_TURN_SPEED_MPS``.
        """
        _validate_step(current_speed, distance_to_curve, curve_radius, dt)

        curve_ahead = math.isfinite(curve_radius)
        turn_rate = max(current_speed, MIN_TURN_SPEED_MPS) / curve_radius if curve_ahead else 0.0
        time_to_curve = _time_to_curve(distance_to_curve, current_speed)

        decel = -self._config.decel_magnitude
        mode = self._state.mode

        if mode in (ControllerMode.CRUISING, ControllerMode.RESUMING):
            if curve_ahead and time_to_curve < self._config.lookahead_horizon(current_speed):
                self._state.recorded_speed = current_speed
                self._state.trigger_distance = distance_to_curve
                self._transition(ControllerMode.DECELERATING, current_speed)
                return ControlOutput(decel, turn_rate)
            if (
                mode == ControllerMode.RESUMING
                and current_speed >= self._state.recorded_speed - SPEED_TOLERANCE_MPS
            ):
                self._transition(ControllerMode.CRUISING, current_speed)
            return ControlOutput(baseline_acceleration, turn_rate)

        # Speed shrinks while braking; judge the horizon from the episode start
        within_horizon = (
            distance_to_curve <= self._state.trigger_distance
            or time_to_curve < self._config.lookahead_horizon(self._state.recorded_speed)
        )

        if mode == ControllerMode.DECELERATING:
            if not curve_ahead and not within_horizon:
                self._transition(ControllerMode.RESUMING, current_speed)
                return ControlOutput(baseline_acceleration, turn_rate)
            if current_speed <= self.target_speed + SPEED_TOLERANCE_MPS:
                self._transition(ControllerMode.CURVE_HOLD, current_speed)
                return ControlOutput(0.0, turn_rate)
            return ControlOutput(decel, turn_rate)

        # CURVE_HOLD
        if not curve_ahead or not within_horizon:
            self._transition(ControllerMode.RESUMING, current_speed)
            return ControlOutput(baseline_acceleration, turn_rate)
        creep_limit = self.target_speed * (1.0 + self._config.hold_threshold_pct / 100.0)
        if current_speed > creep_limit + SPEED_TOLERANCE_MPS:
            self._transition(ControllerMode.DECELERATING, current_speed)
            return ControlOutput(decel, turn_rate)
        return ControlOutput(0.0, turn_rate)
