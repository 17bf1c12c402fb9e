"""Longitudinal curve-approach run for a single curve-speed controller.

Drives one :class:`CurveSpeedController` along a straight-curve-straight road
with a point-mass speed update.  This is a harness for exercising the
controller over time; it does not model lateral, yaw or roll dynamics.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import pandas as pd

from vdss.curve_speed import CurveSpeedController

TRACE_COLUMNS = [
    "time_s",
    "distance_m",
    "speed_mps",
    "distance_to_curve_m",
    "curve_radius_m",
    "accel_mps2",
    "turn_rate_rps",
    "mode",
]


@dataclass(frozen=True)
class RoadProfile:
    """A straight approach, one constant-radius curve, then straight road."""

    curve_start_m: float
    curve_length_m: float
    curve_radius_m: float

    def __post_init__(self) -> None:
        if self.curve_start_m < 0.0 or self.curve_length_m < 0.0:
            msg = "Curve start and length must be non-negative"
            raise ValueError(msg)
        if not self.curve_radius_m > 0.0:
            msg = f"Curve radius must be positive, got {self.curve_radius_m}"
            raise ValueError(msg)

    @property
    def curve_end_m(self) -> float:
        return self.curve_start_m + self.curve_length_m

    def lookahead(self, distance_m: float) -> tuple[float, float]:
        """Return (distance to curve, radius) as seen from *distance_m*."""
        if distance_m < self.curve_start_m:
            return self.curve_start_m - distance_m, self.curve_radius_m
        if distance_m <= self.curve_end_m:
            return 0.0, self.curve_radius_m
        return 0.0, math.inf


def simulate_curve_approach(
    controller: CurveSpeedController,
    profile: RoadProfile,
    initial_speed_mps: float,
    baseline_acceleration: float = 0.0,
    dt: float = 0.1,
    max_time_s: float = 120.0,
) -> pd.DataFrame:
    """Run *controller* through *profile* and return the per-step trace.

    The run ends one step after the vehicle leaves the curve, when it comes
    to rest short of the curve, or at *max_time_s*.

    Returns
    -------
    DataFrame with columns :data:`TRACE_COLUMNS`, one row per control step.
    """
    if initial_speed_mps < 0.0:
        msg = f"Initial speed must be >= 0, got {initial_speed_mps}"
        raise ValueError(msg)
    if dt <= 0.0 or max_time_s <= 0.0:
        msg = "dt and max_time_s must be positive"
        raise ValueError(msg)

    rows: list[dict[str, object]] = []
    t = 0.0
    distance = 0.0
    speed = initial_speed_mps
    n_steps = int(math.ceil(max_time_s / dt))

    for _ in range(n_steps):
        dist_to_curve, radius = profile.lookahead(distance)
        accel, turn_rate = controller.adjust(speed, baseline_acceleration, dist_to_curve, radius, dt)
        rows.append(
            {
                "time_s": t,
                "distance_m": distance,
                "speed_mps": speed,
                "distance_to_curve_m": dist_to_curve,
                "curve_radius_m": radius,
                "accel_mps2": accel,
                "turn_rate_rps": turn_rate,
                "mode": str(controller.mode),
            }
        )
        if distance > profile.curve_end_m:
            break
        speed = max(speed + accel * dt, 0.0)
        distance += speed * dt
        t += dt
        if speed == 0.0 and accel <= 0.0:
            break

    return pd.DataFrame(rows, columns=TRACE_COLUMNS)
