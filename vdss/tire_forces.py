"""Per-tire lateral force and yaw moment from a magic-formula tire curve.

Each tire's slip angle follows from the vehicle-frame lateral velocity at the
tire's longitudinal position:

    v_i     = v + r * offset_i
    alpha_i = atan2(v_i, |u|)

and its lateral force from the saturating curve

    Fy_i = w_i * Fz_i * D * sin(C * atan(B*a - E*(B*a - atan(B*a))))

where ``w_i = area_i / sum(areas)`` is the contact-area weight.  A stationary
vehicle (u == 0) has no defined slip angle; every tire then produces exactly
zero force.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from vdss.errors import InvalidTireInput, ShapeMismatch
from vdss.settings import get_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TireModelParameters:
    """Magic-formula coefficients shared by every tire on the vehicle."""

    b: float = 10.0  # stiffness factor
    c: float = 1.9  # shape factor
    d: float = 1.0  # peak factor (friction multiplier on normal load)
    e: float = 0.97  # curvature factor

    @classmethod
    def from_settings(cls) -> TireModelParameters:
        """Build parameters from the configured ``VDSS_TIRE_*`` defaults."""
        settings = get_settings()
        return cls(b=settings.tire_b, c=settings.tire_c, d=settings.tire_d, e=settings.tire_e)


@dataclass(frozen=True)
class TireSample:
    """A single tire: normal load (N), contact-patch area (m^2), offset from CoG (m)."""

    load: float
    contact_area: float
    offset_m: float = 0.0


class TireForceResult(NamedTuple):
    """Aggregate lateral force (N) and yaw moment about the CoG (N·m)."""

    total_lateral_force: float
    yaw_moment: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def magic_formula(alpha: np.ndarray | float, params: TireModelParameters) -> np.ndarray:
    """Normalised lateral force per unit load at slip angle ``alpha`` (rad)."""
    arg = params.b * np.asarray(alpha, dtype=np.float64)
    return params.d * np.sin(params.c * np.arctan(arg - params.e * (arg - np.arctan(arg))))


def default_axle_offsets(n: int, wheelbase_m: float | None = None) -> np.ndarray:
    """Spread ``n`` tires evenly along the wheelbase, front first, centred on the CoG."""
    if n < 1:
        msg = f"Need at least one tire, got {n}"
        raise ShapeMismatch(msg)
    if wheelbase_m is None:
        wheelbase_m = get_settings().wheelbase_m
    if n == 1:
        return np.zeros(1, dtype=np.float64)
    return np.linspace(wheelbase_m / 2.0, -wheelbase_m / 2.0, n)


def _as_tire_array(values: Sequence[float] | np.ndarray, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if not np.all(np.isfinite(arr)):
        msg = f"{name} must be finite"
        raise InvalidTireInput(msg)
    return arr


def _validate_inputs(
    loads: np.ndarray,
    areas: np.ndarray,
    offsets: np.ndarray,
    u: float,
    v: float,
    r: float,
) -> None:
    n = len(loads)
    if n == 0:
        msg = "At least one tire is required"
        raise ShapeMismatch(msg)
    if len(areas) != n:
        msg = f"Got {n} tire loads but {len(areas)} contact areas"
        raise ShapeMismatch(msg)
    if len(offsets) != n:
        msg = f"Got {n} tire loads but {len(offsets)} tire offsets"
        raise ShapeMismatch(msg)
    if np.any(loads < 0.0):
        msg = "Tire loads must be non-negative"
        raise InvalidTireInput(msg)
    if np.any(areas < 0.0):
        msg = "Contact areas must be non-negative"
        raise InvalidTireInput(msg)
    if float(np.sum(areas)) <= 0.0:
        msg = "Total contact area must be positive"
        raise InvalidTireInput(msg)
    if not all(np.isfinite(x) for x in (u, v, r)):
        msg = f"Vehicle kinematics must be finite (u={u}, v={v}, r={r})"
        raise InvalidTireInput(msg)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compute_lateral_forces(
    loads: Sequence[float] | np.ndarray,
    contact_areas: Sequence[float] | np.ndarray,
    u: float,
    v: float,
    r: float,
    *,
    offsets: Sequence[float] | np.ndarray | None = None,
    params: TireModelParameters | None = None,
) -> np.ndarray:
    """Lateral force of every tire, in input order.

    Parameters
    ----------
    loads:
        Normal load per tire (N).
    contact_areas:
        Contact-patch area per tire; any positive scale, normalised internally.
    u, v, r:
        Longitudinal speed (m/s), lateral speed (m/s) and yaw rate (rad/s).
    offsets:
        Longitudinal tire positions relative to the CoG (m, forward positive).
        Defaults to :func:`default_axle_offsets`.
    params:
        Tire curve coefficients.  Defaults to the configured ones.

    Returns
    -------
    Array of per-tire lateral forces (N).
    """
    load_arr = _as_tire_array(loads, "Tire loads")
    area_arr = _as_tire_array(contact_areas, "Contact areas")
    if offsets is None:
        offset_arr = default_axle_offsets(max(len(load_arr), 1))
    else:
        offset_arr = _as_tire_array(offsets, "Tire offsets")
    _validate_inputs(load_arr, area_arr, offset_arr, u, v, r)

    if u == 0.0:
        return np.zeros(len(load_arr), dtype=np.float64)
    if u < 0.0:
        logger.debug("Reversing vehicle (u=%.3f); slip measured against |u|", u)

    params = params or TireModelParameters.from_settings()
    weights = area_arr / np.sum(area_arr)

    tire_lateral_speed = v + r * offset_arr
    # |u| keeps alpha inside (-pi/2, pi/2) and continuous in v when reversing
    alpha = np.arctan2(tire_lateral_speed, np.abs(u))
    return weights * load_arr * magic_formula(alpha, params)


def compute_tire_forces(
    loads: Sequence[float] | np.ndarray,
    contact_areas: Sequence[float] | np.ndarray,
    u: float,
    v: float,
    r: float,
    *,
    offsets: Sequence[float] | np.ndarray | None = None,
    params: TireModelParameters | None = None,
) -> TireForceResult:
    """Total lateral force and yaw moment generated by all tires.

    Raises ``ShapeMismatch`` when the per-tire sequences are empty or of
    different lengths.  See :func:`compute_lateral_forces` for the arguments.
    """
    fy = compute_lateral_forces(loads, contact_areas, u, v, r, offsets=offsets, params=params)
    if offsets is None:
        offset_arr = default_axle_offsets(len(fy))
    else:
        offset_arr = np.asarray(offsets, dtype=np.float64).reshape(-1)
    return TireForceResult(
        total_lateral_force=float(np.sum(fy)),
        yaw_moment=float(np.sum(fy * offset_arr)),
    )


def compute_tire_forces_from_samples(
    tires: Sequence[TireSample],
    u: float,
    v: float,
    r: float,
    params: TireModelParameters | None = None,
) -> TireForceResult:
    """Convenience wrapper over :func:`compute_tire_forces` for ``TireSample`` lists."""
    return compute_tire_forces(
        [t.load for t in tires],
        [t.contact_area for t in tires],
        u,
        v,
        r,
        offsets=[t.offset_m for t in tires],
        params=params,
    )
