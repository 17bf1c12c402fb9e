"""Curated presets of magic-formula coefficients for heavy-vehicle tires.

The tire model uses one coefficient set for the whole vehicle.  These presets
give representative sets per wheel position and construction so simulations
can pick a plausible compound by name instead of hand-typing B/C/D/E.  They
are simulation defaults, not measured fits for a specific product.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from vdss.tire_forces import TireModelParameters

# ---------------------------------------------------------------------------
# Enums & dataclasses
# ---------------------------------------------------------------------------


class TirePosition(StrEnum):
    """Wheel position the tire is designed for."""

    STEER = "steer"
    DRIVE = "drive"
    TRAILER = "trailer"
    ALL_POSITION = "all_position"


@dataclass(frozen=True)
class TirePreset:
    """A named tire coefficient set."""

    name: str
    position: TirePosition
    size: str
    b: float
    c: float
    d: float
    e: float
    notes: str = ""

    @property
    def params(self) -> TireModelParameters:
        return TireModelParameters(b=self.b, c=self.c, d=self.d, e=self.e)


# ---------------------------------------------------------------------------
# Curated presets
# ---------------------------------------------------------------------------

_CURATED_PRESETS: dict[str, TirePreset] = {
    "baseline_tractor": TirePreset(
        name="Baseline Tractor",
        position=TirePosition.ALL_POSITION,
        size="varies",
        b=10.0,
        c=1.9,
        d=1.0,
        e=0.97,
        notes="Vehicle-wide default used by the simple force model",
    ),
    "steer_regional": TirePreset(
        name="Regional Steer 295/75R22.5",
        position=TirePosition.STEER,
        size="295/75R22.5",
        b=9.2,
        c=1.65,
        d=0.85,
        e=0.2,
        notes="Rib tread, high cornering stiffness",
    ),
    "steer_longhaul": TirePreset(
        name="Long-Haul Steer 275/80R22.5",
        position=TirePosition.STEER,
        size="275/80R22.5",
        b=8.6,
        c=1.6,
        d=0.82,
        e=0.1,
        notes="Fuel-efficient rib tread",
    ),
    "drive_lug": TirePreset(
        name="Drive Lug 11R22.5",
        position=TirePosition.DRIVE,
        size="11R22.5",
        b=7.4,
        c=1.55,
        d=0.8,
        e=-0.3,
        notes="Open-shoulder lug tread, softer lateral response",
    ),
    "drive_closed_shoulder": TirePreset(
        name="Drive Closed Shoulder 295/75R22.5",
        position=TirePosition.DRIVE,
        size="295/75R22.5",
        b=8.1,
        c=1.6,
        d=0.82,
        e=-0.1,
        notes="Closed-shoulder drive tread",
    ),
    "trailer_wide_base": TirePreset(
        name="Trailer Wide-Base 445/50R22.5",
        position=TirePosition.TRAILER,
        size="445/50R22.5",
        b=8.8,
        c=1.7,
        d=0.78,
        e=0.3,
        notes="Single wide-base replacing a dual assembly",
    ),
    "trailer_dual": TirePreset(
        name="Trailer Dual 11R22.5",
        position=TirePosition.TRAILER,
        size="11R22.5",
        b=9.5,
        c=1.7,
        d=0.8,
        e=0.4,
        notes="Conventional trailer dual",
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def search_presets(query: str, limit: int = 10) -> list[TirePreset]:
    """Search presets by case-insensitive substring on name and size.

    Args:
        query: Substring to match against preset name and size.
        limit: Maximum number of results to return.

    Returns:
        Matching :class:`TirePreset` entries, up to *limit*.
    """
    if not query:
        return []

    q = query.lower()
    matches: list[TirePreset] = []
    for preset in _CURATED_PRESETS.values():
        if q in preset.name.lower() or q in preset.size.lower():
            matches.append(preset)
            if len(matches) >= limit:
                break
    return matches


def get_preset(slug: str) -> TirePreset | None:
    """Look up a preset by its exact slug, e.g. ``"steer_regional"``."""
    return _CURATED_PRESETS.get(slug)


def presets_for_position(position: TirePosition) -> list[TirePreset]:
    """Return the presets designed for *position*, sorted by name."""
    return sorted(
        (p for p in _CURATED_PRESETS.values() if p.position == position),
        key=lambda p: p.name,
    )


def list_all_presets() -> list[TirePreset]:
    """Return all presets sorted alphabetically by name."""
    return sorted(_CURATED_PRESETS.values(), key=lambda p: p.name)
