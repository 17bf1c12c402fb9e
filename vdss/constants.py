"""Shared constants for the VDSS safety-analysis core."""

from __future__ import annotations

# Default tractor wheelbase used to lay out tires when no offsets are given
DEFAULT_WHEELBASE_M: float = 3.5
