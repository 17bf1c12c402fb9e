"""Typed failures raised at the boundary of each core operation.

Every error derives from ``ValueError`` so callers that already guard numeric
input with ``except ValueError`` keep working.
"""

from __future__ import annotations


class VdssError(ValueError):
    """Base class for all VDSS input errors."""


class ShapeMismatch(VdssError):
    """Per-tire input sequences are empty or differ in length."""


class InvalidTireInput(VdssError):
    """Tire loads, contact areas or kinematics are outside their valid range."""


class InvalidRadius(VdssError):
    """Curve radius is zero, negative or NaN."""


class InvalidDistance(VdssError):
    """Distance to the next curve is negative or NaN."""


class InvalidTimestep(VdssError):
    """Control step is not a positive finite duration."""


class InvalidSpeed(VdssError):
    """Vehicle speed is negative or not finite."""


class InvalidControllerConfig(VdssError):
    """Curve-speed controller configuration is outside its documented ranges."""


class InvalidScenario(VdssError):
    """Collision scenario has a bad mass, speed or enumerated value."""


class ReportFormatError(VdssError):
    """Severity report text does not follow the fixed two-block schema."""
