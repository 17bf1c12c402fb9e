"""Fixed-schema text report for collision severity evaluations.

The report has two key-value blocks, inputs then results, with fixed labels
and ordering.  Numbers are written with two decimals, so parsing a report and
formatting it again reproduces the original text.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from vdss.collision_severity import (
    BoundType,
    CollisionScenario,
    CollisionType,
    SeverityClass,
    SeverityResult,
    normalize_scenario,
)
from vdss.errors import ReportFormatError
from vdss.settings import get_settings

logger = logging.getLogger(__name__)

INPUTS_HEADER = "Collision Severity Inputs:"
RESULTS_HEADER = "Collision Severity Results:"

# (label, unit suffix) in report order
_INPUT_FIELDS: list[tuple[str, str]] = [
    ("Collision Type for Vehicle 1", ""),
    ("Collision Type for Vehicle 2", ""),
    ("Initial Speed of Target", " kph"),
    ("Initial Speed of Bullet", " kph"),
    ("Average J2980 Vehicle Mass", " kg"),
    ("Average Vehicle Under Analysis Mass", " kg"),
    ("Bound Type", ""),
]
_RESULT_FIELDS: list[tuple[str, str]] = [
    ("Target Severity", ""),
    ("Bullet Severity", ""),
    ("Target Delta-V", " kph"),
    ("Bullet Delta-V", " kph"),
]

_FIELD_RE = re.compile(r"^- (?P<label>[^:]+): (?P<value>.+)$")


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def format_severity_report(scenario: CollisionScenario, result: SeverityResult) -> str:
    """Render *scenario* and *result* as report text (with trailing newline)."""
    scenario = normalize_scenario(scenario)
    inputs = [
        str(scenario.collision_type_target),
        str(scenario.collision_type_bullet),
        _fmt(scenario.initial_speed_target_kph),
        _fmt(scenario.initial_speed_bullet_kph),
        _fmt(scenario.mass_target_kg),
        _fmt(scenario.mass_bullet_kg),
        str(scenario.bound_type),
    ]
    results = [
        str(result.severity_target),
        str(result.severity_bullet),
        _fmt(result.delta_v_target_kph),
        _fmt(result.delta_v_bullet_kph),
    ]
    lines = [INPUTS_HEADER]
    lines += [f"- {label}: {value}{unit}" for (label, unit), value in zip(_INPUT_FIELDS, inputs)]
    lines += ["", RESULTS_HEADER]
    lines += [f"- {label}: {value}{unit}" for (label, unit), value in zip(_RESULT_FIELDS, results)]
    return "\n".join(lines) + "\n"


def _parse_block(lines: list[str], fields: list[tuple[str, str]]) -> list[str]:
    """Extract the raw values of a block, checking labels, order and units."""
    if len(lines) != len(fields):
        msg = f"Expected {len(fields)} fields, found {len(lines)}"
        raise ReportFormatError(msg)
    values: list[str] = []
    for line, (label, unit) in zip(lines, fields):
        match = _FIELD_RE.match(line)
        if match is None or match.group("label") != label:
            msg = f"Expected field {label!r}, got {line!r}"
            raise ReportFormatError(msg)
        value = match.group("value")
        if unit:
            if not value.endswith(unit):
                msg = f"Field {label!r} is missing its unit {unit.strip()!r}"
                raise ReportFormatError(msg)
            value = value[: -len(unit)]
        values.append(value)
    return values


def _to_float(label: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        msg = f"Field {label!r} is not a number: {value!r}"
        raise ReportFormatError(msg) from exc


def parse_severity_report(text: str) -> tuple[CollisionScenario, SeverityResult]:
    """Parse report text back into its scenario and result.

    Raises ``ReportFormatError`` when the text deviates from the schema.
    """
    lines = text.rstrip("\n").split("\n")
    try:
        split = lines.index("")
    except ValueError as exc:
        msg = "Report must separate the inputs and results blocks with a blank line"
        raise ReportFormatError(msg) from exc
    input_block, result_block = lines[:split], lines[split + 1 :]

    if not input_block or input_block[0] != INPUTS_HEADER:
        msg = f"Report must start with {INPUTS_HEADER!r}"
        raise ReportFormatError(msg)
    if not result_block or result_block[0] != RESULTS_HEADER:
        msg = f"Results block must start with {RESULTS_HEADER!r}"
        raise ReportFormatError(msg)

    raw_inputs = _parse_block(input_block[1:], _INPUT_FIELDS)
    raw_results = _parse_block(result_block[1:], _RESULT_FIELDS)

    try:
        scenario = CollisionScenario(
            collision_type_target=CollisionType(raw_inputs[0]),
            collision_type_bullet=CollisionType(raw_inputs[1]),
            initial_speed_target_kph=_to_float(_INPUT_FIELDS[2][0], raw_inputs[2]),
            initial_speed_bullet_kph=_to_float(_INPUT_FIELDS[3][0], raw_inputs[3]),
            mass_target_kg=_to_float(_INPUT_FIELDS[4][0], raw_inputs[4]),
            mass_bullet_kg=_to_float(_INPUT_FIELDS[5][0], raw_inputs[5]),
            bound_type=BoundType(raw_inputs[6]),
        )
        result = SeverityResult(
            severity_target=SeverityClass(raw_results[0]),
            severity_bullet=SeverityClass(raw_results[1]),
            delta_v_target_kph=_to_float(_RESULT_FIELDS[2][0], raw_results[2]),
            delta_v_bullet_kph=_to_float(_RESULT_FIELDS[3][0], raw_results[3]),
        )
    except ReportFormatError:
        raise
    except ValueError as exc:
        msg = f"Report contains an unknown enumerated value: {exc}"
        raise ReportFormatError(msg) from exc
    return scenario, result


def _resolve_report_path(path: str | Path) -> Path:
    """Place bare file names under the configured report directory.

    Strings are checked before normalisation, so './r.txt' stays relative to
    the working directory while 'r.txt' goes to ``report_dir``.
    """
    if isinstance(path, Path):
        bare = len(path.parts) == 1
    else:
        bare = "/" not in path and "\\" not in path
    if bare:
        return Path(get_settings().report_dir) / path
    return Path(path)


def write_severity_report(
    path: str | Path,
    scenario: CollisionScenario,
    result: SeverityResult,
) -> Path:
    """Write the report to *path*, creating parent directories.  Returns the path."""
    target = _resolve_report_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(format_severity_report(scenario, result), encoding="utf-8")
    logger.info(
        "Wrote collision severity report to %s (target %s, bullet %s)",
        target,
        result.severity_target,
        result.severity_bullet,
    )
    return target


def read_severity_report(path: str | Path) -> tuple[CollisionScenario, SeverityResult]:
    """Read and parse a report written by :func:`write_severity_report`."""
    return parse_severity_report(_resolve_report_path(path).read_text(encoding="utf-8"))
