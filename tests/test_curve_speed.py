"""Tests for vdss.curve_speed."""

from __future__ import annotations

import math

import pytest

from vdss.curve_speed import (
    ControllerConfig,
    ControllerMode,
    ControlOutput,
    CurveSpeedController,
)
from vdss.errors import (
    InvalidControllerConfig,
    InvalidDistance,
    InvalidRadius,
    InvalidSpeed,
    InvalidTimestep,
)

INF = math.inf


def _trigger_decel(ctrl: CurveSpeedController) -> None:
    ctrl.adjust(20.0, 1.0, 40.0, 50.0, 1.0)


def _enter_hold(ctrl: CurveSpeedController) -> None:
    _trigger_decel(ctrl)
    ctrl.adjust(15.0, 2.0, 0.0, 20.0, 1.0)


# ---------------------------------------------------------------------------
# TestControllerConfig
# ---------------------------------------------------------------------------


class TestControllerConfig:
    def test_lookahead_horizon_reference(self) -> None:
        """Braking time 20 -> 15 m/s at 2 m/s^2 is 2.5 s, plus a 3 s margin."""
        config = ControllerConfig(0.75, 2.0, 12.0, 3.0)
        assert config.lookahead_horizon(20.0) == pytest.approx(5.5)

    def test_zero_decel_has_infinite_horizon(self) -> None:
        config = ControllerConfig(0.75, 0.0, 12.0, 3.0)
        assert config.lookahead_horizon(20.0) == INF

    @pytest.mark.parametrize(
        "args",
        [
            (0.0, 2.0, 12.0, 3.0),
            (1.2, 2.0, 12.0, 3.0),
            (0.75, -1.0, 12.0, 3.0),
            (0.75, 2.0, -5.0, 3.0),
            (0.75, 2.0, 12.0, -1.0),
            (0.75, float("nan"), 12.0, 3.0),
        ],
    )
    def test_invalid_config_rejected(self, args: tuple[float, float, float, float]) -> None:
        with pytest.raises(InvalidControllerConfig):
            CurveSpeedController(*args)

    def test_from_settings_uses_defaults(self) -> None:
        config = ControllerConfig.from_settings()
        assert config == ControllerConfig(0.75, 2.0, 12.0, 3.0)

    def test_from_config_round_trip(self) -> None:
        config = ControllerConfig(0.8, 1.5, 5.0, 2.0)
        assert CurveSpeedController.from_config(config).config == config


# ---------------------------------------------------------------------------
# TestReferenceScenarios
# ---------------------------------------------------------------------------


class TestReferenceScenarios:
    def test_start_decel(self, controller: CurveSpeedController) -> None:
        accel, turn_rate = controller.adjust(20.0, 1.0, 40.0, 50.0, 1.0)
        assert accel == pytest.approx(-2.0, abs=1e-10)
        assert turn_rate > 0.0
        assert controller.mode == ControllerMode.DECELERATING
        assert controller.recorded_speed == 20.0

    def test_no_decel_when_far(self, controller: CurveSpeedController) -> None:
        accel, turn_rate = controller.adjust(20.0, 1.0, 120.0, 50.0, 1.0)
        assert accel == pytest.approx(1.0, abs=1e-10)
        assert turn_rate > 0.0
        assert controller.mode == ControllerMode.CRUISING

    def test_maintain_speed_in_curve(self, controller: CurveSpeedController) -> None:
        _trigger_decel(controller)
        accel, _ = controller.adjust(15.0, 2.0, 0.0, 20.0, 1.0)
        assert accel == pytest.approx(0.0, abs=1e-10)
        assert controller.mode == ControllerMode.CURVE_HOLD

    def test_resume_after_curve(self, controller: CurveSpeedController) -> None:
        _enter_hold(controller)
        accel, _ = controller.adjust(15.0, 3.0, 200.0, INF, 1.0)
        assert accel == pytest.approx(3.0, abs=1e-10)
        assert controller.mode == ControllerMode.RESUMING

    def test_returns_named_pair(self, controller: CurveSpeedController) -> None:
        out = controller.adjust(20.0, 1.0, 120.0, 50.0, 1.0)
        assert isinstance(out, ControlOutput)
        assert out.accel == 1.0
        assert out.turn_rate == pytest.approx(20.0 / 50.0)


# ---------------------------------------------------------------------------
# TestTransitions
# ---------------------------------------------------------------------------


class TestTransitions:
    def test_decel_ignores_baseline(self, controller: CurveSpeedController) -> None:
        _trigger_decel(controller)
        accel, _ = controller.adjust(18.0, 5.0, 10.0, 50.0, 1.0)
        assert accel == -2.0
        assert controller.mode == ControllerMode.DECELERATING

    def test_target_speed_from_recorded(self, controller: CurveSpeedController) -> None:
        _trigger_decel(controller)
        assert controller.target_speed == pytest.approx(15.0)

    def test_hold_entered_below_target(self, controller: CurveSpeedController) -> None:
        _trigger_decel(controller)
        accel, _ = controller.adjust(14.2, 2.0, 5.0, 50.0, 1.0)
        assert accel == 0.0
        assert controller.mode == ControllerMode.CURVE_HOLD

    def test_hold_persists_inside_curve(self, controller: CurveSpeedController) -> None:
        _enter_hold(controller)
        for _ in range(5):
            accel, _ = controller.adjust(15.5, 2.0, 0.0, 20.0, 1.0)
            assert accel == 0.0
        assert controller.mode == ControllerMode.CURVE_HOLD

    def test_hold_reverts_to_decel_when_speed_creeps(
        self, controller: CurveSpeedController
    ) -> None:
        """12 % above the 15 m/s target is 16.8 m/s."""
        _enter_hold(controller)
        accel, _ = controller.adjust(17.5, 2.0, 0.0, 20.0, 1.0)
        assert accel == -2.0
        assert controller.mode == ControllerMode.DECELERATING

    def test_hold_exits_when_curve_moves_beyond_horizon(
        self, controller: CurveSpeedController
    ) -> None:
        _enter_hold(controller)
        accel, _ = controller.adjust(15.0, 0.7, 500.0, 80.0, 1.0)
        assert accel == 0.7
        assert controller.mode == ControllerMode.RESUMING

    def test_slow_hold_survives_shrinking_horizon(
        self, controller: CurveSpeedController
    ) -> None:
        """At 7.4 m/s the own horizon is 3.9 s, but the episode started at 10 m/s."""
        controller.adjust(10.0, 0.0, 42.0, 50.0, 0.1)
        controller.adjust(7.4, 0.0, 30.8, 50.0, 0.1)
        assert controller.mode == ControllerMode.CURVE_HOLD
        accel, _ = controller.adjust(7.4, 0.0, 30.1, 50.0, 0.1)
        assert accel == 0.0
        assert controller.mode == ControllerMode.CURVE_HOLD
        assert controller.recorded_speed == 10.0

    def test_stopped_short_of_curve_keeps_holding(
        self, controller: CurveSpeedController
    ) -> None:
        controller.adjust(10.0, 0.0, 42.0, 50.0, 0.1)
        controller.adjust(7.0, 0.0, 30.0, 50.0, 0.1)
        accel, _ = controller.adjust(0.0, 1.0, 12.0, 50.0, 0.1)
        assert accel == 0.0
        assert controller.mode == ControllerMode.CURVE_HOLD

    def test_decel_abandoned_when_curve_disappears(
        self, controller: CurveSpeedController
    ) -> None:
        _trigger_decel(controller)
        accel, _ = controller.adjust(18.0, 0.4, 300.0, INF, 1.0)
        assert accel == 0.4
        assert controller.mode == ControllerMode.RESUMING

    def test_resuming_returns_to_cruising_at_recorded_speed(
        self, controller: CurveSpeedController
    ) -> None:
        _enter_hold(controller)
        controller.adjust(15.0, 1.0, 200.0, INF, 1.0)
        controller.adjust(18.0, 1.0, 200.0, INF, 1.0)
        assert controller.mode == ControllerMode.RESUMING
        accel, _ = controller.adjust(20.0, 1.0, 200.0, INF, 1.0)
        assert accel == 1.0
        assert controller.mode == ControllerMode.CRUISING

    def test_resuming_can_trigger_next_curve(self, controller: CurveSpeedController) -> None:
        _enter_hold(controller)
        controller.adjust(15.0, 1.0, 200.0, INF, 1.0)
        accel, _ = controller.adjust(16.0, 1.0, 20.0, 60.0, 1.0)
        assert accel == -2.0
        assert controller.mode == ControllerMode.DECELERATING
        assert controller.recorded_speed == 16.0

    def test_straight_road_passes_through(self, controller: CurveSpeedController) -> None:
        accel, turn_rate = controller.adjust(25.0, 0.3, 0.0, INF, 0.1)
        assert accel == 0.3
        assert turn_rate == 0.0
        assert controller.mode == ControllerMode.CRUISING

    def test_reset_returns_to_cruising(self, controller: CurveSpeedController) -> None:
        _enter_hold(controller)
        controller.reset()
        assert controller.mode == ControllerMode.CRUISING
        assert controller.recorded_speed == 0.0

    def test_instances_do_not_share_state(self) -> None:
        a = CurveSpeedController(0.75, 2.0, 12.0, 3.0)
        b = CurveSpeedController(0.75, 2.0, 12.0, 3.0)
        _trigger_decel(a)
        assert a.mode == ControllerMode.DECELERATING
        assert b.mode == ControllerMode.CRUISING
        accel, _ = b.adjust(20.0, 1.0, 120.0, 50.0, 1.0)
        assert accel == 1.0


# ---------------------------------------------------------------------------
# TestTurnRate
# ---------------------------------------------------------------------------


class TestTurnRate:
    @pytest.mark.parametrize("radius", [5.0, 50.0, 800.0, 1e6])
    def test_positive_for_finite_radius(
        self, controller: CurveSpeedController, radius: float
    ) -> None:
        _, turn_rate = controller.adjust(12.0, 0.0, 300.0, radius, 0.1)
        assert turn_rate > 0.0

    def test_grows_with_curvature(self, controller: CurveSpeedController) -> None:
        _, wide = controller.adjust(20.0, 0.0, 500.0, 400.0, 0.1)
        _, tight = controller.adjust(20.0, 0.0, 500.0, 100.0, 0.1)
        assert tight > wide

    def test_positive_when_stationary(self, controller: CurveSpeedController) -> None:
        accel, turn_rate = controller.adjust(0.0, 0.0, 10.0, 50.0, 1.0)
        assert turn_rate > 0.0
        assert accel == 0.0
        assert controller.mode == ControllerMode.CRUISING

    def test_straight_still_zero_when_stationary(self, controller: CurveSpeedController) -> None:
        _, turn_rate = controller.adjust(0.0, 0.0, 10.0, INF, 1.0)
        assert turn_rate == 0.0


# ---------------------------------------------------------------------------
# TestInvalidInputs
# ---------------------------------------------------------------------------


class TestInvalidInputs:
    @pytest.mark.parametrize("radius", [0.0, -10.0, float("nan"), -INF])
    def test_invalid_radius(self, controller: CurveSpeedController, radius: float) -> None:
        with pytest.raises(InvalidRadius):
            controller.adjust(20.0, 1.0, 40.0, radius, 1.0)

    def test_negative_distance(self, controller: CurveSpeedController) -> None:
        with pytest.raises(InvalidDistance):
            controller.adjust(20.0, 1.0, -1.0, 50.0, 1.0)

    @pytest.mark.parametrize("dt", [0.0, -0.1, INF])
    def test_invalid_timestep(self, controller: CurveSpeedController, dt: float) -> None:
        with pytest.raises(InvalidTimestep):
            controller.adjust(20.0, 1.0, 40.0, 50.0, dt)

    def test_negative_speed(self, controller: CurveSpeedController) -> None:
        with pytest.raises(InvalidSpeed):
            controller.adjust(-1.0, 1.0, 40.0, 50.0, 1.0)

    def test_failed_call_leaves_state_untouched(self, controller: CurveSpeedController) -> None:
        _trigger_decel(controller)
        with pytest.raises(InvalidRadius):
            controller.adjust(15.0, 1.0, 0.0, -3.0, 1.0)
        assert controller.mode == ControllerMode.DECELERATING
        assert controller.recorded_speed == 20.0
