"""Tests for the crane Model engine."""

import logging

import numpy as np
import pytest

from crane3d.config import CraneConfig, ModelType
from crane3d.model import Model
from crane3d.units import Force, Mass

ALL_MODELS = list(ModelType)
STICK_SLIP_MODELS = [m for m in ModelType if m is not ModelType.LINEAR]


def make_model(model_type: ModelType = ModelType.LINEAR, **overrides) -> Model:
    return Model(CraneConfig(model_type=model_type, **overrides))


class TestDefaults:

    def test_default_configuration(self):
        cfg = Model().config
        assert cfg.model_type is ModelType.LINEAR
        assert (cfg.payload_mass, cfg.cart_mass, cfg.rail_mass) == (1.000, 1.155, 2.200)
        assert cfg.gravity == 9.81
        assert (cfg.rail_friction, cfg.cart_friction, cfg.winding_friction) == (100.0, 82.0, 75.0)
        assert (cfg.rail_limit_min, cfg.rail_limit_max) == (-0.30, 0.30)
        assert (cfg.cart_limit_min, cfg.cart_limit_max) == (-0.35, 0.35)
        assert (cfg.line_limit_min, cfg.line_limit_max) == (0.05, 0.90)

    def test_initial_state_hangs_straight_down(self):
        state = Model().get_state()
        assert state.rail_offset == 0.0
        assert state.cart_offset == 0.0
        assert state.lift_line == 0.5
        assert (state.alfa, state.beta) == (0.0, 0.0)
        np.testing.assert_allclose(state.payload, [0.0, 0.0, -0.5], atol=1e-15)

    def test_get_state_is_pure(self):
        model = make_model(ModelType.NON_LINEAR_COMPLETE)
        model.update_fixed(0.01, 0.1, 20.0, -10.0, 0.0)
        counter = model.simulation_counter
        s1 = model.get_state()
        s2 = model.get_state()
        assert s1 == s2
        assert model.simulation_counter == counter

    def test_type_shortcut(self):
        model = Model()
        model.type = ModelType.NON_LINEAR_ORIGINAL
        assert model.config.model_type is ModelType.NON_LINEAR_ORIGINAL


class TestRest:
    """No force, no motion, no numerical drift."""

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_rest_under_zero_force(self, model_type):
        model = make_model(model_type)
        initial = model.get_state().payload
        for _ in range(500):
            state = model.update_fixed(0.01, 0.01, 0.0, 0.0, 0.0)
        np.testing.assert_allclose(state.payload, initial, atol=1e-9)
        assert model.rail.vel == 0.0
        assert model.cart.vel == 0.0
        assert model.alfa_vel == 0.0
        assert model.beta_vel == 0.0

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_free_swing_neither_grows_nor_walks_the_frame(self, model_type):
        """A released swing is too weak to overcome static friction.

        The frame stays put and the swing never gains amplitude.
        """
        model = make_model(model_type)
        model.alfa = 0.1
        model.beta = 0.15

        peak_alfa = peak_beta = 0.0
        for _ in range(2000):
            state = model.update_fixed(0.01, 0.01, 0.0, 0.0, 0.0)
            peak_alfa = max(peak_alfa, abs(state.alfa))
            peak_beta = max(peak_beta, abs(state.beta))

        assert peak_alfa <= 0.1 * 1.02
        assert peak_beta <= 0.15 * 1.02
        assert state.rail_offset == 0.0
        assert state.cart_offset == 0.0
        assert model.rail.vel == 0.0
        assert model.cart.vel == 0.0
    """Fixed-step accumulator."""

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_substep_determinism(self, model_type):
        forces = (15.0, -12.0, -10.0)
        a = make_model(model_type)
        b = make_model(model_type)

        state_a = a.update_fixed(0.01, 0.03, *forces)
        for _ in range(3):
            state_b = b.update_fixed(0.01, 0.01, *forces)

        assert a.simulation_counter == b.simulation_counter == 3
        np.testing.assert_allclose(state_a.as_array(), state_b.as_array(), atol=1e-12)

    def test_remainder_is_carried_over(self):
        model = Model()
        model.update_fixed(0.01, 0.025)
        assert model.simulation_counter == 2
        np.testing.assert_allclose(model.simulation_time, 0.005, atol=1e-12)

        model.update_fixed(0.01, 0.005)
        assert model.simulation_counter == 3
        assert model.simulation_time < 0.01

    def test_short_frames_accumulate(self):
        model = Model()
        for _ in range(9):
            model.update_fixed(0.01, 0.001)
        assert model.simulation_counter == 0
        model.update_fixed(0.01, 0.0015)
        assert model.simulation_counter == 1

    def test_substeps_per_call_are_capped(self, caplog):
        model = make_model(max_substeps=10)
        with caplog.at_level(logging.WARNING, logger="crane3d"):
            model.update_fixed(0.01, 1.0, 10.0, 0.0, 0.0)
        assert model.simulation_counter == 10
        assert model.simulation_time < 0.01
        assert "Sub-step limit" in caplog.text

    @pytest.mark.parametrize("fixed_step", [0.0, -0.01])
    def test_non_positive_fixed_step_is_rejected(self, fixed_step):
        with pytest.raises(ValueError):
            Model().update_fixed(fixed_step, 0.1)

    def test_update_runs_exactly_one_step(self):
        a = make_model(ModelType.NON_LINEAR_COMPLETE)
        b = make_model(ModelType.NON_LINEAR_COMPLETE)
        state_a = a.update(0.01, 20.0, 5.0, -10.0)
        state_b = b.update_fixed(0.01, 0.01, 20.0, 5.0, -10.0)
        assert a.simulation_counter == 1
        np.testing.assert_allclose(state_a.as_array(), state_b.as_array(), atol=1e-15)

    def test_accepts_force_units(self):
        a = Model()
        b = Model()
        a.update_fixed(0.01, 0.1, Force(30.0), Force(-30.0), Force(-10.0))
        b.update_fixed(0.01, 0.1, 30.0, -30.0, -10.0)
        assert a.get_state() == b.get_state()


class TestLimits:
    """Positions never leave the frame."""

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_limit_invariant_under_random_forces(self, model_type):
        rng = np.random.default_rng(1234)
        model = make_model(model_type)
        cfg = model.config

        for _ in range(400):
            # hold each random force for a few frames to build up speed
            f_rail, f_cart = rng.uniform(-60.0, 60.0, size=2)
            f_wind = rng.uniform(-15.0, 15.0)
            for _ in range(5):
                frame = rng.uniform(0.005, 0.05)
                state = model.update_fixed(0.01, frame, f_rail, f_cart, f_wind)

                assert np.all(np.isfinite(state.as_array()))
                assert cfg.rail_limit_min <= state.rail_offset <= cfg.rail_limit_max
                assert cfg.cart_limit_min <= state.cart_offset <= cfg.cart_limit_max
                assert cfg.line_limit_min <= state.lift_line <= cfg.line_limit_max

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_end_stop(self, model_type):
        model = make_model(model_type)
        limit = model.config.rail_limit_max

        for _ in range(500):
            state = model.update_fixed(0.01, 0.01, 50.0, 0.0, 0.0)
            if state.rail_offset >= limit:
                break
        else:
            pytest.fail("rail never reached its end-stop")

        assert state.rail_offset == limit
        assert model.rail.vel == 0.0

    def test_end_stop_holds_while_pushing(self):
        model = make_model(ModelType.LINEAR)
        limit = model.config.rail_limit_max
        for _ in range(300):
            state = model.update_fixed(0.01, 0.01, 50.0, 0.0, 0.0)
        assert state.rail_offset == limit
        assert model.rail.vel == 0.0

    def test_pulling_away_from_end_stop(self):
        model = make_model(ModelType.LINEAR)
        for _ in range(300):
            model.update_fixed(0.01, 0.01, 50.0, 0.0, 0.0)
        for _ in range(10):
            state = model.update_fixed(0.01, 0.01, -50.0, 0.0, 0.0)
        assert state.rail_offset < model.config.rail_limit_max


class TestLiftLine:

    def test_linear_lift_scenario(self):
        """Reeling in with -5 N: the line never grows and never passes its limit."""
        model = make_model(ModelType.LINEAR)
        cfg = model.config
        previous = model.get_state().lift_line
        for _ in range(50):
            state = model.update_fixed(0.01, 0.01, 0.0, 0.0, -5.0)
            assert state.lift_line <= previous
            assert state.lift_line >= cfg.line_limit_min
            previous = state.lift_line

    def test_strong_reel_in_shortens_line_to_limit(self):
        model = make_model(ModelType.LINEAR)
        cfg = model.config
        previous = model.get_state().lift_line
        for _ in range(300):
            state = model.update_fixed(0.01, 0.01, 0.0, 0.0, -20.0)
            assert cfg.line_limit_min <= state.lift_line <= previous
            previous = state.lift_line
        assert state.lift_line == cfg.line_limit_min

    def test_winch_speed_is_limited(self):
        model = make_model(ModelType.NON_LINEAR_COMPLETE)
        for _ in range(20):
            model.update_fixed(0.01, 0.01, 0.0, 0.0, 40.0)
        assert abs(model.line.vel) <= model.config.line_vel_max

    def test_const_line_ignores_winding_force(self):
        model = make_model(ModelType.NON_LINEAR_CONST_LINE)
        for _ in range(100):
            state = model.update_fixed(0.01, 0.01, 20.0, 20.0, -30.0)
        assert state.lift_line == 0.5
        assert model.line.vel == 0.0


class TestFriction:
    """Model-level friction resolution."""

    def test_net_force_stiction(self):
        model = Model()
        net, friction = model.net_force(Force(10.0), 0.0, Mass(2.0), 0.8, 0.7)
        assert net == Force(0.0)
        assert friction == Force(-10.0)

    def test_net_force_sliding(self):
        model = Model()
        net, friction = model.net_force(Force(20.0), 0.0, Mass(2.0), 0.8, 0.7)
        np.testing.assert_allclose(net.value, 20.0 - 0.7 * 2.0 * 9.81)
        np.testing.assert_allclose(friction.value, -0.7 * 2.0 * 9.81)

    def test_net_force_opposes_motion(self):
        model = Model()
        net, _ = model.net_force(Force(0.0), -0.2, Mass(1.0), 0.8, 0.7)
        np.testing.assert_allclose(net.value, 0.7 * 9.81)

    def test_stiction_keeps_nonlinear_rail_still(self):
        """30 N slides the linear model but not the stick-slip model.

        Linear: kinetic friction 0.7·3.355·9.81 ≈ 23 N.
        Non-linear: static threshold 0.8·4.355·9.81 ≈ 34 N.
        """
        linear = make_model(ModelType.LINEAR)
        complete = make_model(ModelType.NON_LINEAR_COMPLETE)
        for _ in range(20):
            linear.update_fixed(0.01, 0.01, 30.0, 0.0, 0.0)
            complete.update_fixed(0.01, 0.01, 30.0, 0.0, 0.0)
        assert linear.get_state().rail_offset > 0.0
        assert complete.get_state().rail_offset == 0.0
        assert complete.get_state().beta == 0.0

    def test_original_model_viscous_terminal_velocity(self):
        """Rail velocity settles near (F - μk·N·g) / Tx = (50 - 29.9) / 100 m/s."""
        model = make_model(ModelType.NON_LINEAR_ORIGINAL)
        for _ in range(20):
            model.update_fixed(0.01, 0.01, 50.0, 0.0, 0.0)
        assert 0.15 < model.rail.vel < 0.21
        assert model.get_state().rail_offset < model.config.rail_limit_max

    def test_original_model_breakaway_keeps_coulomb_friction(self):
        """Just past the static threshold both stick-slip variants agree."""
        original = make_model(ModelType.NON_LINEAR_ORIGINAL)
        complete = make_model(ModelType.NON_LINEAR_COMPLETE)
        rel_original = original.prepare_basic_relations(35.0, 0.0, 0.0)
        rel_complete = complete.prepare_basic_relations(35.0, 0.0, 0.0)

        kinetic = 0.7 * (2.2 + 1.155 + 1.0) * 9.81
        np.testing.assert_allclose(rel_original.n_rail, (35.0 - kinetic) / 3.355)
        np.testing.assert_allclose(rel_original.n_rail, rel_complete.n_rail)
        assert not rel_original.rail_stuck

    @pytest.mark.parametrize("model_type", STICK_SLIP_MODELS)
    def test_line_pull_counts_towards_stiction(self, model_type):
        """Static friction holds the applied force plus the pull of the line.

        With β = 0.3 the line pulls the rail with Mp·g·cosβ·sinβ ≈ 2.77 N
        towards +X; the static threshold is 0.8·4.355·9.81 ≈ 34.18 N.
        """
        pushed = make_model(model_type)
        pushed.beta = 0.3
        assert not pushed.prepare_basic_relations(32.5, 0.0, 0.0).rail_stuck

        held = make_model(model_type)
        held.beta = 0.3
        rel = held.prepare_basic_relations(-32.5, 0.0, 0.0)
        assert rel.rail_stuck
        assert held.rail.f_net == Force(0.0)


class TestSwing:

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_cart_acceleration_swings_payload_back(self, model_type):
        model = make_model(model_type)
        for _ in range(15):
            state = model.update_fixed(0.01, 0.01, 0.0, 20.0, 0.0)
        assert state.cart_offset > 0.0
        assert state.alfa < 0.0
        assert state.payload_y < state.cart_offset

    @pytest.mark.parametrize("model_type", ALL_MODELS)
    def test_rail_acceleration_swings_payload_back(self, model_type):
        model = make_model(model_type)
        for _ in range(15):
            state = model.update_fixed(0.01, 0.01, 50.0, 0.0, 0.0)
        assert state.rail_offset > 0.0
        assert state.beta < 0.0
        assert state.payload_x < state.rail_offset

    def test_swing_is_bounded_by_end_stop(self):
        model = make_model(ModelType.LINEAR, swing_limit=0.2)
        for _ in range(100):
            state = model.update_fixed(0.01, 0.01, 0.0, 60.0, 0.0)
            assert abs(state.alfa) <= 0.2
            assert abs(model.alfa_vel) <= model.config.swing_rate_max

    def test_payload_geometry(self):
        model = Model()
        model.alfa = 0.2
        model.beta = -0.1
        state = model.get_state()
        r = state.lift_line
        np.testing.assert_allclose(
            state.payload,
            [r * np.cos(0.2) * np.sin(-0.1), r * np.sin(0.2), -r * np.cos(0.2) * np.cos(-0.1)],
        )
        np.testing.assert_allclose(np.linalg.norm(state.payload), r)


class TestReset:

    def test_reset_returns_to_rest(self):
        model = make_model(ModelType.NON_LINEAR_COMPLETE)
        model.update_fixed(0.01, 0.505, 40.0, -40.0, -10.0)
        model.reset()
        assert model.get_state() == Model().get_state()
        assert model.simulation_time == 0.0
        assert model.simulation_counter == 0
        assert model.config.model_type is ModelType.NON_LINEAR_COMPLETE

    def test_from_config_shares_config(self):
        cfg = CraneConfig(model_type=ModelType.NON_LINEAR_ORIGINAL, payload_mass=2.0)
        model = Model.from_config(cfg)
        assert model.config is cfg
        assert model.line.mass == Mass(2.0)
        assert model.type is ModelType.NON_LINEAR_ORIGINAL


def test_state_debug_text():
    model = make_model(ModelType.NON_LINEAR_ORIGINAL)
    model.update_fixed(0.01, 0.05, 40.0, 0.0, 0.0)
    text = model.state_debug_text()
    assert "nonlinear-original" in text
    assert "Line" in text
    assert "Steps   5" in text
